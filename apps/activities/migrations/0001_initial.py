from django.db import migrations, models
import django.utils.timezone

import apps.activities.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.CharField(
                    default=apps.activities.models.generate_activity_id,
                    editable=False, max_length=20, primary_key=True, serialize=False,
                )),
                ("client_id", models.CharField(db_index=True, max_length=20)),
                ("date", models.DateField()),
                ("location", models.CharField(
                    blank=True,
                    choices=[
                        ("Canning", "Canning"), ("Gosnells", "Gosnells"), ("Mandurah", "Mandurah"),
                        ("Stirling", "Stirling"), ("Swan", "Swan"), ("Wanneroo", "Wanneroo"),
                    ],
                    default="", max_length=30,
                )),
                ("navigation_assistance", models.JSONField(blank=True, default=list)),
                ("other_assistance", models.TextField(blank=True, default="")),
                ("services_accessed", models.JSONField(blank=True, default=list)),
                ("other_services", models.TextField(blank=True, default="")),
                ("educational_resources", models.JSONField(blank=True, default=list)),
                ("other_education", models.TextField(blank=True, default="")),
                ("preventive_services", models.JSONField(blank=True, default=list)),
                ("maternal_child_health", models.JSONField(blank=True, default=list)),
                ("referrals_made", models.TextField(blank=True, default="")),
                ("follow_up_actions", models.TextField(blank=True, default="")),
                ("is_discharge", models.BooleanField(default=False)),
                ("discharge_date", models.DateField(blank=True, null=True)),
                ("discharge_reason", models.TextField(blank=True, default="")),
                ("created_by", models.EmailField(blank=True, db_index=True, default="", max_length=254)),
                ("created_by_name", models.CharField(blank=True, default="", max_length=255)),
                ("created_by_role", models.CharField(blank=True, default="", max_length=20)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "activities",
                "ordering": ["-date", "-created_at"],
                "verbose_name_plural": "activities",
            },
        ),
    ]
