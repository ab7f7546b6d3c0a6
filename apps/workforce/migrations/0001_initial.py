import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="WorkforceEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("partition", models.CharField(
                    choices=[("north", "Perth North"), ("south", "Perth South")], max_length=10,
                )),
                ("fte", models.FloatField(
                    default=0, validators=[django.core.validators.MinValueValidator(0)],
                )),
                ("role", models.CharField(blank=True, default="", max_length=100)),
                ("ethnicity", models.CharField(blank=True, default="", max_length=100)),
                ("languages", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "workforce_entries",
                "ordering": ["partition", "id"],
                "verbose_name_plural": "workforce entries",
            },
        ),
    ]
