from django.db import migrations, models

import apps.clients.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.CharField(
                    default=apps.clients.models.generate_client_id,
                    editable=False, max_length=20, primary_key=True, serialize=False,
                )),
                ("_full_name_encrypted", models.BinaryField(default=b"")),
                ("_birth_date_encrypted", models.BinaryField(blank=True, default=b"")),
                ("_address_encrypted", models.BinaryField(blank=True, default=b"")),
                ("sex", models.CharField(
                    blank=True,
                    choices=[
                        ("Male", "Male"), ("Female", "Female"), ("Intersex", "Intersex"),
                        ("Other", "Other"), ("Prefer not to say", "Prefer not to say"),
                    ],
                    default="", max_length=30,
                )),
                ("ethnicity", models.CharField(blank=True, default="", max_length=100)),
                ("country_of_birth", models.CharField(blank=True, default="", max_length=100)),
                ("languages", models.JSONField(blank=True, default=list)),
                ("referral_source", models.CharField(blank=True, default="", max_length=100)),
                ("referral_date", models.DateField(blank=True, null=True)),
                ("postcode", models.CharField(blank=True, default="", max_length=10)),
                ("region", models.CharField(
                    blank=True,
                    choices=[("North", "Perth North"), ("South", "Perth South")],
                    default="", max_length=10,
                )),
                ("portal_password", models.CharField(blank=True, default="", max_length=128)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "clients",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
