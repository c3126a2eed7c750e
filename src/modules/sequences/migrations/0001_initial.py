import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Counter",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("prefix", models.CharField(max_length=32, unique=True)),
                ("number", models.PositiveIntegerField(default=0)),
                ("postfix", models.CharField(max_length=16)),
            ],
            options={
                "db_table": "counters",
                "ordering": ["prefix"],
            },
        ),
    ]
