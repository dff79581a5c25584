from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ResourcePool",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120, unique=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("COWORKING", "Coworking"),
                            ("LAB", "Laboratory"),
                            ("AUDITORIUM", "Auditorium"),
                            ("MEETING", "Meeting room"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "capacity",
                    models.IntegerField(default=-1, help_text="Number of interchangeable units, -1 when not counted."),
                ),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Resource pool",
                "verbose_name_plural": "Resource pools",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["kind"], name="resource_pool_kind_idx")],
            },
        ),
        migrations.CreateModel(
            name="Resource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("serial_number", models.CharField(blank=True, max_length=64)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "pool",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="resources",
                        to="resources.resourcepool",
                    ),
                ),
            ],
            options={
                "verbose_name": "Resource",
                "verbose_name_plural": "Resources",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(fields=("pool", "name"), name="resource_unique_name_per_pool"),
                ],
            },
        ),
    ]
