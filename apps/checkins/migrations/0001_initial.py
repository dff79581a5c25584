from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("reservations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CheckIn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "actor_type",
                    models.CharField(
                        choices=[("PERSON", "Person"), ("GROUP", "Group")],
                        default="PERSON",
                        max_length=10,
                    ),
                ),
                ("actor_id", models.CharField(max_length=64)),
                ("check_in_time", models.DateTimeField()),
                ("check_out_time", models.DateTimeField(blank=True, null=True)),
                (
                    "closed_by",
                    models.CharField(blank=True, choices=[("ACTOR", "Actor"), ("ADMIN", "Admin")], max_length=10),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "reservation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="check_ins",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Check-in",
                "verbose_name_plural": "Check-ins",
                "ordering": ["-check_in_time"],
                "indexes": [models.Index(fields=["check_in_time"], name="checkin_time_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("check_out_time__isnull", True)),
                        fields=("actor_type", "actor_id"),
                        name="checkin_single_open_per_actor",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("check_out_time__isnull", True),
                            ("check_out_time__gte", models.F("check_in_time")),
                            _connector="OR",
                        ),
                        name="checkin_out_after_in",
                    ),
                ],
            },
        ),
    ]
