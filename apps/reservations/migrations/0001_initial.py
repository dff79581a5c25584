from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("resources", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
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
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("MEETING", "Meeting"),
                            ("WORKSHOP", "Workshop"),
                            ("CONFERENCE", "Conference"),
                            ("TRAINING", "Training"),
                            ("STUDY", "Study session"),
                            ("OTHER", "Other"),
                        ],
                        default="OTHER",
                        max_length=20,
                    ),
                ),
                ("reason", models.TextField(blank=True)),
                ("start", models.DateTimeField()),
                ("end", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("denied_reason", models.CharField(blank=True, max_length=255)),
                (
                    "rrule",
                    models.CharField(
                        blank=True,
                        help_text="RFC-5545 recurrence rule, empty for a single occurrence.",
                        max_length=255,
                    ),
                ),
                ("recurrence_end", models.DateTimeField(blank=True, null=True)),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="filed_reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "resource",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="resources.resource",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["start", "id"],
                "indexes": [
                    models.Index(fields=["resource", "start"], name="reservation_resource_start_idx"),
                    models.Index(fields=["actor_type", "actor_id"], name="reservation_actor_idx"),
                    models.Index(fields=["status"], name="reservation_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end__gt", models.F("start"))),
                        name="reservation_valid_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("rrule", ""), ("recurrence_end__isnull", False), _connector="OR"),
                        name="reservation_recurring_has_end",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationException",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("original_start", models.DateTimeField()),
                ("is_cancelled", models.BooleanField(default=True)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="exceptions",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation exception",
                "verbose_name_plural": "Reservation exceptions",
                "ordering": ["original_start"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("reservation", "original_start"),
                        name="reservation_exception_unique_occurrence",
                    ),
                ],
            },
        ),
    ]
