import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("coworking_reservations")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel pending reservations that started without a decision
    "expire-stale-pending-reservations": {
        "task": "reservations.expire_stale_pending",
        "schedule": crontab(minute="*/15"),
        "options": {"expires": 600},
    },
}
