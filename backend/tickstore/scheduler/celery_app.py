from celery import Celery
from celery.schedules import crontab

from tickstore.core.config import settings

app = Celery("tickstore")
app.conf.broker_url = settings.CELERY_BROKER_URL
app.conf.result_backend = settings.CELERY_RESULT_BACKEND
app.conf.timezone = settings.CELERY_TIMEZONE
app.conf.enable_utc = False

app.autodiscover_tasks(["tickstore"])
app.conf.imports = ("tickstore.tasks.intraday",)

app.conf.beat_schedule = {
    "sync-intraday": {
        "task": "tickstore.tasks.intraday.sync_intraday",
        "schedule": crontab(
            hour=settings.INTRADAY_SYNC_HOUR,
            minute=settings.INTRADAY_SYNC_MINUTE,
        ),
    },
}
