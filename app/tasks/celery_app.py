from celery import Celery
from app.config import get_settings

settings = get_settings()

celery_app = Celery(
    "cleverkit",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks.analysis_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # Acknowledge after the task finishes: a lost worker means redelivery.
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    # No task time limits; each OpenAI call has its own timeout.
    worker_max_tasks_per_child=100,

    task_routes={
        "tasks.run_brand_analysis": {"queue": "analysis"},
    },
)
