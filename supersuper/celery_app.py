"""Celery application configuration."""

from celery import Celery

from supersuper.config import get_settings

settings = get_settings()

app = Celery(
    "supersuper",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["supersuper.tasks.categorization"],
)

# Task arguments and results are lists of product ids and count dicts
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_time_limit=60,  # keyword classification of a trip's items
)
