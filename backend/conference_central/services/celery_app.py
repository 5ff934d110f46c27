# backend/conference_central/services/celery_app.py
from __future__ import annotations

"""
Celery application configuration for deferred work.

The confirmation email task is executed by an external worker that
consumes the configured queue; this service only publishes to it by task
name (see conference_central.services.dispatch.CeleryTaskQueue).
"""

from celery import Celery

from conference_central.config import Settings

CONFIRMATION_EMAIL_TASK = "tasks.send_confirmation_email"


def create_celery_app(settings: Settings) -> Celery:
    """Build the Celery client used to publish tasks. No broker I/O happens here."""
    celery_app = Celery(
        "conference_tasks",
        broker=settings.celery_broker_url,
        backend=settings.celery_result_backend,
    )

    # Route every task we publish to the configured queue
    celery_app.conf.task_routes = {
        "tasks.*": {"queue": settings.task_queue_name},
    }
    return celery_app
