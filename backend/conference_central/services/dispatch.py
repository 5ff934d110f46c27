# backend/conference_central/services/dispatch.py
from __future__ import annotations

"""
Transaction-bound task dispatch.

``TaskDispatcher.enqueue(session, task)`` does not publish anything right
away. The task is parked on the SQLAlchemy session and handed to the task
queue only when that session's outermost transaction commits; if the
transaction rolls back (or the session is closed without committing) the
task is dropped. A retried transaction therefore publishes exactly once.

Supports an in-memory queue for tests/local runs and a Celery-backed queue
for production.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol

from celery import Celery
from sqlalchemy import event
from sqlalchemy.orm import Session, SessionTransaction

from conference_central.services.celery_app import (
    CONFIRMATION_EMAIL_TASK,
    create_celery_app,
)

logger = logging.getLogger(__name__)

_PENDING_KEY = "pending_tasks"
_HOOKED_KEY = "task_dispatch_hooked"


@dataclass(frozen=True)
class TaskDescriptor:
    """A named unit of deferred work with string parameters."""

    name: str
    params: Mapping[str, str] = field(default_factory=dict)
    queue: Optional[str] = None


class TaskQueue(Protocol):
    """Minimal queue interface for publishing deferred tasks."""

    def send(self, task: TaskDescriptor) -> None:
        ...


@dataclass
class InMemoryTaskQueue:
    """Records published tasks instead of sending them anywhere."""

    sent: list[TaskDescriptor] = field(default_factory=list)

    def send(self, task: TaskDescriptor) -> None:
        self.sent.append(task)


@dataclass
class CeleryTaskQueue:
    """Publishes tasks by name through a Celery client."""

    celery_app: Celery
    default_queue: str = "default"

    def send(self, task: TaskDescriptor) -> None:
        self.celery_app.send_task(
            task.name,
            kwargs=dict(task.params),
            queue=task.queue or self.default_queue,
        )


def confirmation_email_task(email: str, conference_info: str) -> TaskDescriptor:
    return TaskDescriptor(
        name=CONFIRMATION_EMAIL_TASK,
        params={"email": email, "conferenceInfo": conference_info},
    )


class TaskDispatcher:
    def __init__(self, queue: TaskQueue):
        self.queue = queue

    def enqueue(self, session: Session, task: TaskDescriptor) -> None:
        """Publish ``task`` if and only if ``session``'s transaction commits."""
        if not session.in_transaction():
            raise RuntimeError("Tasks can only be enqueued inside a transaction")
        if not session.info.get(_HOOKED_KEY):
            event.listen(session, "after_commit", self._after_commit)
            event.listen(session, "after_transaction_end", self._after_transaction_end)
            session.info[_HOOKED_KEY] = True
        session.info.setdefault(_PENDING_KEY, []).append(task)
        logger.debug("Task %s parked until commit", task.name)

    def _after_commit(self, session: Session) -> None:
        pending = session.info.pop(_PENDING_KEY, [])
        for task in pending:
            try:
                self.queue.send(task)
                logger.debug("Task %s published", task.name)
            except Exception as exc:  # noqa: BLE001
                # The transaction is already committed; nothing left to undo.
                logger.error("Publishing task %s failed: %s", task.name, exc)

    def _after_transaction_end(
        self, session: Session, transaction: SessionTransaction
    ) -> None:
        if transaction.parent is None and session.info.get(_PENDING_KEY):
            dropped = session.info.pop(_PENDING_KEY)
            logger.debug("Dropped %d task(s) from a rolled back transaction", len(dropped))


def build_task_queue(settings) -> TaskQueue:
    """Return the queue backend selected by settings."""
    if settings.use_in_memory_task_queue:
        return InMemoryTaskQueue()

    return CeleryTaskQueue(
        celery_app=create_celery_app(settings),
        default_queue=settings.task_queue_name,
    )
