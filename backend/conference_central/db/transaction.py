# backend/conference_central/db/transaction.py
from __future__ import annotations

"""
Scoped, retrying transactions.

``run_in_transaction`` opens a fresh session per attempt, runs the caller's
work function inside ``session.begin()`` and commits when it returns.
Every other exit path rolls back. Conflicts reported by the database
(serialization failures, lock timeouts, concurrent inserts of the same
primary or unique key) are retried. Other integrity errors, such as NOT
NULL or foreign key violations, propagate unchanged along with anything
else the work raises.

Work functions must be safe to run more than once. Anything that must
happen exactly once per logical operation (id allocation, for example)
belongs outside the work function.
"""

import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from conference_central.errors import TransactionFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_conflict(exc: DBAPIError) -> bool:
    """True when ``exc`` is a race another attempt could resolve."""
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, IntegrityError):
        orig = exc.orig
        if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
            return True
        return "UNIQUE constraint failed" in str(orig)
    return False


def run_in_transaction(
    session_factory: sessionmaker,
    work: Callable[[Session], T],
    *,
    retries: int = 3,
) -> T:
    """Run ``work(session)`` atomically, retrying on conflicts.

    Makes at most ``retries + 1`` attempts. Raises TransactionFailedError
    once they are exhausted.
    """
    attempt = 0
    while True:
        attempt += 1
        with session_factory() as session:
            try:
                with session.begin():
                    result = work(session)
            except (OperationalError, IntegrityError) as exc:
                if not is_conflict(exc):
                    raise
                if attempt > retries:
                    logger.error(
                        "Transaction failed after %d attempts: %s", attempt, exc
                    )
                    raise TransactionFailedError(
                        f"Transaction failed after {attempt} attempts",
                        meta={"attempts": attempt},
                    ) from exc
                logger.warning(
                    "Transaction conflict on attempt %d, retrying: %s", attempt, exc
                )
                continue
            return result
