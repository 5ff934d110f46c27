# backend/conference_central/services/conferences.py
from __future__ import annotations

"""
Conference persistence and queries.

Creation runs in two steps:

1. ``allocate_conference_id`` reserves an id in its own short transaction.
2. ``create_conference_transaction`` writes the owner Profile and the
   Conference atomically and parks the confirmation email task on the same
   transaction.

Step 1 stays outside the retried transaction so a retry reuses the id it
already has instead of reserving another one.

Queries are conjunctive filters over a fixed field set. At most one field
may carry inequality operators, matching the query model the web client
was built against.
"""

import logging
import operator
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from sqlalchemy.orm import Session, sessionmaker

from conference_central import models, schemas
from conference_central.db.transaction import run_in_transaction
from conference_central.errors import (
    InvalidArgumentError,
    NotFoundError,
    UnsupportedQueryError,
)
from conference_central.services import profiles
from conference_central.services.dispatch import (
    TaskDispatcher,
    confirmation_email_task,
)
from conference_central.services.identity import Principal

logger = logging.getLogger(__name__)

CONF_DEFAULTS = {
    "city": "Default City",
    "max_attendees": 0,
    "seats_available": 0,
    "topics": ["Default", "Topic"],
}

OPERATORS: dict[str, tuple[str, Callable[[Any, Any], Any]]] = {
    "EQ": ("=", operator.eq),
    "GT": (">", operator.gt),
    "GTEQ": (">=", operator.ge),
    "LT": ("<", operator.lt),
    "LTEQ": ("<=", operator.le),
    "NE": ("!=", operator.ne),
}

FIELDS = {
    "CITY": "city",
    "TOPIC": "topics",
    "MONTH": "month",
    "MAX_ATTENDEES": "max_attendees",
}

INTEGER_FIELDS = {"month", "max_attendees"}


@dataclass(frozen=True)
class ConferenceFilter:
    field: str
    symbol: str
    compare: Callable[[Any, Any], Any]
    value: Any

    @property
    def is_inequality(self) -> bool:
        return self.symbol != "="


# ---- Creation ----


def allocate_conference_id(session_factory: sessionmaker, owner_user_id: str) -> int:
    """Reserve a conference id for ``owner_user_id``. Commits immediately."""
    with session_factory() as session:
        allocation = models.ConferenceIdAllocation(owner_user_id=owner_user_id)
        session.add(allocation)
        session.commit()
        return allocation.id


def build_conference(
    conference_id: int, user_id: str, form: schemas.ConferenceForm
) -> models.Conference:
    """Build a Conference from form data, filling defaults for missing fields.

    ``form.name`` is checked by create_conference before an id is allocated.
    """
    max_attendees = (
        form.max_attendees
        if form.max_attendees is not None
        else CONF_DEFAULTS["max_attendees"]
    )
    start_date = form.start_date
    return models.Conference(
        id=conference_id,
        organizer_user_id=user_id,
        name=form.name,
        description=form.description,
        city=form.city or CONF_DEFAULTS["city"],
        topics=list(form.topics or CONF_DEFAULTS["topics"]),
        start_date=start_date,
        end_date=form.end_date,
        month=start_date.month if start_date else 0,
        max_attendees=max_attendees,
        seats_available=(
            max_attendees if max_attendees > 0 else CONF_DEFAULTS["seats_available"]
        ),
    )


def create_conference_transaction(
    session_factory: sessionmaker,
    dispatcher: TaskDispatcher,
    conference_id: int,
    principal: Principal,
    user_id: str,
    form: schemas.ConferenceForm,
    *,
    retries: int = 3,
) -> models.Conference:
    def _work(session: Session) -> models.Conference:
        profile = profiles.get_or_create_profile(session, principal, user_id)
        conference = build_conference(conference_id, user_id, form)
        session.add_all([profile, conference])
        session.flush()
        dispatcher.enqueue(
            session,
            confirmation_email_task(profile.main_email, repr(conference)),
        )
        return conference

    return run_in_transaction(session_factory, _work, retries=retries)


def create_conference(
    session_factory: sessionmaker,
    dispatcher: TaskDispatcher,
    principal: Principal,
    user_id: str,
    form: schemas.ConferenceForm,
    *,
    retries: int = 3,
) -> models.Conference:
    if not form.name:
        raise InvalidArgumentError("Conference 'name' field required")

    conference_id = allocate_conference_id(session_factory, user_id)
    conference = create_conference_transaction(
        session_factory,
        dispatcher,
        conference_id,
        principal,
        user_id,
        form,
        retries=retries,
    )
    logger.info("Created conference %s for user %s", conference.id, user_id)
    return conference


# ---- Reads ----


def get_conference(db: Session, conference_id: int) -> models.Conference:
    conference = db.get(models.Conference, conference_id)
    if conference is None:
        raise NotFoundError(f"No conference found with id: {conference_id}")
    return conference


def list_conferences_ordered_by_name(db: Session) -> list[models.Conference]:
    return db.query(models.Conference).order_by(models.Conference.name.asc()).all()


def list_conferences_owned_by(db: Session, user_id: str) -> list[models.Conference]:
    return (
        db.query(models.Conference)
        .filter(models.Conference.organizer_user_id == user_id)
        .order_by(models.Conference.name.asc())
        .all()
    )


def format_filters(
    raw_filters: Iterable[schemas.ConferenceQueryForm],
) -> tuple[str | None, list[ConferenceFilter]]:
    """Parse, check validity and format user supplied filters.

    Returns the field carrying inequality operators (if any) and the
    parsed filters.
    """
    formatted: list[ConferenceFilter] = []
    inequality_field: str | None = None
    for raw in raw_filters:
        try:
            field = FIELDS[raw.field]
            symbol, compare = OPERATORS[raw.operator]
        except KeyError:
            raise InvalidArgumentError(
                "Filter contains invalid field or operator.",
                meta={"field": raw.field, "operator": raw.operator},
            )

        value: Any = raw.value
        if field in INTEGER_FIELDS:
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise InvalidArgumentError(
                    "Non-integer in integer field.",
                    meta={"field": raw.field, "value": raw.value},
                )
        else:
            value = str(value)

        filtr = ConferenceFilter(field=field, symbol=symbol, compare=compare, value=value)
        # Every operation except "=" is an inequality
        if filtr.is_inequality:
            if inequality_field and inequality_field != field:
                raise UnsupportedQueryError(
                    "Inequality filter is allowed on only one field.",
                    meta={"fields": [inequality_field, field]},
                )
            inequality_field = field
        formatted.append(filtr)
    return inequality_field, formatted


def _filter_clause(filtr: ConferenceFilter):
    if filtr.field == "topics":
        # Repeated field: matches when any topic satisfies the comparison
        return models.Conference.topic_rows.any(
            filtr.compare(models.ConferenceTopic.name, filtr.value)
        )
    return filtr.compare(getattr(models.Conference, filtr.field), filtr.value)


def list_conferences_filtered(
    db: Session, raw_filters: Iterable[schemas.ConferenceQueryForm]
) -> list[models.Conference]:
    inequality_field, filters = format_filters(raw_filters)

    query = db.query(models.Conference)
    for filtr in filters:
        query = query.filter(_filter_clause(filtr))

    # If exists, sort on inequality filter first
    if inequality_field and inequality_field != "topics":
        query = query.order_by(getattr(models.Conference, inequality_field).asc())
    return query.order_by(models.Conference.name.asc()).all()
