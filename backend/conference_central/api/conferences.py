# backend/conference_central/api/conferences.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from conference_central import schemas
from conference_central.api.deps import (
    get_app_settings,
    get_dispatcher,
    require_principal,
)
from conference_central.config import Settings
from conference_central.db.session import get_db, get_session_factory
from conference_central.services import conferences
from conference_central.services.dispatch import TaskDispatcher
from conference_central.services.identity import Principal, resolve_user_id
from conference_central.services.statsig_client import ProductEvents, get_events

PLAYGROUND_FILTERS = [
    schemas.ConferenceQueryForm(field="CITY", operator="EQ", value="London"),
    schemas.ConferenceQueryForm(
        field="TOPIC", operator="EQ", value="Medical Innovations"
    ),
]


def create_conference(
    payload: schemas.ConferenceForm,
    principal: Principal = Depends(require_principal),
    session_factory: sessionmaker = Depends(get_session_factory),
    dispatcher: TaskDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_app_settings),
    events: ProductEvents = Depends(get_events),
) -> schemas.ConferenceRead:
    """Create a conference owned by the caller and queue the confirmation email."""
    user_id = resolve_user_id(session_factory, principal)
    conference = conferences.create_conference(
        session_factory,
        dispatcher,
        principal,
        user_id,
        payload,
        retries=settings.transaction_retries,
    )
    events.log(
        "conference_created",
        user_id=user_id,
        metadata={"conference_id": conference.id, "city": conference.city},
    )
    return conference


def query_conferences(
    payload: Optional[schemas.ConferenceQueryForms] = None,
    db: Session = Depends(get_db),
) -> list[schemas.ConferenceRead]:
    """All conferences by name, optionally narrowed by filters."""
    if payload is None or not payload.filters:
        return conferences.list_conferences_ordered_by_name(db)
    return conferences.list_conferences_filtered(db, payload.filters)


def get_conferences_created(
    principal: Principal = Depends(require_principal),
    session_factory: sessionmaker = Depends(get_session_factory),
    db: Session = Depends(get_db),
) -> list[schemas.ConferenceRead]:
    user_id = resolve_user_id(session_factory, principal)
    return conferences.list_conferences_owned_by(db, user_id)


def filter_playground(db: Session = Depends(get_db)) -> list[schemas.ConferenceRead]:
    return conferences.list_conferences_filtered(db, PLAYGROUND_FILTERS)


def get_conference(
    conference_id: int,
    db: Session = Depends(get_db),
) -> schemas.ConferenceRead:
    return conferences.get_conference(db, conference_id)
