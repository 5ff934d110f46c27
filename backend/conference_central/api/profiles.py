# backend/conference_central/api/profiles.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from conference_central import schemas
from conference_central.api.deps import get_app_settings, require_principal
from conference_central.config import Settings
from conference_central.db.session import get_db, get_session_factory
from conference_central.services import profiles
from conference_central.services.identity import Principal, resolve_user_id
from conference_central.services.statsig_client import ProductEvents, get_events


def get_profile(
    principal: Principal = Depends(require_principal),
    session_factory: sessionmaker = Depends(get_session_factory),
    db: Session = Depends(get_db),
) -> Optional[schemas.ProfileRead]:
    """Return the caller's profile, or null if they have not saved one yet."""
    user_id = resolve_user_id(session_factory, principal)
    return profiles.load_profile(db, user_id)


def save_profile(
    payload: Optional[schemas.ProfileForm] = None,
    principal: Principal = Depends(require_principal),
    session_factory: sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_app_settings),
    events: ProductEvents = Depends(get_events),
) -> schemas.ProfileRead:
    """Create the caller's profile with defaults, or update the fields provided."""
    user_id = resolve_user_id(session_factory, principal)
    profile = profiles.save_profile_from_form(
        session_factory,
        principal,
        user_id,
        payload or schemas.ProfileForm(),
        retries=settings.transaction_retries,
    )
    events.log(
        "profile_saved",
        user_id=user_id,
        metadata={"tee_shirt_size": profile.tee_shirt_size.value},
    )
    return profile
