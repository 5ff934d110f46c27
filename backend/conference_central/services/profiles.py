# backend/conference_central/services/profiles.py
from __future__ import annotations

"""
Profile persistence helpers.

- load_profile: fetch by user id (None when absent)
- save_profile: upsert by primary key within the caller's transaction
- get_or_create_profile: load, or build an unsaved default Profile
- save_profile_from_form: create-with-defaults or partial update from a
  ProfileForm, run as a retried transaction so two first-time saves for
  the same user both succeed
"""

import logging

from sqlalchemy.orm import Session, sessionmaker

from conference_central import models, schemas
from conference_central.db.transaction import run_in_transaction
from conference_central.services.identity import Principal, default_display_name

logger = logging.getLogger(__name__)


def load_profile(db: Session, user_id: str) -> models.Profile | None:
    return db.get(models.Profile, user_id)


def save_profile(db: Session, profile: models.Profile) -> models.Profile:
    profile = db.merge(profile)
    db.flush()
    return profile


def get_or_create_profile(
    db: Session, principal: Principal, user_id: str
) -> models.Profile:
    """
    Return the caller's Profile, or a new one with default values.

    A new Profile is *not* added to the session; the caller persists it as
    part of its own unit of work.
    """
    profile = load_profile(db, user_id)
    if profile is None:
        profile = models.Profile(
            user_id=user_id,
            display_name=default_display_name(principal.email),
            main_email=principal.email,
            tee_shirt_size=models.TeeShirtSize.NOT_SPECIFIED,
        )
    return profile


def save_profile_from_form(
    session_factory: sessionmaker,
    principal: Principal,
    user_id: str,
    form: schemas.ProfileForm,
    *,
    retries: int = 3,
) -> models.Profile:
    def _work(session: Session) -> models.Profile:
        display_name = form.display_name
        tee_shirt_size = form.tee_shirt_size

        profile = load_profile(session, user_id)
        if profile is None:
            # Populate displayName and teeShirtSize with the default values if null.
            if display_name is None:
                display_name = default_display_name(principal.email)
            if tee_shirt_size is None:
                tee_shirt_size = models.TeeShirtSize.NOT_SPECIFIED
            profile = models.Profile(
                user_id=user_id,
                display_name=display_name,
                main_email=principal.email,
                tee_shirt_size=tee_shirt_size,
            )
            logger.info("Creating profile for user %s", user_id)
        else:
            profile.update(display_name, tee_shirt_size)

        return save_profile(session, profile)

    # A concurrent first save loses on the primary key; the retry loads
    # the winner's row and updates it.
    return run_in_transaction(session_factory, _work, retries=retries)
