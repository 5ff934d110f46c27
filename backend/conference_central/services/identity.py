# backend/conference_central/services/identity.py
from __future__ import annotations

"""
Identity resolution for authenticated callers.

The service sits behind an identity-aware proxy that forwards the caller's
email and, usually, a stable user id in request headers. Some clients
arrive with the email only. For those, ``resolve_user_id`` runs a two-step
ensure-identity protocol against the local store:

1. persist a PrincipalIdentity row keyed by the email and commit it;
2. read it back through a *fresh* session and use the ``user_id`` the
   store assigned.

This mirrors a quirk of the hosting platform the web client was first
written for; proxies that always send an id never take this path.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from conference_central import models
from conference_central.config import Settings
from conference_central.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as reported by the auth layer."""

    email: str
    user_id: Optional[str] = None


def _strip_prefix(value: str, prefix: str) -> str:
    value = value.strip()
    if prefix and value.startswith(prefix):
        return value[len(prefix):]
    return value


def principal_from_headers(
    headers: Mapping[str, str], settings: Settings
) -> Optional[Principal]:
    """Build the caller principal from proxy headers; None when unauthenticated."""
    raw_email = headers.get(settings.auth_email_header)
    if not raw_email:
        return None
    email = _strip_prefix(raw_email, settings.auth_header_prefix)
    if not email:
        return None

    raw_user_id = headers.get(settings.auth_user_id_header)
    user_id = _strip_prefix(raw_user_id, settings.auth_header_prefix) if raw_user_id else None
    return Principal(email=email, user_id=user_id or None)


def default_display_name(email: str) -> str:
    """
    Get the display name from the user's email. For example, if the email is
    lemoncake@example.com, then the display name becomes "lemoncake".
    """
    if not email or "@" not in email:
        raise InvalidArgumentError(
            f"Cannot derive a display name from email {email!r}",
            meta={"email": email},
        )
    return email.split("@", 1)[0]


def _ensure_identity_record(session_factory: sessionmaker, email: str) -> None:
    with session_factory() as session:
        if session.get(models.PrincipalIdentity, email) is not None:
            return
        session.add(models.PrincipalIdentity(email=email))
        try:
            session.commit()
        except IntegrityError:
            # Someone else stored it first; their row is just as good.
            session.rollback()


def resolve_user_id(session_factory: sessionmaker, principal: Principal) -> str:
    """Return a stable, non-null user id for ``principal``."""
    if principal.user_id:
        return principal.user_id

    logger.info("userId is null, so trying to obtain it from the datastore.")
    _ensure_identity_record(session_factory, principal.email)

    # New session so nothing cached by the write above is reused.
    with session_factory() as session:
        record = session.get(models.PrincipalIdentity, principal.email)
        user_id = record.user_id
    logger.info("Obtained the userId: %s", user_id)
    return user_id
