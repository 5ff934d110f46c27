# backend/conference_central/api/deps.py
from __future__ import annotations

"""
FastAPI dependencies shared by the endpoints.

Everything is read from ``request.app.state``, which create_app populates.
"""

from typing import Optional

from fastapi import Depends, Request

from conference_central.config import Settings
from conference_central.errors import UnauthorizedError
from conference_central.services.dispatch import TaskDispatcher
from conference_central.services.identity import Principal, principal_from_headers


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> TaskDispatcher:
    return request.app.state.dispatcher


def get_current_principal(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> Optional[Principal]:
    return principal_from_headers(request.headers, settings)


def require_principal(
    principal: Optional[Principal] = Depends(get_current_principal),
) -> Principal:
    if principal is None:
        raise UnauthorizedError()
    return principal
