# backend/conference_central/api/routes.py
from __future__ import annotations

"""
Route table for the conference API.

Each entry binds an endpoint name to an HTTP method and path. Handlers
are plain functions in conference_central.api.profiles / .conferences;
build_api_router turns the table into a FastAPI router at startup.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import APIRouter

from conference_central import schemas
from conference_central.api import conferences, profiles


@dataclass(frozen=True)
class Route:
    name: str
    method: str
    path: str
    endpoint: Callable[..., Any]
    response_model: Any
    tag: str


ROUTES: tuple[Route, ...] = (
    Route("getProfile", "GET", "/profile", profiles.get_profile,
          Optional[schemas.ProfileRead], "profiles"),
    Route("saveProfile", "POST", "/profile", profiles.save_profile,
          schemas.ProfileRead, "profiles"),
    Route("createConference", "POST", "/conference", conferences.create_conference,
          schemas.ConferenceRead, "conferences"),
    Route("queryConferences", "POST", "/queryConferences",
          conferences.query_conferences, list[schemas.ConferenceRead], "conferences"),
    Route("getConferencesCreated", "POST", "/getConferencesCreated",
          conferences.get_conferences_created, list[schemas.ConferenceRead],
          "conferences"),
    Route("filterPlayground", "POST", "/filterPlayground",
          conferences.filter_playground, list[schemas.ConferenceRead], "conferences"),
    Route("getConference", "GET", "/conference/{conference_id}",
          conferences.get_conference, schemas.ConferenceRead, "conferences"),
)


def build_api_router(routes: tuple[Route, ...] = ROUTES) -> APIRouter:
    router = APIRouter()
    for route in routes:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            name=route.name,
            operation_id=route.name,
            response_model=route.response_model,
            tags=[route.tag],
        )
    return router
