from __future__ import annotations

"""
Pydantic schemas for request/response models.

This module is the API contract layer and depends on:
- conference_central.models.TeeShirtSize

Wire names keep the camelCase the web client already speaks
(``displayName``, ``teeShirtSize``, ...); snake_case names are accepted
on input as well.
"""

from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from conference_central.models import TeeShirtSize


# ---------- Profile Schemas ----------


class ProfileForm(BaseModel):
    """Fields a user may set on their own profile; None means "leave as is"."""

    display_name: Optional[str] = Field(default=None, alias="displayName")
    tee_shirt_size: Optional[TeeShirtSize] = Field(
        default=None, alias="teeShirtSize"
    )

    class Config:
        populate_by_name = True

    @field_validator("display_name")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class ProfileRead(BaseModel):
    user_id: str = Field(alias="userId")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    main_email: str = Field(alias="mainEmail")
    tee_shirt_size: TeeShirtSize = Field(alias="teeShirtSize")

    class Config:
        from_attributes = True
        populate_by_name = True


# ---------- Conference Schemas ----------


class ConferenceForm(BaseModel):
    """
    Conference creation payload.

    Dates may be sent as full ISO timestamps; only the date part is kept.
    Empty city/topics/maxAttendees are filled with defaults on creation;
    a negative maxAttendees is rejected.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    topics: Optional[List[str]] = None
    city: Optional[str] = None
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    max_attendees: Optional[int] = Field(default=None, alias="maxAttendees", ge=0)

    class Config:
        populate_by_name = True

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def date_part_only(cls, value):
        if isinstance(value, str):
            return value[:10] or None
        return value


class ConferenceRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    organizer_user_id: str = Field(alias="organizerUserId")
    topics: List[str] = Field(default_factory=list)
    city: Optional[str] = None
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    month: int = 0
    max_attendees: int = Field(default=0, alias="maxAttendees")
    seats_available: int = Field(default=0, alias="seatsAvailable")

    class Config:
        from_attributes = True
        populate_by_name = True

    @field_validator("topics", mode="before")
    @classmethod
    def topics_as_list(cls, value):
        # ORM objects expose topics through an association proxy
        if value is None:
            return []
        if not isinstance(value, list):
            return list(value)
        return value


# ---------- Query Schemas ----------


class ConferenceQueryForm(BaseModel):
    """
    One filter clause, e.g. ``{"field": "CITY", "operator": "EQ", "value": "London"}``.

    field: CITY | TOPIC | MONTH | MAX_ATTENDEES
    operator: EQ | GT | GTEQ | LT | LTEQ | NE
    """

    field: str
    operator: str
    value: Union[str, int]


class ConferenceQueryForms(BaseModel):
    filters: List[ConferenceQueryForm] = Field(default_factory=list)
