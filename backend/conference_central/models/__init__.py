from __future__ import annotations

"""
Core ORM models for the conference backend.

This module depends on:
- conference_central.db.session.Base for the declarative base

It is used by:
- conference_central.schemas (for enum references)
- conference_central.services (for querying and persisting data)

Models:
- Profile: one per authenticated user, keyed by user id
- Conference: owned by (and partitioned under) the organizer's Profile
- ConferenceTopic: one row per topic of a conference
- PrincipalIdentity: identity-cache record used when the auth layer omits a user id
- ConferenceIdAllocation: reserved conference ids, one row per allocation
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

from conference_central.db.session import Base


class TeeShirtSize(str, enum.Enum):
    NOT_SPECIFIED = "NOT_SPECIFIED"
    XS_M = "XS_M"
    XS_W = "XS_W"
    S_M = "S_M"
    S_W = "S_W"
    M_M = "M_M"
    M_W = "M_W"
    L_M = "L_M"
    L_W = "L_W"
    XL_M = "XL_M"
    XL_W = "XL_W"
    XXL_M = "XXL_M"
    XXL_W = "XXL_W"
    XXXL_M = "XXXL_M"
    XXXL_W = "XXXL_W"


class Profile(Base):
    __tablename__ = "profiles"

    user_id = Column(String, primary_key=True)
    display_name = Column(String, nullable=True)
    main_email = Column(String, nullable=False)
    tee_shirt_size = Column(
        Enum(TeeShirtSize),
        default=TeeShirtSize.NOT_SPECIFIED,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    conferences = relationship("Conference", back_populates="organizer")

    def update(
        self,
        display_name: str | None = None,
        tee_shirt_size: TeeShirtSize | None = None,
    ) -> None:
        """Replace display name and/or tee shirt size; None leaves a field as is."""
        if display_name is not None:
            self.display_name = display_name
        if tee_shirt_size is not None:
            self.tee_shirt_size = tee_shirt_size


class Conference(Base):
    __tablename__ = "conferences"

    # Allocated up front by services.conferences.allocate_conference_id
    id = Column(Integer, primary_key=True, autoincrement=False)
    organizer_user_id = Column(
        String, ForeignKey("profiles.user_id"), nullable=False, index=True
    )

    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    city = Column(String, nullable=True, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    month = Column(Integer, nullable=False, default=0, index=True)
    max_attendees = Column(Integer, nullable=False, default=0, index=True)
    seats_available = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    organizer = relationship("Profile", back_populates="conferences")
    topic_rows = relationship(
        "ConferenceTopic",
        cascade="all, delete-orphan",
        order_by="ConferenceTopic.id",
        lazy="selectin",
    )
    topics = association_proxy(
        "topic_rows", "name", creator=lambda name: ConferenceTopic(name=name)
    )

    def __repr__(self) -> str:
        return (
            f"Conference(id={self.id!r}, name={self.name!r}, city={self.city!r}, "
            f"topics={list(self.topics)!r}, startDate={self.start_date!s}, "
            f"endDate={self.end_date!s}, maxAttendees={self.max_attendees!r}, "
            f"organizerUserId={self.organizer_user_id!r})"
        )


class ConferenceTopic(Base):
    __tablename__ = "conference_topics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conference_id = Column(
        Integer,
        ForeignKey("conferences.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String, nullable=False, index=True)


class PrincipalIdentity(Base):
    """
    Identity-cache record for principals that arrive without a user id.

    The store assigns ``user_id`` on insert; services.identity reads it back
    through a fresh session to obtain a stable id for the email.
    """

    __tablename__ = "principal_identities"

    email = Column(String, primary_key=True)
    user_id = Column(
        String, nullable=False, unique=True, default=lambda: uuid.uuid4().hex
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ConferenceIdAllocation(Base):
    __tablename__ = "conference_id_allocations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_user_id = Column(String, nullable=False, index=True)
    allocated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
