# backend/conference_central/__init__.py
from __future__ import annotations

"""
Marks `conference_central` as a Python package.

Routers live in conference_central/api, persistence and dispatch helpers
in conference_central/services and conference_central/db.
"""
