# backend/conference_central/db/__init__.py
from __future__ import annotations

"""
Database plumbing: engine/session wiring and the scoped transaction helper.
"""
