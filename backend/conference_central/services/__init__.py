# backend/conference_central/services/__init__.py
from __future__ import annotations

"""
Service layer: identity resolution, persistence gateway and task dispatch.
"""
