# backend/conference_central/api/__init__.py
from __future__ import annotations

"""
API surface.

Exposes ``build_api_router`` and the ``ROUTES`` table it is built from;
the FastAPI app includes the router under the configured prefix.
"""

from .routes import ROUTES, Route, build_api_router  # noqa: F401
