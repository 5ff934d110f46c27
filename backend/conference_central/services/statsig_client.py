# backend/conference_central/services/statsig_client.py
from __future__ import annotations

"""
Product analytics events (profile saved, conference created) via Statsig.

One ``ProductEvents`` instance is built per app in create_app and kept on
``app.state.events``. Without a server secret every call is a no-op, which
is what local runs and tests get.
"""

import logging
from typing import Any

from fastapi import Request
from statsig import StatsigEvent, StatsigOptions, StatsigServer, StatsigUser

from conference_central.config import Settings

logger = logging.getLogger(__name__)


class ProductEvents:
    def __init__(self, secret_key: str | None, environment: str):
        self._server: StatsigServer | None = None
        if not secret_key:
            return

        try:
            server = StatsigServer()
            server.initialize(secret_key, StatsigOptions(tier=environment))
            self._server = server
        except Exception as exc:  # noqa: BLE001
            logger.warning("Statsig initialization failed: %s", exc)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProductEvents":
        return cls(settings.statsig_server_secret, settings.environment)

    @property
    def enabled(self) -> bool:
        return self._server is not None

    def log(
        self,
        event_name: str,
        *,
        user_id: str,
        value: float | int | str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if not self._server:
            return

        try:
            self._server.log_event(
                StatsigEvent(
                    StatsigUser(user_id),
                    event_name,
                    value=value,
                    metadata=metadata,
                )
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig event %s failed: %s", event_name, exc)

    def shutdown(self) -> None:
        if not self._server:
            return

        try:
            self._server.shutdown()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig shutdown failed: %s", exc)


def get_events(request: Request) -> ProductEvents:
    return request.app.state.events
