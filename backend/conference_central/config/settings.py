from __future__ import annotations

"""backend/conference_central/config/settings.py

Application configuration using environment-driven settings.

This module centralizes:
- database connection URL
- Celery broker configuration and the confirmation task queue
- transaction retry policy
- identity-aware proxy header names used to build the caller principal
- CORS configuration
- Statsig analytics key
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  app_name: str = "conference-central"
  environment: str = "development"
  api_prefix: str = "/api/conference/v1"

  # Database
  database_url: str = "sqlite:///./conference_central.db"

  # Transient conflicts are retried this many times before giving up
  transaction_retries: int = 3

  # Celery / Redis
  celery_broker_url: str = "redis://redis:6379/1"
  celery_result_backend: str = "redis://redis:6379/2"
  task_queue_name: str = "default"
  use_in_memory_task_queue: bool = False

  # Identity-aware proxy headers
  auth_email_header: str = "X-Goog-Authenticated-User-Email"
  auth_user_id_header: str = "X-Goog-Authenticated-User-Id"
  auth_header_prefix: str = "accounts.google.com:"

  # CORS
  allowed_origins: List[str] = [
      "http://localhost:8080",
      "http://127.0.0.1:8080",
  ]

  # Analytics
  statsig_server_secret: str | None = None

  model_config = SettingsConfigDict(
      env_file=".env", env_file_encoding="utf-8", extra="ignore"
  )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()
