"""Tunables for import sessions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from gamelink.domain.importing.workflow import DEFAULT_CANDIDATE_LIMIT

from .env import env_positive_float, env_positive_int

DEFAULT_RETENTION_DAYS: Final[int] = 30
DEFAULT_HTTP_TIMEOUT_SECONDS: Final[float] = 10.0


@dataclass(frozen=True, slots=True)
class ImportConfig:
    candidate_limit: int = DEFAULT_CANDIDATE_LIMIT
    retention_days: int = DEFAULT_RETENTION_DAYS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)


def get_import_config() -> ImportConfig:
    return ImportConfig(
        candidate_limit=env_positive_int("GAMELINK_CANDIDATE_LIMIT", DEFAULT_CANDIDATE_LIMIT),
        retention_days=env_positive_int("GAMELINK_RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
        http_timeout_seconds=env_positive_float(
            "GAMELINK_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
    )
