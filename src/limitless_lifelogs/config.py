"""Settings for talking to the Limitless API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .errors import ConfigError

# ── Constants ────────────────────────────────────────────────────────────────
API_BASE_URL     = "https://api.limitless.ai"
API_VERSION      = "v1"
API_KEY_ENV_VAR  = "LIMITLESS_API_KEY"
API_URL_ENV_VAR  = "LIMITLESS_API_URL"
API_TIMEOUT_SECONDS = 120
API_DATE_FMT     = "%Y-%m-%d"
API_DATETIME_FMT = "%Y-%m-%d %H:%M:%S"
PAGE_LIMIT       = 10   # the API refuses more than 10 lifelogs per call

MAX_LIFELOG_LIMIT          = 100
DEFAULT_RECENT_LIMIT       = 10
DEFAULT_SEARCH_FETCH_LIMIT = 20
MAX_SEARCH_FETCH_LIMIT     = 100


@dataclass(frozen=True)
class Settings:
    """Credential and endpoint, read once at startup and passed to the client."""

    api_key: str
    base_url: str = API_BASE_URL
    timeout: float = API_TIMEOUT_SECONDS

    def __post_init__(self):
        if not self.api_key or not self.api_key.strip():
            raise ConfigError(f"Limitless API key is missing. Please set {API_KEY_ENV_VAR}.")
        if not self.base_url:
            raise ConfigError("Limitless API base URL must not be empty.")
        if self.timeout <= 0:
            raise ConfigError("API timeout must be positive.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str]=os.environ) -> "Settings":
        return cls(
            api_key=environ.get(API_KEY_ENV_VAR, ""),
            base_url=(environ.get(API_URL_ENV_VAR) or API_BASE_URL).rstrip("/"),
        )
