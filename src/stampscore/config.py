"""Scorer client configuration.

Configuration via environment:
    SCORER_API_URL          — base URL of the scorer API (score/ and weights/ live under it)
    SCORER_TIMEOUT          — HTTP timeout in seconds (default 10)
    SCORER_MAX_ATTEMPTS     — max fetches per refresh run (default 30)
    SCORER_INITIAL_DELAY_MS — first poll delay (default 1000)
    SCORER_DELAY_STEP_MS    — added to the delay after each poll (default 500)
    SCORER_MAX_DELAY_MS     — delay stops growing once it reaches this (default 10000)
    SCORER_PLATFORM_CATALOG — optional path to a JSON platform catalog
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_URL = "http://localhost:8002/ceramic-cache"


@dataclass
class ScorerSettings:
    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    max_attempts: int = 30
    initial_delay_ms: int = 1000
    delay_step_ms: int = 500
    max_delay_ms: int = 10000
    catalog_path: Optional[str] = None

    def __post_init__(self):
        self.api_url = self.api_url.rstrip("/")
        if not self.api_url:
            raise ValueError("api_url must not be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay_ms < 0 or self.delay_step_ms < 0:
            raise ValueError("delays must be non-negative")
        if self.max_delay_ms < self.initial_delay_ms:
            raise ValueError("max_delay_ms must be >= initial_delay_ms")

    @property
    def score_endpoint(self) -> str:
        return f"{self.api_url}/score"

    @property
    def weights_endpoint(self) -> str:
        return f"{self.api_url}/weights"

    @classmethod
    def from_env(cls, **overrides) -> "ScorerSettings":
        """Build settings from SCORER_* environment variables.

        Keyword overrides that are not None win over the environment.
        """
        values = {
            "api_url": os.environ.get("SCORER_API_URL", DEFAULT_API_URL),
            "timeout": float(os.environ.get("SCORER_TIMEOUT", "10")),
            "max_attempts": int(os.environ.get("SCORER_MAX_ATTEMPTS", "30")),
            "initial_delay_ms": int(os.environ.get("SCORER_INITIAL_DELAY_MS", "1000")),
            "delay_step_ms": int(os.environ.get("SCORER_DELAY_STEP_MS", "500")),
            "max_delay_ms": int(os.environ.get("SCORER_MAX_DELAY_MS", "10000")),
            "catalog_path": os.environ.get("SCORER_PLATFORM_CATALOG") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
