"""Shared types for score records, processing states and platform totals."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

ProviderId = str
Weights = Mapping[ProviderId, float]
StampScores = Mapping[ProviderId, float]

PASSING_DESCRIPTION = "Passing Score"
LOW_DESCRIPTION = "Low Score"


class ProcessingStatus(str, Enum):
    """Server-reported stage of a score computation."""
    INITIAL = "INITIAL"
    BULK_PROCESSING = "BULK_PROCESSING"
    PROCESSING = "PROCESSING"
    ERROR = "ERROR"
    DONE = "DONE"

    @property
    def in_progress(self) -> bool:
        return self in (ProcessingStatus.PROCESSING, ProcessingStatus.BULK_PROCESSING)


class SubmissionState(str, Enum):
    """Client-side outcome of one refresh run."""
    INITIAL = "INITIAL"
    PENDING = "PENDING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"

    @property
    def terminal(self) -> bool:
        return self in (SubmissionState.ERROR, SubmissionState.SUCCESS)


def parse_float_or_zero(value: Any) -> float:
    """Parse a number or numeric string; anything else (or NaN/inf) is 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(parsed):
        return 0.0
    return parsed


def freeze_scores(raw: Any) -> Optional[Mapping[ProviderId, float]]:
    """Parse a provider -> number mapping into a read-only float mapping.

    Returns None when `raw` is not a mapping at all.
    """
    if not isinstance(raw, Mapping):
        return None
    return MappingProxyType({str(k): parse_float_or_zero(v) for k, v in raw.items()})


@dataclass(frozen=True)
class ScoreRecord:
    """A fully parsed score. Replaced wholesale, never merged."""
    raw_score: float
    threshold: float
    score: float
    stamp_scores: Optional[StampScores] = None

    @property
    def passing(self) -> bool:
        return self.raw_score > self.threshold

    @property
    def description(self) -> str:
        return PASSING_DESCRIPTION if self.passing else LOW_DESCRIPTION


@dataclass(frozen=True)
class ScoreEnvelope:
    """Result of a single score fetch."""
    status: ProcessingStatus
    record: Optional[ScoreRecord] = None


@dataclass(frozen=True)
class PlatformScore:
    """A catalog entry with its possible and earned points."""
    platform: str
    name: str
    icon: str
    provider_ids: tuple[ProviderId, ...]
    possible_points: float = 0.0
    earned_points: float = 0.0
    description: str = ""
    website: str = ""

    def to_dict(self) -> dict:
        return {
            "platform": self.platform,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "website": self.website,
            "provider_ids": list(self.provider_ids),
            "possible_points": self.possible_points,
            "earned_points": self.earned_points,
        }
