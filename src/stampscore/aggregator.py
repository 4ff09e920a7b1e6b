"""Per-platform point totals from provider weights and earned stamp scores."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from .catalog import PlatformCatalogEntry
from .models import PlatformScore, parse_float_or_zero


def _points(values: Mapping[str, Any], provider_id: str) -> float:
    # negative or unparsable contributions count as nothing
    return max(0.0, parse_float_or_zero(values.get(provider_id)))


def aggregate(
    catalog: Sequence[PlatformCatalogEntry],
    weights: Optional[Mapping[str, Any]],
    stamp_scores: Optional[Mapping[str, Any]],
) -> list[PlatformScore]:
    """Project the catalog onto possible/earned points, preserving catalog order.

    When either weights or stamp_scores is missing every platform scores zero.
    """
    scored = []
    for entry in catalog:
        provider_ids = entry.provider_ids
        possible = earned = 0.0
        if isinstance(weights, Mapping) and isinstance(stamp_scores, Mapping):
            possible = sum(_points(weights, pid) for pid in provider_ids)
            earned = sum(_points(stamp_scores, pid) for pid in provider_ids)
        scored.append(PlatformScore(
            platform=entry.platform,
            name=entry.name,
            icon=entry.icon,
            description=entry.description,
            website=entry.website,
            provider_ids=provider_ids,
            possible_points=float(possible),
            earned_points=float(earned),
        ))
    return scored
