"""Decide whether a fetched score has to be recomputed server-side."""

from __future__ import annotations

import math
from typing import Any, Mapping


def needs_rescore(currently_rescoring: bool, raw_score: float, stamp_scores: Any) -> bool:
    """True when a positive score came back without a per-provider breakdown.

    Never forces a second rescore (`currently_rescoring`) and never rescores
    an empty score. Anything that is not a mapping counts as a missing
    breakdown.
    """
    try:
        positive = math.isfinite(raw_score) and raw_score > 0
    except TypeError:
        return False
    if not positive:
        return False
    if currently_rescoring:
        return False
    if isinstance(stamp_scores, Mapping) and len(stamp_scores) > 0:
        return False
    return True
