"""stampscore — passport score refresh, rescore and per-platform aggregation."""

from stampscore.models import (
    ProcessingStatus, SubmissionState, ScoreRecord, ScoreEnvelope, PlatformScore,
    parse_float_or_zero,
)
from stampscore.config import ScorerSettings
from stampscore.client import (
    ScoreClient, RequestFailure, TransportFailure, MalformedResponse,
)
from stampscore.rescore import needs_rescore
from stampscore.orchestrator import PollingOrchestrator, RefreshOutcome
from stampscore.catalog import (
    PlatformCatalogEntry, ProviderGroup, ProviderSpec, DEFAULT_CATALOG, load_catalog,
)
from stampscore.aggregator import aggregate
from stampscore.context import ScoreContext, ScoreSnapshot

__all__ = [
    "ProcessingStatus",
    "SubmissionState",
    "ScoreRecord",
    "ScoreEnvelope",
    "PlatformScore",
    "parse_float_or_zero",
    "ScorerSettings",
    "ScoreClient",
    "RequestFailure",
    "TransportFailure",
    "MalformedResponse",
    "needs_rescore",
    "PollingOrchestrator",
    "RefreshOutcome",
    "PlatformCatalogEntry",
    "ProviderGroup",
    "ProviderSpec",
    "DEFAULT_CATALOG",
    "load_catalog",
    "aggregate",
    "ScoreContext",
    "ScoreSnapshot",
]
