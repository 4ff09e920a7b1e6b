"""ScoreContext — observable holder of the latest score, weights and platform totals.

Usage:
    async with ScoreClient() as client:
        ctx = ScoreContext(client)
        ctx.subscribe(lambda snap: print(snap.passport_submission_state))
        await ctx.fetch_stamp_weights()
        await ctx.refresh_score(address, token)
        for platform in ctx.scored_platforms:
            print(platform.name, platform.earned_points, platform.possible_points)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from .aggregator import aggregate
from .catalog import PlatformCatalogEntry, load_catalog
from .client import RequestFailure, ScoreClient
from .models import PlatformScore, ProcessingStatus, ScoreRecord, SubmissionState
from .orchestrator import PollingOrchestrator, RefreshOutcome

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, float] = MappingProxyType({})


@dataclass(frozen=True)
class ScoreSnapshot:
    """Immutable view of everything the context exposes."""
    address: Optional[str]
    score: float
    raw_score: float
    threshold: float
    score_description: str
    passport_submission_state: SubmissionState
    score_state: ProcessingStatus
    stamp_weights: Mapping[str, float]
    stamp_scores: Optional[Mapping[str, float]]
    scored_platforms: tuple[PlatformScore, ...]

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "score": self.score,
            "raw_score": self.raw_score,
            "threshold": self.threshold,
            "score_description": self.score_description,
            "passport_submission_state": self.passport_submission_state.value,
            "score_state": self.score_state.value,
            "stamp_weights": dict(self.stamp_weights),
            "stamp_scores": dict(self.stamp_scores) if self.stamp_scores is not None else None,
            "scored_platforms": [p.to_dict() for p in self.scored_platforms],
        }


class ScoreContext:
    """Single writer for score state; readers get immutable snapshots."""

    def __init__(
        self,
        client: ScoreClient,
        *,
        catalog: Optional[Sequence[PlatformCatalogEntry]] = None,
        orchestrator: Optional[PollingOrchestrator] = None,
    ):
        self.client = client
        self.catalog = tuple(catalog) if catalog is not None else load_catalog(client.settings.catalog_path)
        self.orchestrator = orchestrator or PollingOrchestrator(client)
        self.orchestrator.subscribe(self._on_transition)
        self._subscribers: list[Callable[[ScoreSnapshot], None]] = []

        self._address: Optional[str] = None
        self._record: Optional[ScoreRecord] = None
        self._submission_state = SubmissionState.INITIAL
        self._score_state = ProcessingStatus.INITIAL
        self._stamp_weights: Mapping[str, float] = _EMPTY
        self._scored_platforms: tuple[PlatformScore, ...] = ()
        self._recalculate()

    # -- read-only state --

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def score(self) -> float:
        return self._record.score if self._record else 0.0

    @property
    def raw_score(self) -> float:
        return self._record.raw_score if self._record else 0.0

    @property
    def threshold(self) -> float:
        return self._record.threshold if self._record else 0.0

    @property
    def score_description(self) -> str:
        return self._record.description if self._record else ""

    @property
    def passport_submission_state(self) -> SubmissionState:
        return self._submission_state

    @property
    def score_state(self) -> ProcessingStatus:
        return self._score_state

    @property
    def stamp_weights(self) -> Mapping[str, float]:
        return self._stamp_weights

    @property
    def stamp_scores(self) -> Optional[Mapping[str, float]]:
        return self._record.stamp_scores if self._record else None

    @property
    def scored_platforms(self) -> tuple[PlatformScore, ...]:
        return self._scored_platforms

    def snapshot(self) -> ScoreSnapshot:
        return ScoreSnapshot(
            address=self._address,
            score=self.score,
            raw_score=self.raw_score,
            threshold=self.threshold,
            score_description=self.score_description,
            passport_submission_state=self._submission_state,
            score_state=self._score_state,
            stamp_weights=self._stamp_weights,
            stamp_scores=self.stamp_scores,
            scored_platforms=self._scored_platforms,
        )

    # -- observation --

    def subscribe(self, callback: Callable[[ScoreSnapshot], None]) -> Callable[[], None]:
        """Call callback(snapshot) after every published change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self) -> None:
        snap = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snap)
            except Exception:
                logger.exception("ScoreContext subscriber failed")

    def _on_transition(self, address: str, old: SubmissionState, new: SubmissionState) -> None:
        # terminal states are published by refresh_score together with the record
        if address != self._address or new.terminal:
            return
        self._submission_state = new
        self._publish()

    def _sync_submission_state(self, address: str) -> None:
        state = self.orchestrator.submission_state(address)
        if state is not self._submission_state:
            self._submission_state = state
            self._publish()

    def _recalculate(self) -> None:
        self._scored_platforms = tuple(aggregate(self.catalog, self._stamp_weights, self.stamp_scores))

    # -- operations --

    async def refresh_score(self, address: Optional[str], token: str) -> Optional[RefreshOutcome]:
        """Poll the scorer for address until it settles, then publish the result."""
        if not address:
            return None

        if address != self._address:
            # a different wallet: drop the previous wallet's record and stop its polling
            previous = self._address
            self._address = address
            self._record = None
            self._recalculate()
            if previous:
                self.orchestrator.cancel(previous)
        self._score_state = ProcessingStatus.INITIAL

        try:
            outcome = await self.orchestrator.refresh_score(address, token)
        except (Exception, asyncio.CancelledError):
            if address == self._address:
                self._sync_submission_state(address)
            raise
        if outcome is None or outcome.superseded or address != self._address:
            return outcome

        self._score_state = outcome.score_state
        if outcome.record is not None:
            self._record = outcome.record
            self._recalculate()
            logger.info("Score for %s: %.2f (raw %.2f, threshold %.2f, %s)",
                        address, outcome.record.score, outcome.record.raw_score,
                        outcome.record.threshold, outcome.record.description)
        self._submission_state = outcome.submission_state
        self._publish()
        return outcome

    async def fetch_stamp_weights(self) -> None:
        """Fetch provider weights; on failure keep the old weights and flag an error."""
        try:
            weights = await self.client.fetch_weights()
        except RequestFailure as e:
            logger.warning("Failed to fetch stamp weights: %s", e)
            self._submission_state = SubmissionState.ERROR
            self._publish()
            return

        self._stamp_weights = weights
        self._recalculate()
        self._publish()
