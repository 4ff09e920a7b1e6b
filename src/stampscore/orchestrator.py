"""Score refresh orchestration.

One refresh run polls the scorer until it reports a terminal status:

    INITIAL ─► PENDING ─► SUCCESS | ERROR

    - the first read that fails is retried once as a forced rescore
    - a DONE score with a positive raw score but no stamp breakdown is
      rescored once
    - PROCESSING / BULK_PROCESSING sleeps 1000ms, 1500ms, ... up to 10000ms
      between polls
    - every HTTP call counts against max_attempts (30); running out ends the
      run in SUCCESS with timed_out=True

Runs are keyed by address. Starting a new run (or calling cancel) bumps the
address generation; an older run notices at its next suspension point,
stops, and its results are discarded. Cancelling the task that drives a run
resets the address the same way cancel() does.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .client import RequestFailure, ScoreClient
from .config import ScorerSettings
from .models import ProcessingStatus, ScoreRecord, SubmissionState
from .rescore import needs_rescore

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[str, SubmissionState, SubmissionState], None]


class _Superseded(Exception):
    """Internal: a newer run took over this address."""


@dataclass(frozen=True)
class RefreshOutcome:
    """How one refresh run ended."""
    address: str
    submission_state: SubmissionState
    score_state: ProcessingStatus
    record: Optional[ScoreRecord] = None
    attempts: int = 0
    rescored: bool = False
    timed_out: bool = False
    superseded: bool = False
    error: Optional[str] = None

    @property
    def score_description(self) -> str:
        return self.record.description if self.record else ""


def delay_schedule(initial_ms: int, step_ms: int, max_ms: int):
    """Yield poll delays in ms: grows by step_ms until it reaches max_ms."""
    delay = initial_ms
    while True:
        yield delay
        if delay < max_ms:
            delay += step_ms


class PollingOrchestrator:
    """Drives ScoreClient through bounded, growing-delay polling."""

    def __init__(
        self,
        client: ScoreClient,
        settings: Optional[ScorerSettings] = None,
        *,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        on_transition: Optional[TransitionCallback] = None,
    ):
        self.client = client
        self.settings = settings or client.settings
        self._sleep = sleep or asyncio.sleep
        self._listeners: list[TransitionCallback] = []
        if on_transition:
            self._listeners.append(on_transition)
        self._states: dict[str, SubmissionState] = {}
        self._generations: dict[str, int] = {}

    @property
    def max_attempts(self) -> int:
        return self.settings.max_attempts

    def submission_state(self, address: str) -> SubmissionState:
        return self._states.get(address, SubmissionState.INITIAL)

    def subscribe(self, callback: TransitionCallback) -> Callable[[], None]:
        """Call callback(address, old, new) on every submission state change."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def cancel(self, address: str) -> None:
        """Supersede any in-flight run for address without starting a new one."""
        if address not in self._generations:
            return
        self._generations[address] += 1
        if self.submission_state(address) is SubmissionState.PENDING:
            self._states[address] = SubmissionState.INITIAL
            self._notify(address, SubmissionState.PENDING, SubmissionState.INITIAL)
        logger.info("Cancelled refresh for %s", address)

    def _notify(self, address: str, old: SubmissionState, new: SubmissionState) -> None:
        for callback in list(self._listeners):
            try:
                callback(address, old, new)
            except Exception:
                logger.exception("Submission state listener failed for %s", address)

    def _set_state(self, address: str, new_state: SubmissionState) -> None:
        old = self.submission_state(address)
        # PENDING may be re-entered by a run that supersedes another
        if new_state.terminal and old is not SubmissionState.PENDING:
            raise RuntimeError(f"Illegal submission transition {old.value} -> {new_state.value}")
        self._states[address] = new_state
        if old is not new_state:
            self._notify(address, old, new_state)

    def _check_current(self, address: str, generation: int) -> None:
        if self._generations.get(address) != generation:
            raise _Superseded(address)

    async def refresh_score(self, address: Optional[str], token: str) -> Optional[RefreshOutcome]:
        """Run one refresh to a terminal state. Returns None for an empty address."""
        if not address:
            return None

        generation = self._generations.get(address, 0) + 1
        self._generations[address] = generation
        self._set_state(address, SubmissionState.PENDING)

        try:
            outcome = await self._run(address, token, generation)
        except _Superseded:
            logger.debug("Discarding superseded refresh for %s (generation %d)", address, generation)
            return RefreshOutcome(
                address=address,
                submission_state=self.submission_state(address),
                score_state=ProcessingStatus.INITIAL,
                superseded=True,
            )
        except asyncio.CancelledError:
            # the task was cancelled mid-run: leave the address as if cancel() was called
            if self._generations.get(address) == generation:
                self.cancel(address)
            raise
        except Exception:
            if self._generations.get(address) == generation:
                self._set_state(address, SubmissionState.ERROR)
            raise

        self._set_state(address, outcome.submission_state)
        return outcome

    async def _run(self, address: str, token: str, generation: int) -> RefreshOutcome:
        delays = delay_schedule(
            self.settings.initial_delay_ms,
            self.settings.delay_step_ms,
            self.settings.max_delay_ms,
        )
        attempts = 0
        rescored = False
        force = False
        status = ProcessingStatus.INITIAL

        while attempts < self.max_attempts:
            attempts += 1
            try:
                envelope = await self.client.fetch_score(address, token, force_rescore=force)
            except RequestFailure as e:
                self._check_current(address, generation)
                if rescored or force:
                    logger.warning("Score fetch for %s failed after rescore: %s", address, e)
                    return RefreshOutcome(
                        address=address,
                        submission_state=SubmissionState.ERROR,
                        score_state=status,
                        attempts=attempts,
                        rescored=True,
                        error=str(e),
                    )
                logger.info("Score read for %s failed (%s), forcing a rescore", address, e)
                force = True
                continue

            self._check_current(address, generation)
            rescored = rescored or force
            force = False
            status = envelope.status

            if status is ProcessingStatus.DONE:
                record = envelope.record
                if needs_rescore(rescored, record.raw_score, record.stamp_scores):
                    if attempts < self.max_attempts:
                        logger.info("Score for %s has no stamp breakdown, forcing a rescore", address)
                        force = True
                        continue
                    logger.warning("Score for %s has no stamp breakdown and attempts are exhausted", address)
                return RefreshOutcome(
                    address=address,
                    submission_state=SubmissionState.SUCCESS,
                    score_state=status,
                    record=record,
                    attempts=attempts,
                    rescored=rescored,
                )

            if not status.in_progress:
                logger.info("Scorer reported %s for %s", status.value, address)
                break

            if attempts < self.max_attempts:
                delay_ms = next(delays)
                logger.debug("Score for %s is %s, polling again in %dms", address, status.value, delay_ms)
                await self._sleep(delay_ms / 1000.0)
                self._check_current(address, generation)

        timed_out = status.in_progress or force
        if timed_out:
            logger.warning("Score for %s still %s after %d attempts", address, status.value, attempts)
        return RefreshOutcome(
            address=address,
            submission_state=SubmissionState.SUCCESS,
            score_state=status,
            attempts=attempts,
            rescored=rescored,
            timed_out=timed_out,
        )
