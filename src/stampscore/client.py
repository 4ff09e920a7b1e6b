"""
Async HTTP client for the passport scorer API.

Usage:
    async with ScoreClient(ScorerSettings.from_env()) as client:
        envelope = await client.fetch_score(address, token)
        weights = await client.fetch_weights()

The client issues exactly one request per call. Retrying and polling
belong to the orchestrator.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from .config import ScorerSettings
from .models import (
    ProcessingStatus, ScoreEnvelope, ScoreRecord, Weights,
    freeze_scores, parse_float_or_zero,
)

logger = logging.getLogger(__name__)


class RequestFailure(Exception):
    """A score or weights request did not produce a usable result."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class TransportFailure(RequestFailure):
    """Network error, timeout or HTTP error status."""

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 status_code: Optional[int] = None, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message, cause)


class MalformedResponse(RequestFailure):
    """The server answered, but not with the expected body."""


class _Evidence(BaseModel):
    rawScore: Any = None
    threshold: Any = None


class _ScoreBody(BaseModel):
    status: ProcessingStatus
    score: Any = None
    evidence: Optional[_Evidence] = None
    stamp_scores: Any = None


class ScoreClient:
    """Thin boundary over the score and weights endpoints."""

    def __init__(self, settings: Optional[ScorerSettings] = None,
                 http: Optional[httpx.AsyncClient] = None):
        self.settings = settings or ScorerSettings.from_env()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=self.settings.timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ScoreClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # -- internal --

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {url} failed: {e}", cause=e) from e

        if resp.status_code >= 400:
            detail = resp.text
            if resp.headers.get("content-type", "").startswith("application/json"):
                try:
                    body = resp.json()
                    if isinstance(body, dict):
                        detail = str(body.get("detail", resp.text))
                except ValueError:
                    pass
            raise TransportFailure(
                f"{method} {url} returned {resp.status_code}",
                status_code=resp.status_code, detail=detail,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponse(f"{method} {url} returned a non-JSON body", cause=e) from e

    # -- score --

    async def fetch_score(self, address: str, token: str,
                          force_rescore: bool = False) -> ScoreEnvelope:
        """Read the current score, or trigger a recompute with force_rescore=True."""
        if not address:
            raise ValueError("address must not be empty")

        method = "POST" if force_rescore else "GET"
        url = f"{self.settings.score_endpoint}/{address}"
        data = await self._request(method, url, headers={"Authorization": f"Bearer {token}"})
        envelope = parse_score_body(data)
        logger.debug("%s score for %s: status=%s", method, address, envelope.status.value)
        return envelope

    # -- weights --

    async def fetch_weights(self) -> Weights:
        """Fetch provider weights as floats (unparsable weights become 0.0)."""
        data = await self._request("GET", self.settings.weights_endpoint)
        weights = freeze_scores(data)
        if weights is None:
            raise MalformedResponse(f"weights body is {type(data).__name__}, expected an object")
        return weights


def parse_score_body(data: Any) -> ScoreEnvelope:
    """Turn a score response body into a ScoreEnvelope.

    A DONE body must carry an evidence object; its numbers fall back to 0.0
    when missing or unparsable.
    """
    try:
        body = _ScoreBody.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse(f"unexpected score body: {e.error_count()} validation error(s)", cause=e) from e

    if body.status is not ProcessingStatus.DONE:
        return ScoreEnvelope(status=body.status)

    if body.evidence is None:
        raise MalformedResponse("DONE score body has no evidence")

    record = ScoreRecord(
        raw_score=parse_float_or_zero(body.evidence.rawScore),
        threshold=parse_float_or_zero(body.evidence.threshold),
        score=parse_float_or_zero(body.score),
        stamp_scores=freeze_scores(body.stamp_scores),
    )
    return ScoreEnvelope(status=body.status, record=record)
