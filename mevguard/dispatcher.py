"""Dual-channel dispatch: remote analysis endpoint first, in-process fallback second."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from .classifier import Classifier
from .errors import ChannelError, DispatchError
from .models import AnalysisRequest, ClassificationResult, parse_result
from .service import AnalysisService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisEnvelope:
    """Uniform answer of a channel: either ``data`` or a remote ``error``."""

    data: Optional[ClassificationResult] = None
    error: Optional[str] = None
    channel: str = ""
    failures: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.data is not None

    def as_dict(self) -> Dict[str, Any]:
        if self.data is not None:
            return {"data": self.data.to_wire()}
        return {"error": self.error}


class DispatchChannel:
    """Base interface for dispatch channels."""

    name: str

    async def submit(self, request: AnalysisRequest) -> AnalysisEnvelope:  # pragma: no cover - interface
        raise NotImplementedError


class HTTPChannel(DispatchChannel):
    """POST the request to a remote ``/api/analyze`` endpoint."""

    name = "http"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def _post(self, request: AnalysisRequest) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            return await client.post(self._url, json=request.to_wire())

    async def submit(self, request: AnalysisRequest) -> AnalysisEnvelope:
        try:
            response = await asyncio.wait_for(self._post(request), timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except asyncio.TimeoutError as exc:
            raise ChannelError(self.name, f"no response within {self._timeout}s") from exc
        except httpx.HTTPError as exc:
            raise ChannelError(self.name, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise ChannelError(self.name, "response body is not valid JSON") from exc
        return self._envelope(request, payload)

    def _envelope(self, request: AnalysisRequest, payload: Any) -> AnalysisEnvelope:
        if not isinstance(payload, dict):
            raise ChannelError(self.name, "response body is not a JSON object")
        if "data" in payload:
            try:
                result = parse_result(request.kind, payload["data"])
            except PydanticValidationError as exc:
                raise ChannelError(self.name, f"malformed result: {exc.error_count()} error(s)") from exc
            return AnalysisEnvelope(data=result, channel=self.name)
        error = payload.get("error")
        if isinstance(error, str) and error:
            return AnalysisEnvelope(error=error, channel=self.name)
        raise ChannelError(self.name, "response carries neither data nor error")


class LocalChannel(DispatchChannel):
    """Run the analysis pipeline in-process."""

    name = "local"

    def __init__(self, service: AnalysisService) -> None:
        self._service = service

    async def submit(self, request: AnalysisRequest) -> AnalysisEnvelope:
        try:
            result = await self._service.analyze(request)
        except Exception as exc:
            raise ChannelError(self.name, f"{type(exc).__name__}: {exc}") from exc
        return AnalysisEnvelope(data=result, channel=self.name)


class DispatchState(str, Enum):
    PRIMARY_ATTEMPT = "primary_attempt"
    FALLBACK_ATTEMPT = "fallback_attempt"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_ON_FAILURE = {
    DispatchState.PRIMARY_ATTEMPT: DispatchState.FALLBACK_ATTEMPT,
    DispatchState.FALLBACK_ATTEMPT: DispatchState.FAILED,
}
_TERMINAL = {DispatchState.SUCCEEDED, DispatchState.FAILED}


class Dispatcher:
    """Send a validated request through the primary channel, falling back once.

    The dispatcher holds no per-call state, so concurrent ``dispatch`` calls are
    independent of each other.
    """

    def __init__(self, primary: Optional[DispatchChannel], fallback: DispatchChannel) -> None:
        self._primary = primary
        self._fallback = fallback

    @classmethod
    def from_settings(
        cls,
        settings,
        classifier: Classifier,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Dispatcher":
        primary: Optional[DispatchChannel] = None
        url = getattr(settings, "analyze_url", None)
        if url:
            primary = HTTPChannel(
                url,
                timeout=float(getattr(settings, "primary_timeout", 10.0)),
                transport=transport,
            )
        return cls(primary, LocalChannel(AnalysisService(classifier)))

    def _channel_for(self, state: DispatchState) -> DispatchChannel:
        if state is DispatchState.PRIMARY_ATTEMPT and self._primary is not None:
            return self._primary
        return self._fallback

    async def dispatch(self, request: AnalysisRequest) -> AnalysisEnvelope:
        state = DispatchState.PRIMARY_ATTEMPT if self._primary is not None else DispatchState.FALLBACK_ATTEMPT
        failures: List[ChannelError] = []
        envelope: Optional[AnalysisEnvelope] = None

        while state not in _TERMINAL:
            channel = self._channel_for(state)
            try:
                envelope = await channel.submit(request)
            except ChannelError as exc:
                failures.append(exc)
                if state is DispatchState.PRIMARY_ATTEMPT:
                    logger.warning("%s; falling back to %s channel", exc, self._fallback.name)
                else:
                    logger.warning("%s", exc)
                state = _ON_FAILURE[state]
            else:
                state = DispatchState.SUCCEEDED

        if state is DispatchState.FAILED or envelope is None:
            logger.error("Classification unavailable after %d failed attempt(s)", len(failures))
            raise DispatchError(failures)

        if failures:
            return AnalysisEnvelope(
                data=envelope.data,
                error=envelope.error,
                channel=envelope.channel,
                failures=tuple(str(failure) for failure in failures),
            )
        return envelope


__all__ = [
    "AnalysisEnvelope",
    "DispatchChannel",
    "DispatchState",
    "Dispatcher",
    "HTTPChannel",
    "LocalChannel",
]
