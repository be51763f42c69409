"""Client-side workflow: validate, dispatch, normalize, record."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import httpx

from .classifier import Classifier, HeuristicClassifier
from .dispatcher import AnalysisEnvelope, Dispatcher
from .errors import ANALYSIS_FAILED_MESSAGE, DispatchError, ValidationError
from .ledger import Incident, IncidentLedger, LedgerStats, current_millis
from .models import AnalysisRequest, ClassificationResult, WireModel
from .normalizer import normalize
from .schema import validate_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisOutcome:
    """What a single analysis produced for the caller."""

    result: Optional[ClassificationResult] = None
    error: Optional[str] = None
    incident: Optional[Incident] = None
    channel: Optional[str] = None

    @property
    def flagged(self) -> bool:
        return self.incident is not None


class AnalysisSession:
    """One logical user session owning its own incident ledger."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        ledger: Optional[IncidentLedger] = None,
        clock: Callable[[], int] = current_millis,
    ) -> None:
        self._dispatcher = dispatcher
        self._ledger = ledger if ledger is not None else IncidentLedger()
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings,
        classifier: Optional[Classifier] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AnalysisSession":
        dispatcher = Dispatcher.from_settings(settings, classifier or HeuristicClassifier(), transport=transport)
        seed = bool(getattr(settings, "seed_ledger", True))
        ledger = IncidentLedger.seeded() if seed else IncidentLedger()
        return cls(dispatcher, ledger=ledger)

    @property
    def ledger(self) -> IncidentLedger:
        return self._ledger

    async def analyze(self, raw: Any) -> AnalysisOutcome:
        """Analyze a raw payload or a request model.

        Request models are re-validated from their wire form so time requests
        always carry parsed bot transactions.
        """

        if isinstance(raw, WireModel):
            raw = raw.to_wire()
        try:
            request = validate_request(raw)
        except ValidationError as exc:
            return AnalysisOutcome(error=exc.message)
        return await self.submit(request)

    async def submit(self, request: AnalysisRequest) -> AnalysisOutcome:
        try:
            envelope = await self._dispatcher.dispatch(request)
        except DispatchError as exc:
            logger.error("Analysis of %s request failed: %s", request.kind, exc)
            return AnalysisOutcome(error=ANALYSIS_FAILED_MESSAGE)
        return self._record(request, envelope)

    def _record(self, request: AnalysisRequest, envelope: AnalysisEnvelope) -> AnalysisOutcome:
        if envelope.data is None:
            return AnalysisOutcome(error=envelope.error, channel=envelope.channel)
        incident = normalize(request.kind, envelope.data, request, clock=self._clock)
        if incident is not None:
            self._ledger.append(incident)
            logger.info(
                "Recorded %s incident %s (attacker %s, via %s)",
                incident.kind.value,
                incident.id,
                incident.attacker,
                envelope.channel,
            )
        return AnalysisOutcome(result=envelope.data, incident=incident, channel=envelope.channel)

    def incidents(self) -> List[Incident]:
        return self._ledger.incidents()

    def stats(self) -> LedgerStats:
        return self._ledger.stats(self._clock())


__all__ = ["AnalysisOutcome", "AnalysisSession"]
