"""Classifier capability used to judge whether a request describes MEV activity.

The classifier is an injected collaborator. :class:`HeuristicClassifier` is a
small rule-based implementation that is good enough for local use; anything
smarter (for example a remote model call) only has to satisfy
:class:`Classifier`. :class:`StubClassifier` returns canned results and counts
calls, for tests.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Protocol

from .models import (
    AnalysisRequest,
    ClassificationResult,
    SandwichRequest,
    SandwichResult,
    TimeRequest,
    TimeResult,
)

_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]+")
_STEP_SEPARATORS = re.compile(r",|;|->|\n")


class Classifier(Protocol):
    """Judges a validated request."""

    async def classify(self, request: AnalysisRequest) -> ClassificationResult:  # pragma: no cover - interface
        ...


class StubClassifier:
    """Return fixed results and record every request it receives."""

    def __init__(
        self,
        *,
        sandwich: Optional[SandwichResult] = None,
        time: Optional[TimeResult] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self._sandwich = sandwich
        self._time = time
        self._error = error
        self.requests: List[AnalysisRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def classify(self, request: AnalysisRequest) -> ClassificationResult:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        result: Optional[ClassificationResult]
        result = self._sandwich if isinstance(request, SandwichRequest) else self._time
        if result is None:
            raise LookupError(f"No canned result for {request.kind!r} requests")
        return result


def _participant(step: str) -> str:
    match = _ADDRESS_PATTERN.search(step)
    if match:
        return match.group(0)
    words = step.split()
    return words[0] if words else ""


class HeuristicClassifier:
    """Rule-based classifier.

    A sandwich is reported when the ordering contains three consecutive steps
    where the first and last come from the same participant and the middle one
    from someone else. Profit is not estimated and is always reported as 0.

    Timing correlation is reported when at least one bot transaction lands
    within ``blockTimeThreshold`` seconds of the victim transaction.
    """

    async def classify(self, request: AnalysisRequest) -> ClassificationResult:
        if isinstance(request, SandwichRequest):
            return self.classify_sandwich(request)
        if isinstance(request, TimeRequest):
            return self.classify_time(request)
        raise TypeError(f"Unsupported request type {type(request).__name__}")

    def classify_sandwich(self, request: SandwichRequest) -> SandwichResult:
        steps = [step.strip() for step in _STEP_SEPARATORS.split(request.transaction_ordering) if step.strip()]
        participants = [_participant(step) for step in steps]
        for index in range(len(participants) - 2):
            front, middle, back = participants[index : index + 3]
            if front and front.lower() == back.lower() and front.lower() != middle.lower():
                return SandwichResult(
                    is_sandwich_attack=True,
                    attacker_address=front,
                    victim_address=middle,
                    profit_potential=0.0,
                )
        return SandwichResult(
            is_sandwich_attack=False,
            attacker_address="N/A",
            victim_address="N/A",
            profit_potential=0.0,
        )

    def classify_time(self, request: TimeRequest) -> TimeResult:
        victim_time = request.victim_transaction_time
        threshold = request.block_time_threshold
        close = [
            transaction
            for transaction in request.bot_transactions
            if abs(transaction.timestamp - victim_time) <= threshold
        ]
        addresses = _unique(transaction.address for transaction in close)
        if close:
            explanation = (
                f"{len(close)} bot transaction(s) landed within {threshold}s of the victim "
                f"transaction at {victim_time}."
            )
        else:
            explanation = f"No bot transaction landed within {threshold}s of the victim transaction."
        return TimeResult(
            is_mev_bot_activity=bool(close),
            number_of_close_transactions=len(close),
            bot_addresses=addresses,
            explanation=explanation,
        )


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    unique: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


__all__ = ["Classifier", "HeuristicClassifier", "StubClassifier"]
