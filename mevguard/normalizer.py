"""Mapping of classifier verdicts onto ledger incidents."""

from __future__ import annotations

import uuid
from typing import Callable, Optional

from .ledger import Incident, IncidentKind, IncidentStatus, current_millis
from .models import (
    SANDWICH,
    TIME,
    AnalysisRequest,
    ClassificationResult,
    SandwichResult,
    TimeRequest,
    TimeResult,
)

TIME_ANALYSIS_VICTIM = "N/A (Time Analysis)"


def _new_id() -> str:
    return str(uuid.uuid4())


def normalize(
    kind: str,
    result: ClassificationResult,
    request: AnalysisRequest,
    *,
    clock: Callable[[], int] = current_millis,
    id_factory: Callable[[], str] = _new_id,
) -> Optional[Incident]:
    """Return an :class:`Incident` for a positive verdict, ``None`` otherwise.

    Sandwich incidents are stamped with ``clock()``; time-based incidents use
    the victim transaction time converted to milliseconds.
    """

    if kind == SANDWICH:
        if not isinstance(result, SandwichResult):
            raise TypeError(f"Expected SandwichResult, got {type(result).__name__}")
        if not result.is_sandwich_attack:
            return None
        return Incident(
            id=id_factory(),
            kind=IncidentKind.SANDWICH,
            victim=result.victim_address,
            attacker=result.attacker_address,
            profit=result.profit_potential,
            occurred_at=clock(),
            status=IncidentStatus.NEW,
        )

    if kind == TIME:
        if not isinstance(result, TimeResult):
            raise TypeError(f"Expected TimeResult, got {type(result).__name__}")
        if not isinstance(request, TimeRequest):
            raise TypeError(f"Expected TimeRequest, got {type(request).__name__}")
        if not result.is_mev_bot_activity:
            return None
        return Incident(
            id=id_factory(),
            kind=IncidentKind.TIME_BASED,
            victim=TIME_ANALYSIS_VICTIM,
            attacker=result.primary_attacker(),
            profit=0.0,
            occurred_at=request.victim_transaction_time * 1000,
            status=IncidentStatus.NEW,
        )

    raise ValueError(f"Unknown analysis kind {kind!r}")


__all__ = ["TIME_ANALYSIS_VICTIM", "normalize"]
