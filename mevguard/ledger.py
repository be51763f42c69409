"""In-memory incident ledger and the statistics derived from it."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from typing import Deque, Iterable, Iterator, List, Optional

RECENT_WINDOW_MS = 24 * 60 * 60 * 1000


def current_millis() -> int:
    return int(time.time() * 1000)


class IncidentKind(str, Enum):
    SANDWICH = "Sandwich"
    TIME_BASED = "TimeBased"


class IncidentStatus(str, Enum):
    NEW = "New"
    DEDUPLICATED = "Deduplicated"


@dataclass(frozen=True)
class Incident:
    """A positive classification recorded in the ledger."""

    id: str
    kind: IncidentKind
    victim: str
    attacker: str
    profit: float
    occurred_at: int
    status: IncidentStatus = IncidentStatus.NEW

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "victim": self.victim,
            "attacker": self.attacker,
            "profit": self.profit,
            "occurredAt": self.occurred_at,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class LedgerStats:
    """Aggregates computed over every incident in a ledger."""

    total_profit: float
    unique_victims: int
    unique_attackers: int
    recent_count: int

    def as_dict(self) -> dict[str, object]:
        return {
            "totalProfit": self.total_profit,
            "uniqueVictims": self.unique_victims,
            "uniqueAttackers": self.unique_attackers,
            "recentCount": self.recent_count,
        }


class IncidentLedger:
    """Append-only incident list, newest first.

    Entries are never removed or replaced. All access goes through a lock so a
    ledger can be shared with worker threads.
    """

    def __init__(self, incidents: Iterable[Incident] = ()) -> None:
        self._lock = RLock()
        self._incidents: Deque[Incident] = deque(incidents)

    @classmethod
    def seeded(cls, now_ms: Optional[int] = None) -> "IncidentLedger":
        """Return a ledger holding the two sample incidents shown on a fresh dashboard."""

        now = current_millis() if now_ms is None else now_ms
        return cls(
            [
                Incident(
                    id="initial-1",
                    kind=IncidentKind.SANDWICH,
                    victim="0x1A4b8b6EC3Ab8616A5a6A7A45F6A42d5A444871b",
                    attacker="0xBADc0DEDeaf5A55bDA9f4A7E28383a176846B7E2",
                    profit=0.42,
                    occurred_at=now - 3_600_000,
                    status=IncidentStatus.DEDUPLICATED,
                ),
                Incident(
                    id="initial-2",
                    kind=IncidentKind.TIME_BASED,
                    victim="N/A (Time Analysis)",
                    attacker="0x55d398326f99059fF775485246999027B3197955",
                    profit=0.0,
                    occurred_at=now - 7_200_000,
                    status=IncidentStatus.DEDUPLICATED,
                ),
            ]
        )

    # ------------------------------------------------------------------
    # Writes
    def append(self, incident: Incident) -> None:
        with self._lock:
            self._incidents.appendleft(incident)

    # ------------------------------------------------------------------
    # Reads
    def incidents(self, limit: int | None = None) -> List[Incident]:
        with self._lock:
            incidents = list(self._incidents)
        return incidents[:limit] if limit else incidents

    def __len__(self) -> int:
        with self._lock:
            return len(self._incidents)

    def __iter__(self) -> Iterator[Incident]:
        return iter(self.incidents())

    def stats(self, now_ms: Optional[int] = None) -> LedgerStats:
        now = current_millis() if now_ms is None else now_ms
        cutoff = now - RECENT_WINDOW_MS
        with self._lock:
            incidents = list(self._incidents)
        return LedgerStats(
            total_profit=sum(incident.profit for incident in incidents),
            unique_victims=len({incident.victim for incident in incidents}),
            unique_attackers=len({incident.attacker for incident in incidents}),
            recent_count=sum(1 for incident in incidents if incident.occurred_at > cutoff),
        )


__all__ = [
    "Incident",
    "IncidentKind",
    "IncidentLedger",
    "IncidentStatus",
    "LedgerStats",
    "RECENT_WINDOW_MS",
    "current_millis",
]
