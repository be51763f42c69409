"""Pydantic models exchanged between callers, channels and classifiers."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Mapping, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

SANDWICH = "sandwich"
TIME = "time"

DEFAULT_BLOCK_TIME_THRESHOLD = 12


def coerce_number(value: Any) -> float:
    """Coerce ints, floats and numeric strings to a finite float."""

    if isinstance(value, bool):
        raise ValueError("booleans are not accepted as numbers")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        number = float(value.strip())
    else:
        raise ValueError("value is not a number")
    if not math.isfinite(number):
        raise ValueError("number must be finite")
    return number


class WireModel(BaseModel):
    """Base for camelCase wire payloads that also accept snake_case names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class BotTransaction(BaseModel):
    """A bot transaction timestamp paired with the address that sent it."""

    model_config = ConfigDict(frozen=True)

    timestamp: float
    address: str


class SandwichRequest(WireModel):
    """Mempool ordering description to test for a sandwich attack."""

    kind: Literal["sandwich"] = Field(default=SANDWICH, alias="type")
    transaction_ordering: str = Field(
        ...,
        alias="transactionOrdering",
        description="Order of transactions around the victim transaction",
    )
    gas_premiums: str = Field(..., alias="gasPremiums", description="Gas premiums of the transactions")
    slippage: str = Field(..., description="Slippage tolerance of the transactions")

    @field_validator("transaction_ordering", "gas_premiums", "slippage")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class TimeRequest(WireModel):
    """Victim timestamp plus bot timestamps/addresses to test for timing correlation."""

    kind: Literal["time"] = Field(default=TIME, alias="type")
    victim_transaction_time: int = Field(..., alias="victimTransactionTime", ge=1)
    bot_transaction_times: str = Field(..., alias="botTransactionTimes")
    bot_transaction_addresses: str = Field(..., alias="botTransactionAddresses")
    block_time_threshold: int = Field(default=DEFAULT_BLOCK_TIME_THRESHOLD, alias="blockTimeThreshold")
    # Filled in by the schema layer once the parallel fields are parsed.
    bot_transactions: List[BotTransaction] = Field(default_factory=list, exclude=True)

    @field_validator("victim_transaction_time", mode="before")
    @classmethod
    def _numeric_time(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("block_time_threshold", mode="before")
    @classmethod
    def _numeric_threshold(cls, value: Any) -> float:
        if value is None:
            return DEFAULT_BLOCK_TIME_THRESHOLD
        return coerce_number(value)

    @field_validator("bot_transaction_times", "bot_transaction_addresses")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


AnalysisRequest = Union[SandwichRequest, TimeRequest]

REQUEST_MODELS: Mapping[str, Type[WireModel]] = {
    SANDWICH: SandwichRequest,
    TIME: TimeRequest,
}


class SandwichResult(WireModel):
    """Classifier verdict for a sandwich request."""

    is_sandwich_attack: bool = Field(..., alias="isSandwichAttack")
    attacker_address: str = Field(..., alias="attackerAddress")
    victim_address: str = Field(..., alias="victimAddress")
    profit_potential: float = Field(..., alias="profitPotential", ge=0, description="Profit in ETH")


class TimeResult(WireModel):
    """Classifier verdict for a time-correlation request."""

    is_mev_bot_activity: bool = Field(..., alias="isMEVBotActivity")
    number_of_close_transactions: int = Field(..., alias="numberOfCloseTransactions", ge=0)
    bot_addresses: List[str] = Field(default_factory=list, alias="botAddresses")
    explanation: str = ""

    def primary_attacker(self) -> str:
        if self.bot_addresses and self.bot_addresses[0]:
            return self.bot_addresses[0]
        return "N/A"


class TimeAnalysis(TimeResult):
    """Time verdict as served over HTTP, with the synthesized ``attacker`` field."""

    attacker: str = "N/A"

    @classmethod
    def from_result(cls, result: TimeResult) -> "TimeAnalysis":
        payload = result.model_dump()
        payload.pop("attacker", None)
        return cls(**payload, attacker=result.primary_attacker())


ClassificationResult = Union[SandwichResult, TimeResult]


def parse_result(kind: str, payload: Any) -> ClassificationResult:
    """Validate a raw result payload for ``kind``.

    Raises :class:`pydantic.ValidationError` when the payload does not match.
    """

    if kind == SANDWICH:
        return SandwichResult.model_validate(payload)
    if kind == TIME:
        return TimeAnalysis.from_result(TimeResult.model_validate(payload))
    raise ValueError(f"Unknown analysis kind {kind!r}")


__all__ = [
    "SANDWICH",
    "TIME",
    "DEFAULT_BLOCK_TIME_THRESHOLD",
    "AnalysisRequest",
    "BotTransaction",
    "ClassificationResult",
    "REQUEST_MODELS",
    "SandwichRequest",
    "SandwichResult",
    "TimeAnalysis",
    "TimeRequest",
    "TimeResult",
    "WireModel",
    "coerce_number",
    "parse_result",
]
