"""Parsing of the parallel comma-separated bot timestamp/address fields."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .errors import ValidationError, ValidationReason
from .models import BotTransaction

PARALLEL_FORMAT_MESSAGE = "Invalid bot transaction times or addresses format."
PARALLEL_COUNT_MESSAGE = "The number of bot timestamps must match the number of bot addresses."


@dataclass(frozen=True)
class ParallelFields:
    """Parsed timestamps and addresses, aligned by position."""

    times: Sequence[float]
    addresses: Sequence[str]
    dropped: Sequence[int] = field(default_factory=tuple)

    def pairs(self) -> List[BotTransaction]:
        """Pair ``times[i]`` with ``addresses[i]``.

        Pairing is positional over the filtered arrays. When a time token was
        dropped (see ``dropped``), every later timestamp pairs with the address
        one slot earlier than the one it was written next to.
        """

        return [
            BotTransaction(timestamp=timestamp, address=address)
            for timestamp, address in zip(self.times, self.addresses)
        ]


def split_field(text: str) -> List[str]:
    return [part.strip() for part in text.split(",")]


_DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_RADIX_LITERAL = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


def _parse_time(token: str) -> float | None:
    """Read a timestamp token with numeric-literal rules.

    A blank token reads as 0. Unsigned ``0x``/``0o``/``0b`` integers are
    accepted. Digit separators and named values such as ``inf`` or ``nan``
    are not. Anything that does not read as a finite number yields ``None``.
    """

    text = token.strip()
    if not text:
        return 0
    radix = _RADIX_LITERAL.fullmatch(text)
    if radix:
        digits = radix.group(1)
        return int(digits[1:], _RADIX_BASES[digits[0].lower()])
    if not _DECIMAL_LITERAL.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def parse_times(tokens: Sequence[str]) -> Tuple[List[float], List[int]]:
    """Return parsed timestamps and the indexes of tokens that failed to parse."""

    times: List[float] = []
    dropped: List[int] = []
    for index, token in enumerate(tokens):
        value = _parse_time(token)
        if value is None:
            dropped.append(index)
            continue
        times.append(value)
    return times, dropped


def check_raw_counts(times_text: str, addresses_text: str) -> None:
    """Compare the comma-separated element counts before any filtering."""

    if len(times_text.split(",")) != len(addresses_text.split(",")):
        raise ValidationError(
            ValidationReason.LENGTH_MISMATCH,
            PARALLEL_COUNT_MESSAGE,
            field="botTransactionAddresses",
        )


def parse_parallel(times_text: str, addresses_text: str) -> ParallelFields:
    """Split, trim and coerce the two parallel fields.

    Unparseable timestamps are discarded rather than rejected; addresses are
    kept as-is. The post-filter counts must still match and be non-zero.
    """

    times, dropped = parse_times(split_field(times_text))
    addresses = split_field(addresses_text)
    if not times or not addresses or len(times) != len(addresses):
        raise ValidationError(
            ValidationReason.LENGTH_MISMATCH,
            PARALLEL_FORMAT_MESSAGE,
            field="botTransactionTimes",
        )
    return ParallelFields(times=tuple(times), addresses=tuple(addresses), dropped=tuple(dropped))


__all__ = [
    "PARALLEL_COUNT_MESSAGE",
    "PARALLEL_FORMAT_MESSAGE",
    "ParallelFields",
    "check_raw_counts",
    "parse_parallel",
    "parse_times",
    "split_field",
]
