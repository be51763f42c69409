"""Structural validation of raw analysis requests."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from .errors import INVALID_INPUT_MESSAGE, ValidationError, ValidationReason
from .models import REQUEST_MODELS, AnalysisRequest, TimeRequest
from .parsing import check_raw_counts, parse_parallel

logger = logging.getLogger(__name__)

FIELD_MESSAGES = {
    "transactionOrdering": "Transaction ordering is required.",
    "gasPremiums": "Gas premiums are required.",
    "slippage": "Slippage is required.",
    "victimTransactionTime": "Victim transaction time must be a number of at least 1.",
    "botTransactionTimes": "Bot transaction times are required.",
    "botTransactionAddresses": "Bot transaction addresses are required.",
    "blockTimeThreshold": "Block time threshold must be a number.",
}

_SNAKE_TO_ALIAS = {
    "transaction_ordering": "transactionOrdering",
    "gas_premiums": "gasPremiums",
    "victim_transaction_time": "victimTransactionTime",
    "bot_transaction_times": "botTransactionTimes",
    "bot_transaction_addresses": "botTransactionAddresses",
    "block_time_threshold": "blockTimeThreshold",
}


def request_kind(raw: Mapping[str, Any]) -> Any:
    """Return the discriminator of ``raw`` (``type``, falling back to ``kind``)."""

    kind = raw.get("type")
    if kind is None:
        kind = raw.get("kind")
    return kind


def _field_error(exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors()
    location = errors[0].get("loc", ()) if errors else ()
    field = str(location[0]) if location else None
    field = _SNAKE_TO_ALIAS.get(field, field) if field else None
    message = FIELD_MESSAGES.get(field or "", INVALID_INPUT_MESSAGE)
    return ValidationError(ValidationReason.FIELD_INVALID, message, field=field)


def validate_request(raw: Any) -> AnalysisRequest:
    """Validate ``raw`` into a :class:`SandwichRequest` or :class:`TimeRequest`.

    Raises :class:`~mevguard.errors.ValidationError` on any structural problem.
    Time requests come back with ``bot_transactions`` already parsed.
    """

    if not isinstance(raw, Mapping):
        raise ValidationError(ValidationReason.UNKNOWN_KIND)

    kind = request_kind(raw)
    model = REQUEST_MODELS.get(kind) if isinstance(kind, str) else None
    if model is None:
        raise ValidationError(ValidationReason.UNKNOWN_KIND)

    payload = dict(raw)
    payload.pop("kind", None)
    payload.pop("bot_transactions", None)
    try:
        request = model.model_validate(payload)
    except PydanticValidationError as exc:
        error = _field_error(exc)
        logger.debug("Rejected %s request: %s", model.__name__, exc)
        raise error from exc

    if isinstance(request, TimeRequest):
        check_raw_counts(request.bot_transaction_times, request.bot_transaction_addresses)
        fields = parse_parallel(request.bot_transaction_times, request.bot_transaction_addresses)
        request = request.model_copy(update={"bot_transactions": fields.pairs()})
    return request


__all__ = ["FIELD_MESSAGES", "request_kind", "validate_request"]
