from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mevguard.errors import ValidationError, ValidationReason
from mevguard.models import SandwichRequest, TimeRequest
from mevguard.schema import validate_request


def sandwich_payload(**overrides):
    payload = {
        "type": "sandwich",
        "transactionOrdering": "A,V,A",
        "gasPremiums": "+50,-5",
        "slippage": "2%",
    }
    payload.update(overrides)
    return payload


def time_payload(**overrides):
    payload = {
        "type": "time",
        "victimTransactionTime": 1000,
        "botTransactionTimes": "995,1005",
        "botTransactionAddresses": "0xB1,0xB2",
        "blockTimeThreshold": 12,
    }
    payload.update(overrides)
    return payload


def test_sandwich_request_is_validated():
    request = validate_request(sandwich_payload())

    assert isinstance(request, SandwichRequest)
    assert request.kind == "sandwich"
    assert request.transaction_ordering == "A,V,A"
    assert request.gas_premiums == "+50,-5"
    assert request.slippage == "2%"


def test_time_request_is_validated_and_parsed():
    request = validate_request(time_payload())

    assert isinstance(request, TimeRequest)
    assert request.victim_transaction_time == 1000
    assert request.block_time_threshold == 12
    assert [(tx.timestamp, tx.address) for tx in request.bot_transactions] == [
        (995, "0xB1"),
        (1005, "0xB2"),
    ]


@pytest.mark.parametrize("kind", ["bogus", None, 3, ["time"]])
def test_unknown_kind_is_rejected(kind):
    payload = sandwich_payload(type=kind)
    with pytest.raises(ValidationError) as excinfo:
        validate_request(payload)

    assert excinfo.value.reason is ValidationReason.UNKNOWN_KIND
    assert excinfo.value.message == "Invalid input."


def test_missing_type_and_non_mapping_are_unknown():
    payload = sandwich_payload()
    del payload["type"]
    for raw in (payload, "sandwich", None, [sandwich_payload()]):
        with pytest.raises(ValidationError) as excinfo:
            validate_request(raw)
        assert excinfo.value.reason is ValidationReason.UNKNOWN_KIND


def test_kind_key_is_accepted_as_discriminator():
    payload = sandwich_payload()
    payload["kind"] = payload.pop("type")

    assert isinstance(validate_request(payload), SandwichRequest)


@pytest.mark.parametrize(
    "field,value,message",
    [
        ("slippage", "   ", "Slippage is required."),
        ("gasPremiums", "", "Gas premiums are required."),
        ("transactionOrdering", 42, "Transaction ordering is required."),
    ],
)
def test_blank_or_mistyped_sandwich_fields_are_rejected(field, value, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_request(sandwich_payload(**{field: value}))

    assert excinfo.value.reason is ValidationReason.FIELD_INVALID
    assert excinfo.value.field == field
    assert excinfo.value.message == message


def test_missing_sandwich_field_is_reported():
    payload = sandwich_payload()
    del payload["slippage"]
    with pytest.raises(ValidationError) as excinfo:
        validate_request(payload)

    assert excinfo.value.field == "slippage"


def test_surrounding_whitespace_is_preserved_in_text_fields():
    request = validate_request(sandwich_payload(slippage=" 2% "))
    assert request.slippage == " 2% "


def test_numeric_strings_are_coerced():
    request = validate_request(time_payload(victimTransactionTime="1000", blockTimeThreshold="6"))

    assert request.victim_transaction_time == 1000
    assert request.block_time_threshold == 6


@pytest.mark.parametrize("value", [0, -5, "abc", "", None, True, float("nan"), float("inf"), 1000.5])
def test_invalid_victim_time_is_rejected(value):
    with pytest.raises(ValidationError) as excinfo:
        validate_request(time_payload(victimTransactionTime=value))

    assert excinfo.value.reason is ValidationReason.FIELD_INVALID
    assert excinfo.value.field == "victimTransactionTime"


def test_block_time_threshold_defaults_to_twelve():
    payload = time_payload()
    del payload["blockTimeThreshold"]

    assert validate_request(payload).block_time_threshold == 12
    assert validate_request(time_payload(blockTimeThreshold=None)).block_time_threshold == 12


def test_non_numeric_block_time_threshold_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        validate_request(time_payload(blockTimeThreshold="soon"))

    assert excinfo.value.reason is ValidationReason.FIELD_INVALID
    assert excinfo.value.field == "blockTimeThreshold"


def test_length_mismatch_fails_validation():
    with pytest.raises(ValidationError) as excinfo:
        validate_request(time_payload(botTransactionTimes="1,2,3", botTransactionAddresses="0xA,0xB"))

    assert excinfo.value.reason is ValidationReason.LENGTH_MISMATCH


def test_unparseable_time_token_fails_validation():
    with pytest.raises(ValidationError) as excinfo:
        validate_request(time_payload(botTransactionTimes="995,soon", botTransactionAddresses="0xB1,0xB2"))

    assert excinfo.value.reason is ValidationReason.LENGTH_MISMATCH
    assert excinfo.value.message == "Invalid bot transaction times or addresses format."


def test_blank_and_hex_time_tokens_are_accepted():
    request = validate_request(time_payload(botTransactionTimes="1,,0x10", botTransactionAddresses="0xA,0xB,0xC"))

    assert [(tx.timestamp, tx.address) for tx in request.bot_transactions] == [
        (1, "0xA"),
        (0, "0xB"),
        (16, "0xC"),
    ]


def test_addresses_are_not_checked_for_plausibility():
    request = validate_request(time_payload(botTransactionAddresses="bot-one, not an address"))

    assert [tx.address for tx in request.bot_transactions] == ["bot-one", "not an address"]


def test_wire_form_uses_camel_case_and_hides_parsed_pairs():
    request = validate_request(time_payload())
    wire = request.to_wire()

    assert wire["type"] == "time"
    assert wire["botTransactionTimes"] == "995,1005"
    assert "bot_transactions" not in wire
    assert "botTransactions" not in wire
