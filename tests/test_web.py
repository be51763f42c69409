from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mevguard import web
from mevguard.classifier import StubClassifier
from mevguard.dispatcher import Dispatcher, HTTPChannel, LocalChannel
from mevguard.models import SandwichResult, TimeResult
from mevguard.schema import validate_request
from mevguard.service import AnalysisService
from mevguard.session import AnalysisSession

SANDWICH_PAYLOAD = {
    "type": "sandwich",
    "transactionOrdering": "A,V,A",
    "gasPremiums": "+50,-5",
    "slippage": "2%",
}
TIME_PAYLOAD = {
    "type": "time",
    "victimTransactionTime": 1000,
    "botTransactionTimes": "995,1005",
    "botTransactionAddresses": "0xB1,0xB2",
}


@pytest.fixture
def stub():
    classifier = StubClassifier(
        sandwich=SandwichResult(
            is_sandwich_attack=True,
            attacker_address="0xAAA",
            victim_address="0xVVV",
            profit_potential=0.42,
        ),
        time=TimeResult(
            is_mev_bot_activity=True,
            number_of_close_transactions=2,
            bot_addresses=["0xB1", "0xB2"],
            explanation="both bots within one block",
        ),
    )
    web.app.dependency_overrides[web.get_classifier] = lambda: classifier
    yield classifier
    web.app.dependency_overrides.clear()


@pytest.fixture
def client(stub):
    return TestClient(web.app)


def test_sandwich_analysis_returns_data(client, stub):
    response = client.post("/api/analyze", json=SANDWICH_PAYLOAD)

    assert response.status_code == 200
    assert response.json() == {
        "data": {
            "isSandwichAttack": True,
            "attackerAddress": "0xAAA",
            "victimAddress": "0xVVV",
            "profitPotential": 0.42,
        }
    }
    assert stub.calls == 1


def test_time_analysis_synthesizes_attacker(client):
    response = client.post("/api/analyze", json=TIME_PAYLOAD)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["isMEVBotActivity"] is True
    assert data["numberOfCloseTransactions"] == 2
    assert data["botAddresses"] == ["0xB1", "0xB2"]
    assert data["attacker"] == "0xB1"


def test_unknown_type_is_rejected_with_400(client, stub):
    response = client.post("/api/analyze", json=dict(SANDWICH_PAYLOAD, type="bogus"))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid input."}
    assert stub.calls == 0


def test_length_mismatch_is_rejected_with_400(client, stub):
    payload = dict(TIME_PAYLOAD, botTransactionTimes="1,2,3", botTransactionAddresses="0xA,0xB")
    response = client.post("/api/analyze", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()
    assert stub.calls == 0


def test_invalid_field_is_rejected_with_400(client):
    response = client.post("/api/analyze", json=dict(SANDWICH_PAYLOAD, slippage=""))

    assert response.status_code == 400
    assert response.json() == {"error": "Slippage is required."}


def test_classifier_failure_returns_generic_500():
    web.app.dependency_overrides[web.get_classifier] = lambda: StubClassifier(error=RuntimeError("secret detail"))
    try:
        response = TestClient(web.app).post("/api/analyze", json=SANDWICH_PAYLOAD)
    finally:
        web.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze transaction. Please try again."}
    assert "secret" not in response.text


def test_malformed_json_returns_generic_500(client):
    response = client.post(
        "/api/analyze",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze transaction. Please try again."}


def test_health(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_session_uses_app_as_primary_channel(stub):
    fallback = StubClassifier()
    primary = HTTPChannel("http://mevguard.test/api/analyze", transport=httpx.ASGITransport(app=web.app))
    session = AnalysisSession(Dispatcher(primary, LocalChannel(AnalysisService(fallback))))

    outcome = asyncio.run(session.analyze(TIME_PAYLOAD))

    assert outcome.channel == "http"
    assert outcome.incident.attacker == "0xB1"
    assert outcome.incident.occurred_at == 1_000_000
    assert stub.calls == 1
    assert fallback.calls == 0


def test_remote_server_error_falls_back_locally(stub):
    # The server answers 500; the client treats a non-2xx status as a channel
    # failure and re-runs the request in-process.
    fallback = StubClassifier(
        sandwich=SandwichResult(
            is_sandwich_attack=False,
            attacker_address="N/A",
            victim_address="N/A",
            profit_potential=0,
        )
    )
    primary = HTTPChannel("http://mevguard.test/api/analyze", transport=httpx.ASGITransport(app=web.app))
    dispatcher = Dispatcher(primary, LocalChannel(AnalysisService(fallback)))
    request = validate_request(SANDWICH_PAYLOAD)

    web.app.dependency_overrides[web.get_classifier] = lambda: StubClassifier()
    envelope = asyncio.run(dispatcher.dispatch(request))

    assert envelope.channel == "local"
    assert fallback.calls == 1
    assert len(envelope.failures) == 1
