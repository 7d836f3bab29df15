"""Tests for the HTTP API (analyze + health)."""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from token_safety.analyzers.models import OnchainSourceRecord
from token_safety.analyzers.service import TokenSafetyService
from token_safety.api.app import create_app

TOKEN = "0x" + "ab" * 20


class StubHoneypot:
    def __init__(self, record):
        self.record = record

    async def check_token(self, address: str, chain_id: int):
        return self.record


class StubOnchain:
    def __init__(self, record):
        self.record = record

    def is_chain_supported(self, chain_id: int) -> bool:
        return chain_id == 1

    def supported_chains(self) -> list[int]:
        return [1]

    async def analyze_token(self, address: str, chain_id: int):
        return self.record


class BrokenService(TokenSafetyService):
    async def analyze(self, address: str, chain_id: int):
        raise RuntimeError("boom")


def _client(service) -> TestClient:
    return TestClient(create_app(service=service))


@pytest.fixture
def api(clean_honeypot, clean_onchain) -> TestClient:
    return _client(TokenSafetyService(StubHoneypot(clean_honeypot), StubOnchain(clean_onchain)))


class TestAnalyzeEndpoint:
    def test_safe_token(self, api) -> None:
        resp = api.post("/api/v1/analyze", json={"token_address": TOKEN, "chain_id": 1})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        analysis = body["data"]["analysis"]
        assert analysis["risk_level"] == "SAFE"
        assert analysis["safety_score"] == 100
        assert analysis["warnings"] == []
        assert analysis["sources"] == ["honeypot", "onchain"]
        assert analysis["passed_basic_checks"] is True
        assert analysis["risks"]["tax"] == "LOW"
        token = body["data"]["token"]
        assert token["chain_name"] == "Ethereum"
        assert token["symbol"] == "CLN"
        assert body["data"]["details"]["onchain"]["checks"]["has transfer function"] == "pass"
        assert resp.headers["X-Content-Type-Options"] == "nosniff"

    def test_honeypot(self, clean_honeypot, clean_onchain) -> None:
        hp = replace(clean_honeypot, is_honeypot=True, honeypot_reason="cannot sell")
        api = _client(TokenSafetyService(StubHoneypot(hp), StubOnchain(clean_onchain)))

        analysis = api.post(
            "/api/v1/analyze", json={"token_address": TOKEN, "chain_id": 1}
        ).json()["data"]["analysis"]

        assert analysis["is_honeypot"] is True
        assert analysis["risk_level"] == "CRITICAL"
        assert analysis["red_flags"] == 1

    def test_onchain_missing(self, clean_honeypot) -> None:
        api = _client(TokenSafetyService(StubHoneypot(clean_honeypot), StubOnchain(None)))

        data = api.post(
            "/api/v1/analyze", json={"token_address": TOKEN, "chain_id": 1}
        ).json()["data"]

        assert data["analysis"]["confidence"] == pytest.approx(0.7)
        assert data["analysis"]["risks"]["technical"] == "UNKNOWN"
        assert data["details"]["onchain"] is None

    def test_not_a_contract(self, clean_honeypot) -> None:
        api = _client(
            TokenSafetyService(
                StubHoneypot(clean_honeypot), StubOnchain(OnchainSourceRecord(is_contract=False))
            )
        )
        analysis = api.post(
            "/api/v1/analyze", json={"token_address": TOKEN, "chain_id": 1}
        ).json()["data"]["analysis"]
        assert analysis["risk_level"] == "CRITICAL"
        assert analysis["safety_score"] <= 5
        assert analysis["risks"]["technical"] == "HIGH"
        assert analysis["risks"]["tax"] == "UNKNOWN"

    def test_invalid_address(self, api) -> None:
        resp = api.post("/api/v1/analyze", json={"token_address": "0x123", "chain_id": 1})
        assert resp.status_code == 422

    def test_invalid_chain_id(self, api) -> None:
        resp = api.post("/api/v1/analyze", json={"token_address": TOKEN, "chain_id": 0})
        assert resp.status_code == 422

    def test_unsupported_chain(self, api) -> None:
        resp = api.post("/api/v1/analyze", json={"token_address": TOKEN, "chain_id": 56})

        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "UNSUPPORTED_CHAIN"
        assert error["supported_chains"] == [1]

    def test_internal_error(self, clean_honeypot, clean_onchain) -> None:
        api = _client(BrokenService(StubHoneypot(clean_honeypot), StubOnchain(clean_onchain)))

        resp = api.post("/api/v1/analyze", json={"token_address": TOKEN, "chain_id": 1})

        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "INTERNAL_ERROR"


class TestHealthEndpoint:
    def test_health(self, api) -> None:
        resp = api.get("/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert body["status"] == "healthy"
        assert body["supported_chains"] == [{"chain_id": 1, "name": "Ethereum"}]
