"""Tests for verdict aggregation across both sources."""

import asyncio
from dataclasses import replace

import pytest

from token_safety.analyzers.aggregator import ANALYSIS_INCOMPLETE_WARNING, aggregate
from token_safety.analyzers.findings import Severity
from token_safety.analyzers.models import CheckOutcome, HoneypotSourceRecord, OnchainSourceRecord
from token_safety.analyzers.recommendations import RECOMMENDATIONS, SAFE_RECOMMENDATION
from token_safety.analyzers.scoring import RiskLevel


class TestScenarios:
    def test_safe_token(self, clean_honeypot, clean_onchain) -> None:
        verdict = aggregate(clean_honeypot, clean_onchain)

        assert verdict.risk_level is RiskLevel.SAFE
        assert verdict.safety_score >= 90
        assert not verdict.is_honeypot
        assert verdict.warnings == ()
        assert verdict.recommendations == (SAFE_RECOMMENDATION,)
        assert verdict.confidence == 1.0
        assert verdict.sources_checked == ("honeypot", "onchain")
        assert verdict.breakdown.passed_basic_checks
        assert set(verdict.breakdown.categories.values()) == {"LOW"}

    def test_confirmed_honeypot(self, clean_honeypot, clean_onchain) -> None:
        hp = replace(clean_honeypot, is_honeypot=True, honeypot_reason="cannot sell")
        verdict = aggregate(hp, clean_onchain)

        assert verdict.risk_level is RiskLevel.CRITICAL
        assert verdict.safety_score <= 5
        assert verdict.is_honeypot
        assert "cannot sell" in verdict.warnings[0]
        assert verdict.recommendations[0] == "Do not purchase — token cannot be sold"
        assert verdict.breakdown.categories["HONEYPOT"] == "HIGH"
        assert not verdict.breakdown.passed_basic_checks

    def test_high_sell_tax_only(self, clean_honeypot, clean_onchain) -> None:
        """sell tax 15% -> one CRITICAL finding, 100 - 25 = 75, LOW_RISK (no sentinel)."""
        verdict = aggregate(replace(clean_honeypot, sell_tax_percent=15.0), clean_onchain)

        assert [f.id for f in verdict.findings] == ["HIGH_SELL_TAX"]
        assert verdict.findings[0].severity is Severity.CRITICAL
        assert verdict.safety_score == 75
        assert verdict.risk_level is RiskLevel.LOW_RISK
        assert not verdict.is_honeypot
        assert verdict.breakdown.categories["TAX"] == "HIGH"
        assert verdict.breakdown.critical_count == 1
        assert not verdict.breakdown.passed_basic_checks

    def test_onchain_unavailable(self, clean_honeypot) -> None:
        verdict = aggregate(clean_honeypot, None)

        assert verdict.confidence == pytest.approx(0.7)
        assert verdict.sources_checked == ("honeypot",)
        assert verdict.breakdown.categories["TECHNICAL"] == "UNKNOWN"
        assert verdict.breakdown.categories["TAX"] == "LOW"
        assert not verdict.breakdown.passed_basic_checks

    def test_onchain_error_treated_as_unavailable(self, clean_honeypot) -> None:
        verdict = aggregate(clean_honeypot, asyncio.TimeoutError())
        assert verdict == aggregate(clean_honeypot, None)

    def test_honeypot_unavailable(self, clean_onchain) -> None:
        verdict = aggregate(RuntimeError("upstream 502"), clean_onchain)

        assert verdict.confidence == pytest.approx(0.6)
        assert verdict.sources_checked == ("onchain",)
        assert verdict.breakdown.categories["TAX"] == "UNKNOWN"
        assert verdict.breakdown.categories["HONEYPOT"] == "UNKNOWN"
        assert verdict.breakdown.categories["TECHNICAL"] == "LOW"
        assert verdict.breakdown.passed_basic_checks

    def test_both_unavailable(self) -> None:
        verdict = aggregate(None, ConnectionError("rpc down"))

        assert verdict.risk_level is RiskLevel.CRITICAL
        assert verdict.safety_score == 0
        assert verdict.confidence == 0.1
        assert verdict.warnings == (ANALYSIS_INCOMPLETE_WARNING,)
        assert verdict.sources_checked == ()
        assert set(verdict.breakdown.categories.values()) == {"UNKNOWN"}

    def test_not_a_contract(self, clean_honeypot) -> None:
        verdict = aggregate(clean_honeypot, OnchainSourceRecord(is_contract=False))

        assert verdict.risk_level is RiskLevel.CRITICAL
        assert verdict.safety_score <= 5
        assert verdict.is_honeypot
        assert [f.id for f in verdict.findings] == ["NOT_A_CONTRACT"]

    def test_not_a_contract_ignores_honeypot_content(self) -> None:
        verdict = aggregate(None, OnchainSourceRecord(is_contract=False))
        assert verdict.risk_level is RiskLevel.CRITICAL
        assert verdict.safety_score <= 5

    def test_not_a_contract_leaves_skipped_categories_unknown(self, clean_honeypot) -> None:
        verdict = aggregate(clean_honeypot, OnchainSourceRecord(is_contract=False))

        categories = verdict.breakdown.categories
        assert categories["TECHNICAL"] == "HIGH"
        assert categories["HONEYPOT"] == "LOW"
        assert categories["TAX"] == "UNKNOWN"
        assert categories["CENTRALIZATION"] == "UNKNOWN"
        assert categories["VERIFICATION"] == "UNKNOWN"

    def test_honeypot_at_non_contract_address(self) -> None:
        """The simulator's honeypot verdict survives the non-contract short-circuit."""
        hp = HoneypotSourceRecord(
            is_honeypot=True, honeypot_reason="cannot sell", sell_tax_percent=99.0
        )
        verdict = aggregate(hp, OnchainSourceRecord(is_contract=False))

        assert [f.id for f in verdict.findings] == ["CONFIRMED_HONEYPOT", "NOT_A_CONTRACT"]
        assert verdict.is_honeypot
        assert verdict.safety_score == 0
        assert verdict.risk_level is RiskLevel.CRITICAL
        assert verdict.warnings[0] == "HONEYPOT DETECTED: cannot sell"
        assert RECOMMENDATIONS["CONFIRMED_HONEYPOT"] in verdict.recommendations
        assert verdict.breakdown.categories["HONEYPOT"] == "HIGH"
        assert verdict.breakdown.categories["TAX"] == "UNKNOWN"
        assert verdict.breakdown.critical_count == 2


class TestProperties:
    def test_deterministic(self, clean_honeypot, clean_onchain) -> None:
        hp = replace(clean_honeypot, sell_tax_percent=7.0, top10_holders_percent=65.0)
        first = aggregate(hp, clean_onchain)
        second = aggregate(hp, clean_onchain)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_warning_order(self, clean_honeypot, clean_onchain) -> None:
        """CRITICAL before WARNING before INFO; category breaks severity ties."""
        hp = replace(
            clean_honeypot,
            is_proxy=True,
            liquidity_usd=500.0,
            sell_tax_percent=7.0,
            top10_holders_percent=80.0,
        )
        verdict = aggregate(hp, clean_onchain)

        assert [f.id for f in verdict.findings] == [
            "HOLDER_CONCENTRATION",
            "HIGH_SELL_TAX",
            "LOW_LIQUIDITY",
            "PROXY_CONTRACT",
        ]
        ranks = [f.severity.rank for f in verdict.findings]
        assert ranks == sorted(ranks, reverse=True)
        assert verdict.warnings == tuple(f.message for f in verdict.findings)
        assert verdict.safety_score == 55
        assert verdict.risk_level is RiskLevel.MEDIUM_RISK

    def test_monotonic_when_adding_risks(self, clean_honeypot, clean_onchain) -> None:
        steps = [
            {"is_proxy": True},
            {"buy_tax_percent": 7.0},
            {"contract_verified": False},
            {"liquidity_usd": 200.0},
            {"sell_tax_percent": 30.0},
            {"top10_holders_percent": 90.0},
            {"is_honeypot": True},
        ]
        hp = clean_honeypot
        previous = aggregate(hp, clean_onchain).safety_score
        for change in steps:
            hp = replace(hp, **change)
            current = aggregate(hp, clean_onchain).safety_score
            assert current <= previous
            previous = current
        assert previous <= 5

    def test_sentinel_beats_benign_signals(self, clean_honeypot, clean_onchain) -> None:
        hp = replace(clean_honeypot, is_honeypot=True, honeypot_reason=None)
        verdict = aggregate(hp, clean_onchain)
        assert verdict.risk_level is RiskLevel.CRITICAL
        assert verdict.safety_score <= 5

    def test_many_findings_cap_recommendations(self, clean_onchain) -> None:
        hp = HoneypotSourceRecord(
            sell_tax_percent=20.0,
            buy_tax_percent=20.0,
            top10_holders_percent=90.0,
            contract_verified=False,
            is_proxy=True,
            liquidity_usd=100.0,
        )
        onchain = replace(
            clean_onchain,
            is_erc20=False,
            checks={"has transfer function": CheckOutcome.FAIL, "has approve function": CheckOutcome.FAIL},
        )
        verdict = aggregate(hp, onchain)

        assert len(verdict.findings) == 8
        assert len(verdict.recommendations) == 5
        assert verdict.safety_score == 0
        assert verdict.risk_level is RiskLevel.CRITICAL
        assert not verdict.is_honeypot
        assert verdict.breakdown.critical_count == 3
        assert verdict.breakdown.categories["TECHNICAL"] == "MEDIUM"

    def test_verdict_mappings_are_read_only(self, clean_honeypot, clean_onchain) -> None:
        verdict = aggregate(clean_honeypot, clean_onchain)

        with pytest.raises(TypeError):
            verdict.breakdown.categories["TAX"] = "HIGH"
        with pytest.raises(TypeError):
            clean_onchain.checks["has transfer function"] = CheckOutcome.FAIL
        assert verdict.breakdown.categories["TAX"] == "LOW"

    def test_invalid_input_type_is_a_defect(self) -> None:
        with pytest.raises(AssertionError):
            aggregate({"is_honeypot": True}, None)

    def test_to_dict_is_plain(self, clean_honeypot, clean_onchain) -> None:
        data = aggregate(replace(clean_honeypot, sell_tax_percent=15.0), clean_onchain).to_dict()
        assert data["risk_level"] == "LOW_RISK"
        assert data["findings"][0]["severity"] == "CRITICAL"
        assert data["breakdown"]["critical_count"] == 1
