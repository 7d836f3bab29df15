"""Aggregator: merge both source records into one immutable Verdict.

Pure and synchronous: no I/O, no shared state, the same inputs always give
the same verdict. A source that failed (exception) or is missing (None) is
unavailable: it is excluded from rule evaluation and lowers confidence, it
is never read as "all fields false".
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from loguru import logger

from token_safety.analyzers.findings import RiskCategory, RiskFinding, Severity, sort_findings
from token_safety.analyzers.models import HoneypotSourceRecord, OnchainSourceRecord
from token_safety.analyzers.recommendations import (
    INCOMPLETE_RECOMMENDATION,
    build_recommendations,
)
from token_safety.analyzers.rules import (
    DEFAULT_THRESHOLDS,
    NON_CONTRACT_CATEGORIES,
    RuleThresholds,
    evaluate_rules,
    is_non_contract,
)
from token_safety.analyzers.scoring import (
    MIN_CONFIDENCE,
    RiskLevel,
    SourceAvailability,
    score_findings,
)

SOURCE_HONEYPOT = "honeypot"
SOURCE_ONCHAIN = "onchain"

ANALYSIS_INCOMPLETE_WARNING = (
    "Analysis could not be completed: both honeypot and on-chain sources are unavailable"
)

# Breakdown labels
LOW = "LOW"
MEDIUM = "MEDIUM"
HIGH = "HIGH"
UNKNOWN = "UNKNOWN"

_SEVERITY_LABEL = {
    Severity.CRITICAL: HIGH,
    Severity.WARNING: MEDIUM,
    Severity.INFO: LOW,
}

# Which source a category's "no finding" depends on
_CATEGORY_SOURCE = {
    RiskCategory.TAX: SOURCE_HONEYPOT,
    RiskCategory.CENTRALIZATION: SOURCE_HONEYPOT,
    RiskCategory.VERIFICATION: SOURCE_HONEYPOT,
    RiskCategory.HONEYPOT: SOURCE_HONEYPOT,
    RiskCategory.TECHNICAL: SOURCE_ONCHAIN,
}


@dataclass(frozen=True)
class RiskBreakdown:
    """Per-category risk labels plus summary flags."""

    categories: Mapping[str, str]
    critical_count: int
    passed_basic_checks: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", MappingProxyType(dict(self.categories)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": dict(self.categories),
            "critical_count": self.critical_count,
            "passed_basic_checks": self.passed_basic_checks,
        }


@dataclass(frozen=True)
class Verdict:
    safety_score: int
    risk_level: RiskLevel
    is_honeypot: bool
    confidence: float
    warnings: tuple[str, ...]
    recommendations: tuple[str, ...]
    sources_checked: tuple[str, ...]
    breakdown: RiskBreakdown
    findings: tuple[RiskFinding, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "safety_score": self.safety_score,
            "risk_level": self.risk_level.value,
            "is_honeypot": self.is_honeypot,
            "confidence": self.confidence,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
            "sources_checked": list(self.sources_checked),
            "breakdown": self.breakdown.to_dict(),
            "findings": [
                {
                    "id": f.id,
                    "severity": f.severity.value,
                    "category": f.category.value,
                    "message": f.message,
                    "weight": f.weight,
                }
                for f in self.findings
            ],
        }


def _resolve(result: Any, record_type: type) -> Any:
    """Return the record, or None if the source failed or is missing."""
    if result is None or isinstance(result, BaseException):
        return None
    assert isinstance(result, record_type), (
        f"expected {record_type.__name__}, got {type(result).__name__}"
    )
    return result


def _build_breakdown(
    findings: list[RiskFinding],
    available: set[str],
    onchain: OnchainSourceRecord | None,
) -> RiskBreakdown:
    worst: dict[RiskCategory, Severity] = {}
    for f in findings:
        current = worst.get(f.category)
        if current is None or f.severity.rank > current.rank:
            worst[f.category] = f.severity

    # Categories whose rules were skipped for a non-contract address
    skipped = (
        set(RiskCategory) - NON_CONTRACT_CATEGORIES if is_non_contract(onchain) else set()
    )

    categories: dict[str, str] = {}
    for category in RiskCategory:
        if category in worst:
            categories[category.value] = _SEVERITY_LABEL[worst[category]]
        elif category not in skipped and _CATEGORY_SOURCE[category] in available:
            categories[category.value] = LOW
        else:
            categories[category.value] = UNKNOWN

    critical_count = sum(1 for f in findings if f.severity is Severity.CRITICAL)
    passed = (
        critical_count == 0
        and onchain is not None
        and onchain.is_contract
        and onchain.is_erc20
    )
    return RiskBreakdown(
        categories=categories,
        critical_count=critical_count,
        passed_basic_checks=passed,
    )


def _incomplete_verdict() -> Verdict:
    return Verdict(
        safety_score=0,
        risk_level=RiskLevel.CRITICAL,
        is_honeypot=False,
        confidence=MIN_CONFIDENCE,
        warnings=(ANALYSIS_INCOMPLETE_WARNING,),
        recommendations=(INCOMPLETE_RECOMMENDATION,),
        sources_checked=(),
        breakdown=RiskBreakdown(
            categories={c.value: UNKNOWN for c in RiskCategory},
            critical_count=0,
            passed_basic_checks=False,
        ),
    )


def aggregate(
    honeypot_result: HoneypotSourceRecord | BaseException | None,
    onchain_result: OnchainSourceRecord | BaseException | None,
    thresholds: RuleThresholds | None = None,
) -> Verdict:
    """Build the verdict from whatever each source produced.

    Never raises for source failures; with both sources unavailable the most
    conservative verdict is returned instead.
    """
    honeypot = _resolve(honeypot_result, HoneypotSourceRecord)
    onchain = _resolve(onchain_result, OnchainSourceRecord)

    if honeypot is None and onchain is None:
        logger.warning("[AGGREGATE] Both sources unavailable, returning incomplete verdict")
        return _incomplete_verdict()

    available: set[str] = set()
    if honeypot is not None:
        available.add(SOURCE_HONEYPOT)
    if onchain is not None:
        available.add(SOURCE_ONCHAIN)

    findings = sort_findings(
        evaluate_rules(honeypot, onchain, thresholds or DEFAULT_THRESHOLDS)
    )
    score = score_findings(
        findings,
        SourceAvailability(
            honeypot=honeypot is not None,
            onchain=onchain is not None,
        ),
    )

    verdict = Verdict(
        safety_score=score.safety_score,
        risk_level=score.risk_level,
        is_honeypot=score.is_honeypot,
        confidence=score.confidence,
        warnings=tuple(f.message for f in findings),
        recommendations=tuple(build_recommendations(findings)),
        sources_checked=tuple(
            s for s in (SOURCE_HONEYPOT, SOURCE_ONCHAIN) if s in available
        ),
        breakdown=_build_breakdown(findings, available, onchain),
        findings=tuple(findings),
    )
    logger.debug(
        f"[AGGREGATE] score={verdict.safety_score} level={verdict.risk_level.value} "
        f"findings={len(findings)} sources={','.join(verdict.sources_checked)}"
    )
    return verdict
