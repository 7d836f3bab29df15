"""Scoring function: weighted deduction with sentinel floor.

Start at 100 and subtract each finding's weight. A sentinel finding
(confirmed honeypot, non-contract address) caps the score at 5 and forces
the CRITICAL bucket regardless of anything else.
"""

from dataclasses import dataclass
from enum import Enum

from token_safety.analyzers.findings import RiskFinding

MAX_SCORE = 100
SENTINEL_SCORE_CAP = 5

HONEYPOT_SOURCE_PENALTY = 0.4
ONCHAIN_SOURCE_PENALTY = 0.3
MIN_CONFIDENCE = 0.1

# Finding ids that mark the token as untradeable
HONEYPOT_FINDING_IDS = frozenset({"CONFIRMED_HONEYPOT", "NOT_A_CONTRACT"})


class RiskLevel(str, Enum):
    SAFE = "SAFE"
    LOW_RISK = "LOW_RISK"
    MEDIUM_RISK = "MEDIUM_RISK"
    HIGH_RISK = "HIGH_RISK"
    CRITICAL = "CRITICAL"


# (min score, level), checked top-down
RISK_LEVEL_BREAKPOINTS: tuple[tuple[int, RiskLevel], ...] = (
    (90, RiskLevel.SAFE),
    (70, RiskLevel.LOW_RISK),
    (40, RiskLevel.MEDIUM_RISK),
    (15, RiskLevel.HIGH_RISK),
)


@dataclass(frozen=True)
class SourceAvailability:
    honeypot: bool
    onchain: bool


@dataclass(frozen=True)
class Score:
    safety_score: int
    risk_level: RiskLevel
    confidence: float
    is_honeypot: bool


def risk_level_for(score: int) -> RiskLevel:
    for min_score, level in RISK_LEVEL_BREAKPOINTS:
        if score >= min_score:
            return level
    return RiskLevel.CRITICAL


def compute_confidence(sources: SourceAvailability) -> float:
    """1.0 minus a fixed penalty per missing source, never below 0.1."""
    if not sources.honeypot and not sources.onchain:
        return MIN_CONFIDENCE
    confidence = 1.0
    if not sources.honeypot:
        confidence -= HONEYPOT_SOURCE_PENALTY
    if not sources.onchain:
        confidence -= ONCHAIN_SOURCE_PENALTY
    return round(min(1.0, max(MIN_CONFIDENCE, confidence)), 2)


def score_findings(findings: list[RiskFinding], sources: SourceAvailability) -> Score:
    """Map triggered findings + data completeness to score, level and confidence."""
    raw = MAX_SCORE - sum(f.weight for f in findings)
    has_sentinel = any(f.is_sentinel for f in findings)
    if has_sentinel:
        raw = min(raw, SENTINEL_SCORE_CAP)

    safety_score = int(max(0, min(MAX_SCORE, raw)))
    risk_level = RiskLevel.CRITICAL if has_sentinel else risk_level_for(safety_score)

    return Score(
        safety_score=safety_score,
        risk_level=risk_level,
        confidence=compute_confidence(sources),
        is_honeypot=any(f.id in HONEYPOT_FINDING_IDS for f in findings),
    )
