"""Risk findings: the unit produced by the rule set."""

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """Total order, higher = more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.INFO: 1,
    Severity.WARNING: 2,
    Severity.CRITICAL: 3,
}


class RiskCategory(str, Enum):
    TAX = "TAX"
    CENTRALIZATION = "CENTRALIZATION"
    TECHNICAL = "TECHNICAL"
    VERIFICATION = "VERIFICATION"
    HONEYPOT = "HONEYPOT"


# Tie-break order for warnings of equal severity (lower = listed first)
CATEGORY_RANK: dict[RiskCategory, int] = {
    RiskCategory.HONEYPOT: 0,
    RiskCategory.TAX: 1,
    RiskCategory.CENTRALIZATION: 2,
    RiskCategory.VERIFICATION: 3,
    RiskCategory.TECHNICAL: 4,
}

# Weight at or above which a HONEYPOT/TECHNICAL finding pins the score to the floor
SENTINEL_WEIGHT = 100.0
SENTINEL_CATEGORIES = frozenset({RiskCategory.HONEYPOT, RiskCategory.TECHNICAL})


@dataclass(frozen=True)
class RiskFinding:
    """A triggered risk rule."""

    id: str
    severity: Severity
    category: RiskCategory
    message: str
    weight: float

    @property
    def is_sentinel(self) -> bool:
        return self.category in SENTINEL_CATEGORIES and self.weight >= SENTINEL_WEIGHT


def sort_findings(findings: list[RiskFinding]) -> list[RiskFinding]:
    """Most severe first; ties broken by category rank, then discovery order.

    ``sorted`` is stable, so equal keys keep their discovery order.
    """
    return sorted(
        findings,
        key=lambda f: (-f.severity.rank, CATEGORY_RANK[f.category]),
    )
