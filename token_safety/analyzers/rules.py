"""Risk rule set: independent checks over the two source records.

Each rule is a pure function ``(honeypot, onchain, thresholds) -> RiskFinding | None``.
A rule whose input field is unknown (``None``) or whose source is missing
returns None instead of guessing. Rules never raise.
"""

from collections.abc import Callable
from dataclasses import dataclass

from token_safety.analyzers.findings import RiskCategory, RiskFinding, Severity
from token_safety.analyzers.models import HoneypotSourceRecord, OnchainSourceRecord


@dataclass(frozen=True)
class RuleThresholds:
    """Thresholds and weights for every rule. Defaults are the production values."""

    honeypot_weight: float = 100.0

    sell_tax_critical_pct: float = 10.0
    sell_tax_warning_pct: float = 5.0
    sell_tax_critical_weight: float = 25.0
    sell_tax_warning_weight: float = 10.0

    buy_tax_critical_pct: float = 10.0
    buy_tax_warning_pct: float = 5.0
    buy_tax_critical_weight: float = 20.0
    buy_tax_warning_weight: float = 8.0

    top10_critical_pct: float = 70.0
    top10_warning_pct: float = 50.0
    top10_critical_weight: float = 20.0
    top10_warning_weight: float = 10.0

    unverified_weight: float = 10.0
    proxy_weight: float = 5.0
    proxy_unverified_weight: float = 15.0

    min_liquidity_usd: float = 1_000.0
    low_liquidity_weight: float = 10.0

    not_contract_weight: float = 100.0
    not_erc20_weight: float = 10.0

    failed_check_weight: float = 5.0
    failed_checks_max_weight: float = 20.0


DEFAULT_THRESHOLDS = RuleThresholds()

Rule = Callable[
    [HoneypotSourceRecord | None, OnchainSourceRecord | None, RuleThresholds],
    RiskFinding | None,
]


def _is_contract(onchain: OnchainSourceRecord | None) -> bool:
    return onchain is not None and onchain.is_contract


# --- Honeypot ---


def confirmed_honeypot(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if hp is None or not hp.is_honeypot:
        return None
    reason = hp.honeypot_reason or "sell simulation failed"
    return RiskFinding(
        id="CONFIRMED_HONEYPOT",
        severity=Severity.CRITICAL,
        category=RiskCategory.HONEYPOT,
        message=f"HONEYPOT DETECTED: {reason}",
        weight=t.honeypot_weight,
    )


# --- Tax ---


def high_sell_tax(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if hp is None or hp.sell_tax_percent is None:
        return None
    tax = hp.sell_tax_percent
    if tax > t.sell_tax_critical_pct:
        return RiskFinding(
            "HIGH_SELL_TAX", Severity.CRITICAL, RiskCategory.TAX,
            f"Very high sell tax: {tax:.1f}%", t.sell_tax_critical_weight,
        )
    if tax > t.sell_tax_warning_pct:
        return RiskFinding(
            "HIGH_SELL_TAX", Severity.WARNING, RiskCategory.TAX,
            f"Elevated sell tax: {tax:.1f}%", t.sell_tax_warning_weight,
        )
    return None


def high_buy_tax(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if hp is None or hp.buy_tax_percent is None:
        return None
    tax = hp.buy_tax_percent
    if tax > t.buy_tax_critical_pct:
        return RiskFinding(
            "HIGH_BUY_TAX", Severity.CRITICAL, RiskCategory.TAX,
            f"Very high buy tax: {tax:.1f}%", t.buy_tax_critical_weight,
        )
    if tax > t.buy_tax_warning_pct:
        return RiskFinding(
            "HIGH_BUY_TAX", Severity.WARNING, RiskCategory.TAX,
            f"Elevated buy tax: {tax:.1f}%", t.buy_tax_warning_weight,
        )
    return None


# --- Centralization ---


def holder_concentration(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if hp is None or hp.top10_holders_percent is None:
        return None
    pct = hp.top10_holders_percent
    if pct > t.top10_critical_pct:
        return RiskFinding(
            "HOLDER_CONCENTRATION", Severity.CRITICAL, RiskCategory.CENTRALIZATION,
            f"Extreme centralization: top 10 holders own {pct:.1f}% of supply",
            t.top10_critical_weight,
        )
    if pct > t.top10_warning_pct:
        return RiskFinding(
            "HOLDER_CONCENTRATION", Severity.WARNING, RiskCategory.CENTRALIZATION,
            f"High centralization: top 10 holders own {pct:.1f}% of supply",
            t.top10_warning_weight,
        )
    return None


# --- Verification / proxy ---


def unverified_contract(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if hp is None or hp.contract_verified is not False:
        return None
    return RiskFinding(
        "UNVERIFIED_CONTRACT", Severity.WARNING, RiskCategory.VERIFICATION,
        "Contract source code is not verified", t.unverified_weight,
    )


def proxy_contract(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    # Escalated to PROXY_PLUS_UNVERIFIED when the source is also unverified
    if hp is None or hp.is_proxy is not True or hp.contract_verified is False:
        return None
    return RiskFinding(
        "PROXY_CONTRACT", Severity.INFO, RiskCategory.TECHNICAL,
        "Proxy contract: logic can be upgraded by the owner", t.proxy_weight,
    )


def proxy_plus_unverified(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if hp is None or hp.is_proxy is not True or hp.contract_verified is not False:
        return None
    return RiskFinding(
        "PROXY_PLUS_UNVERIFIED", Severity.WARNING, RiskCategory.TECHNICAL,
        "Unverified proxy contract: hidden logic can be swapped at any time",
        t.proxy_unverified_weight,
    )


# --- Technical ---


def low_liquidity(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if hp is None or hp.liquidity_usd is None:
        return None
    if hp.liquidity_usd >= t.min_liquidity_usd:
        return None
    return RiskFinding(
        "LOW_LIQUIDITY", Severity.WARNING, RiskCategory.TECHNICAL,
        f"Very low liquidity: ${hp.liquidity_usd:,.0f}", t.low_liquidity_weight,
    )


def not_a_contract(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if onchain is None or onchain.is_contract:
        return None
    return RiskFinding(
        "NOT_A_CONTRACT", Severity.CRITICAL, RiskCategory.TECHNICAL,
        "Address is not a contract (no bytecode deployed)", t.not_contract_weight,
    )


def not_erc20_compliant(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if not _is_contract(onchain) or onchain.is_erc20:
        return None
    return RiskFinding(
        "NOT_ERC20_COMPLIANT", Severity.WARNING, RiskCategory.TECHNICAL,
        "Contract does not implement the standard ERC20 interface", t.not_erc20_weight,
    )


def failed_onchain_checks(hp, onchain, t: RuleThresholds) -> RiskFinding | None:
    if not _is_contract(onchain):
        return None
    failed = onchain.failed_checks
    if not failed:
        return None
    weight = min(len(failed) * t.failed_check_weight, t.failed_checks_max_weight)
    return RiskFinding(
        "FAILED_ONCHAIN_CHECKS", Severity.WARNING, RiskCategory.TECHNICAL,
        f"Failed on-chain checks: {', '.join(failed)}", weight,
    )


RULES: tuple[Rule, ...] = (
    confirmed_honeypot,
    high_sell_tax,
    high_buy_tax,
    holder_concentration,
    unverified_contract,
    proxy_contract,
    proxy_plus_unverified,
    low_liquidity,
    not_a_contract,
    not_erc20_compliant,
    failed_onchain_checks,
)

# Rules still meaningful when the address has no bytecode, and the
# categories they cover. Every other category is left unevaluated.
NON_CONTRACT_RULES: tuple[Rule, ...] = (confirmed_honeypot, not_a_contract)
NON_CONTRACT_CATEGORIES = frozenset({RiskCategory.HONEYPOT, RiskCategory.TECHNICAL})


def is_non_contract(onchain: OnchainSourceRecord | None) -> bool:
    return onchain is not None and not onchain.is_contract


def evaluate_rules(
    honeypot: HoneypotSourceRecord | None,
    onchain: OnchainSourceRecord | None,
    thresholds: RuleThresholds = DEFAULT_THRESHOLDS,
) -> list[RiskFinding]:
    """Run every rule in order and collect the findings that fired.

    A non-contract address makes tax, holder and verification data
    meaningless, so only the rules in ``NON_CONTRACT_RULES`` run for it.
    """
    rules = NON_CONTRACT_RULES if is_non_contract(onchain) else RULES

    findings: list[RiskFinding] = []
    for rule in rules:
        finding = rule(honeypot, onchain, thresholds)
        if finding is not None:
            findings.append(finding)
    return findings
