"""Fixed finding-id -> recommendation lookup."""

from token_safety.analyzers.findings import RiskFinding, sort_findings

MAX_RECOMMENDATIONS = 5

SAFE_RECOMMENDATION = "✅ Generally safe to interact"
INCOMPLETE_RECOMMENDATION = "Analysis could not be completed: retry later or avoid this token"

RECOMMENDATIONS: dict[str, str] = {
    "CONFIRMED_HONEYPOT": "Do not purchase — token cannot be sold",
    "NOT_A_CONTRACT": "Do not send funds: address is not a token contract",
    "HIGH_SELL_TAX": "Account for the sell tax before buying; exits will lose value",
    "HIGH_BUY_TAX": "Factor the buy tax into your entry price",
    "HOLDER_CONCENTRATION": "Beware of dumps: a few wallets control most of the supply",
    "PROXY_PLUS_UNVERIFIED": "Avoid: unverified upgradeable contract can change behavior at any time",
    "UNVERIFIED_CONTRACT": "Review the contract code before investing; source is not verified",
    "LOW_LIQUIDITY": "Use small position sizes; liquidity is too thin for safe exits",
    "NOT_ERC20_COMPLIANT": "Check wallet and DEX compatibility before trading",
    "FAILED_ONCHAIN_CHECKS": "Inspect the failed contract checks before trading",
    "PROXY_CONTRACT": "Monitor for contract upgrades",
}


def build_recommendations(findings: list[RiskFinding]) -> list[str]:
    """Recommendations for the dominant findings, most severe first, max 5."""
    if not findings:
        return [SAFE_RECOMMENDATION]

    result: list[str] = []
    for finding in sort_findings(findings):
        text = RECOMMENDATIONS.get(finding.id)
        if text is None or text in result:
            continue
        result.append(text)
        if len(result) >= MAX_RECOMMENDATIONS:
            break
    return result
