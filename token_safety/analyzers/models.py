"""Source record types handed to the aggregator by the two analyzers.

Unknown values are ``None`` everywhere; a rule that needs a field which is
``None`` does not fire.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class CheckOutcome(str, Enum):
    """Outcome of a single named on-chain sub-check."""

    PASS = "pass"
    FAIL = "fail"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class HoneypotSourceRecord:
    """Simulation-based analysis (buy/sell simulation, holders, contract metadata)."""

    is_honeypot: bool = False
    honeypot_reason: str | None = None
    buy_tax_percent: float | None = None  # 0-100
    sell_tax_percent: float | None = None  # 0-100
    transfer_tax_percent: float | None = None  # 0-100
    holder_count: int | None = None
    top10_holders_percent: float | None = None  # 0-100
    contract_verified: bool | None = None
    is_proxy: bool | None = None
    liquidity_usd: float | None = None
    token_name: str | None = None
    token_symbol: str | None = None


@dataclass(frozen=True)
class OnchainSourceRecord:
    """Direct contract inspection over JSON-RPC."""

    is_contract: bool
    is_erc20: bool = False
    code_size_bytes: int = 0
    total_supply: str | None = None  # raw integer as decimal string
    decimals: int | None = None  # 0-255
    checks: Mapping[str, CheckOutcome] = field(default_factory=dict)
    name: str | None = None
    symbol: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "checks", MappingProxyType(dict(self.checks)))

    @property
    def failed_checks(self) -> list[str]:
        return [name for name, outcome in self.checks.items() if outcome is CheckOutcome.FAIL]
