"""Token analysis service: fetch both sources concurrently, then aggregate.

Each source runs under its own timeout; a source that raises or times out
is handed to the aggregator as unavailable.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from token_safety.analyzers.aggregator import Verdict, aggregate
from token_safety.analyzers.chains import UnsupportedChainError
from token_safety.analyzers.models import HoneypotSourceRecord, OnchainSourceRecord
from token_safety.analyzers.rules import RuleThresholds


class HoneypotSource(Protocol):
    async def check_token(self, address: str, chain_id: int) -> HoneypotSourceRecord | None: ...


class OnchainSource(Protocol):
    def is_chain_supported(self, chain_id: int) -> bool: ...

    def supported_chains(self) -> list[int]: ...

    async def analyze_token(self, address: str, chain_id: int) -> OnchainSourceRecord | None: ...


@dataclass(frozen=True)
class TokenAnalysis:
    """Verdict plus the raw source records it was built from."""

    address: str
    chain_id: int
    verdict: Verdict
    honeypot: HoneypotSourceRecord | None
    onchain: OnchainSourceRecord | None
    processing_time_ms: int

    @property
    def token_name(self) -> str | None:
        if self.honeypot is not None and self.honeypot.token_name:
            return self.honeypot.token_name
        return self.onchain.name if self.onchain is not None else None

    @property
    def token_symbol(self) -> str | None:
        if self.honeypot is not None and self.honeypot.token_symbol:
            return self.honeypot.token_symbol
        return self.onchain.symbol if self.onchain is not None else None


class TokenSafetyService:
    """Runs both analyzers for a token and builds the verdict."""

    def __init__(
        self,
        honeypot: HoneypotSource,
        onchain: OnchainSource,
        *,
        honeypot_timeout: float = 10.0,
        onchain_timeout: float = 10.0,
        thresholds: RuleThresholds | None = None,
    ) -> None:
        self._honeypot = honeypot
        self._onchain = onchain
        self._honeypot_timeout = honeypot_timeout
        self._onchain_timeout = onchain_timeout
        self._thresholds = thresholds

    def is_chain_supported(self, chain_id: int) -> bool:
        return self._onchain.is_chain_supported(chain_id)

    def supported_chains(self) -> list[int]:
        return self._onchain.supported_chains()

    async def analyze(self, address: str, chain_id: int) -> TokenAnalysis:
        """Analyze a token. Raises UnsupportedChainError for unknown chains."""
        if not self.is_chain_supported(chain_id):
            raise UnsupportedChainError(chain_id)

        started = time.monotonic()
        logger.info(f"[ANALYZE] {address} on chain {chain_id}")

        honeypot_result, onchain_result = await asyncio.gather(
            asyncio.wait_for(
                self._honeypot.check_token(address, chain_id),
                timeout=self._honeypot_timeout,
            ),
            asyncio.wait_for(
                self._onchain.analyze_token(address, chain_id),
                timeout=self._onchain_timeout,
            ),
            return_exceptions=True,
        )

        for label, result in (("honeypot", honeypot_result), ("onchain", onchain_result)):
            if isinstance(result, asyncio.TimeoutError):
                logger.warning(f"[ANALYZE] {label} source timed out for {address}")
            elif isinstance(result, BaseException):
                logger.warning(f"[ANALYZE] {label} source failed for {address}: {result!r}")
            elif result is None:
                logger.debug(f"[ANALYZE] {label} source returned no data for {address}")

        verdict = aggregate(honeypot_result, onchain_result, self._thresholds)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        logger.info(
            f"[ANALYZE] {address} done in {elapsed_ms}ms: "
            f"score={verdict.safety_score} level={verdict.risk_level.value} "
            f"honeypot={verdict.is_honeypot} confidence={verdict.confidence:.0%}"
        )

        return TokenAnalysis(
            address=address,
            chain_id=chain_id,
            verdict=verdict,
            honeypot=honeypot_result if isinstance(honeypot_result, HoneypotSourceRecord) else None,
            onchain=onchain_result if isinstance(onchain_result, OnchainSourceRecord) else None,
            processing_time_ms=elapsed_ms,
        )
