"""honeypot.is API client (buy/sell simulation, taxes, top holders, contract flags)."""

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
from loguru import logger

from token_safety.analyzers.models import HoneypotSourceRecord
from token_safety.analyzers.rate_limiter import RateLimiter

DEFAULT_BASE_URL = "https://api.honeypot.is"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]
TOP_HOLDERS_COUNT = 10


class HoneypotIsClient:
    """Async HTTP client for the honeypot.is simulation API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = "",
        max_rps: float = 2.0,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._rate_limiter = RateLimiter(max_rps)
        headers = {"X-API-KEY": api_key} if api_key else None
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def check_token(self, address: str, chain_id: int) -> HoneypotSourceRecord | None:
        """Run the honeypot simulation for a token.

        Returns None when the API is unreachable or the payload is unusable.
        Top holders are best-effort: a failed lookup only leaves
        ``top10_holders_percent`` unknown.
        """
        params = {"address": address, "chainID": chain_id}
        data = await self._get_json("/v2/IsHoneypot", params)
        if data is None:
            return None

        top10_pct = None
        holders = await self._get_json("/v1/TopHolders", params)
        if holders is not None:
            top10_pct = _parse_top10_percent(holders)

        record = _parse_report(data, top10_pct)
        if record is not None and record.is_honeypot:
            logger.info(
                f"[HONEYPOT] {address[:12]} on chain {chain_id}: "
                f"honeypot ({record.honeypot_reason or 'no reason given'})"
            )
        return record

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict | None:
        url = f"{self._base_url}{path}"

        for attempt in range(MAX_RETRIES + 1):
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.get(url, params=params)

                if resp.status_code == 429:
                    if attempt == MAX_RETRIES:
                        break
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[HONEYPOT] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue

                if resp.status_code != 200:
                    logger.debug(f"[HONEYPOT] HTTP {resp.status_code} for {path}")
                    return None

                data = resp.json()
                if not isinstance(data, dict):
                    logger.debug(f"[HONEYPOT] Unexpected payload type for {path}")
                    return None
                return data

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[HONEYPOT] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                else:
                    logger.warning(f"[HONEYPOT] Failed after retries for {path}: {e}")
                    return None
            except ValueError as e:
                logger.warning(f"[HONEYPOT] Malformed JSON from {path}: {e}")
                return None

        return None


def _parse_float(val: Any) -> float | None:
    if val is None or val == "":
        return None
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def _parse_int(val: Any) -> int | None:
    if val is None or val == "":
        return None
    try:
        return int(val)
    except (ValueError, TypeError):
        return None


def _parse_bool(val: Any) -> bool | None:
    if isinstance(val, bool):
        return val
    return None


def _parse_top10_percent(data: dict) -> float | None:
    """Share of total supply held by the 10 largest holders (0-100)."""
    try:
        total = Decimal(str(data.get("totalSupply") or "0"))
        holders = data.get("holders") or []
        balances = sorted(
            (Decimal(str(h.get("balance") or "0")) for h in holders),
            reverse=True,
        )
    except (InvalidOperation, AttributeError, TypeError):
        return None
    if total <= 0 or not balances:
        return None
    top = sum(balances[:TOP_HOLDERS_COUNT], Decimal(0))
    return float(min(top / total * 100, Decimal(100)))


def _parse_report(data: dict, top10_pct: float | None) -> HoneypotSourceRecord | None:
    """Parse an IsHoneypot response into a source record."""
    token = data.get("token") or {}
    honeypot = data.get("honeypotResult") or {}
    simulation = data.get("simulationResult") or {}
    code = data.get("contractCode") or {}
    pair = data.get("pair") or {}

    if not token and not honeypot and not simulation:
        logger.debug("[HONEYPOT] Empty report")
        return None

    return HoneypotSourceRecord(
        is_honeypot=honeypot.get("isHoneypot") is True,
        honeypot_reason=honeypot.get("honeypotReason") or None,
        buy_tax_percent=_parse_float(simulation.get("buyTax")),
        sell_tax_percent=_parse_float(simulation.get("sellTax")),
        transfer_tax_percent=_parse_float(simulation.get("transferTax")),
        holder_count=_parse_int(token.get("totalHolders")),
        top10_holders_percent=top10_pct,
        contract_verified=_parse_bool(code.get("openSource")),
        is_proxy=_parse_bool(code.get("isProxy")),
        liquidity_usd=_parse_float(pair.get("liquidity")),
        token_name=token.get("name") or None,
        token_symbol=token.get("symbol") or None,
    )
