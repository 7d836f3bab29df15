"""On-chain contract inspection over EVM JSON-RPC.

Reads bytecode and the standard ERC20 view functions directly from a node,
without any ABI library: selectors are fixed and results are decoded by hand.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from token_safety.analyzers.chains import Chain, UnsupportedChainError
from token_safety.analyzers.models import CheckOutcome, OnchainSourceRecord
from token_safety.analyzers.rate_limiter import RateLimiter

MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]

# 4-byte function selectors
SEL_TOTAL_SUPPLY = "18160ddd"
SEL_BALANCE_OF = "70a08231"
SEL_DECIMALS = "313ce567"
SEL_NAME = "06fdde03"
SEL_SYMBOL = "95d89b41"
SEL_TRANSFER = "a9059cbb"
SEL_APPROVE = "095ea7b3"
SEL_TRANSFER_FROM = "23b872dd"

ZERO_ADDRESS_ARG = "0" * 64

# Check names, in report order
CHECK_TOTAL_SUPPLY = "has totalSupply function"
CHECK_BALANCE_OF = "has balanceOf function"
CHECK_DECIMALS = "has decimals function"
CHECK_TRANSFER = "has transfer function"
CHECK_APPROVE = "has approve function"
CHECK_TRANSFER_FROM = "has transferFrom function"

_BYTECODE_CHECKS = (
    (CHECK_TRANSFER, SEL_TRANSFER),
    (CHECK_APPROVE, SEL_APPROVE),
    (CHECK_TRANSFER_FROM, SEL_TRANSFER_FROM),
)


class RpcError(Exception):
    """Node answered with a JSON-RPC error (e.g. execution reverted)."""


class RpcUnavailableError(Exception):
    """Node could not be reached or returned a non-JSON-RPC response."""


class OnchainAnalyzer:
    """Async JSON-RPC client inspecting token contracts on supported chains."""

    def __init__(
        self,
        chains: dict[int, Chain],
        max_rps: float = 10.0,
        timeout: float = 10.0,
    ) -> None:
        self._chains = chains
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    async def close(self) -> None:
        await self._client.aclose()

    def is_chain_supported(self, chain_id: int) -> bool:
        return chain_id in self._chains

    def supported_chains(self) -> list[int]:
        return sorted(self._chains)

    async def analyze_token(self, address: str, chain_id: int) -> OnchainSourceRecord | None:
        """Inspect a token contract. Returns None if the node is unusable."""
        chain = self._chains.get(chain_id)
        if chain is None:
            raise UnsupportedChainError(chain_id)

        try:
            code = await self._rpc(chain.rpc_url, "eth_getCode", [address, "latest"])
        except (RpcError, RpcUnavailableError) as e:
            logger.warning(f"[ONCHAIN] eth_getCode failed for {address[:12]} on {chain.name}: {e}")
            return None

        bytecode = _strip_hex(code if isinstance(code, str) else "")
        code_size = len(bytecode) // 2
        if code_size == 0:
            logger.info(f"[ONCHAIN] {address[:12]} on {chain.name} has no bytecode")
            return OnchainSourceRecord(is_contract=False)

        total_supply, balance, decimals, name, symbol = await asyncio.gather(
            self._call(chain.rpc_url, address, SEL_TOTAL_SUPPLY),
            self._call(chain.rpc_url, address, SEL_BALANCE_OF + ZERO_ADDRESS_ARG),
            self._call(chain.rpc_url, address, SEL_DECIMALS),
            self._call(chain.rpc_url, address, SEL_NAME),
            self._call(chain.rpc_url, address, SEL_SYMBOL),
        )

        checks: dict[str, CheckOutcome] = {
            CHECK_TOTAL_SUPPLY: _call_outcome(total_supply, _decode_uint),
            CHECK_BALANCE_OF: _call_outcome(balance, _decode_uint),
            CHECK_DECIMALS: _call_outcome(decimals, _decode_uint),
        }
        views_ok = (
            checks[CHECK_TOTAL_SUPPLY] is CheckOutcome.PASS
            and checks[CHECK_BALANCE_OF] is CheckOutcome.PASS
        )
        for check_name, selector in _BYTECODE_CHECKS:
            checks[check_name] = _bytecode_outcome(bytecode, selector, views_ok)

        supply_value = _decode_uint(total_supply) if isinstance(total_supply, str) else None
        decimals_value = _decode_uint(decimals) if isinstance(decimals, str) else None
        if decimals_value is not None and decimals_value > 255:
            decimals_value = None

        is_erc20 = views_ok and checks[CHECK_TRANSFER] is not CheckOutcome.FAIL

        return OnchainSourceRecord(
            is_contract=True,
            is_erc20=is_erc20,
            code_size_bytes=code_size,
            total_supply=str(supply_value) if supply_value is not None else None,
            decimals=decimals_value,
            checks=checks,
            name=_decode_string(name) if isinstance(name, str) else None,
            symbol=_decode_string(symbol) if isinstance(symbol, str) else None,
        )

    async def _call(self, rpc_url: str, to: str, data: str) -> str | BaseException:
        """eth_call returning the raw hex result, or the error that occurred."""
        try:
            result = await self._rpc(
                rpc_url, "eth_call", [{"to": to, "data": "0x" + data}, "latest"]
            )
        except (RpcError, RpcUnavailableError) as e:
            return e
        return result if isinstance(result, str) else RpcError("non-string eth_call result")

    async def _rpc(self, rpc_url: str, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        for attempt in range(MAX_RETRIES + 1):
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.post(rpc_url, json=payload)

                if resp.status_code == 429:
                    if attempt == MAX_RETRIES:
                        break
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[ONCHAIN] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue
                if resp.status_code != 200:
                    raise RpcUnavailableError(f"HTTP {resp.status_code} for {method}")

                try:
                    data = resp.json()
                except ValueError as e:
                    raise RpcUnavailableError(f"invalid JSON for {method}") from e
                if not isinstance(data, dict):
                    raise RpcUnavailableError(f"unexpected payload for {method}")
                if data.get("error"):
                    raise RpcError(str(data["error"]))
                return data.get("result")

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    await asyncio.sleep(RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)])
                else:
                    raise RpcUnavailableError(f"{type(e).__name__} for {method}") from e

        raise RpcUnavailableError(f"rate limited on {method}")


def _strip_hex(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def _decode_uint(result: str) -> int | None:
    """Decode the first 32-byte word of an ABI result."""
    word = _strip_hex(result)[:64]
    if len(word) < 64:
        return None
    try:
        return int(word, 16)
    except ValueError:
        return None


def _decode_string(result: str) -> str | None:
    """Decode an ABI ``string`` result, falling back to ``bytes32`` tokens."""
    try:
        raw = bytes.fromhex(_strip_hex(result))
    except ValueError:
        return None

    if len(raw) >= 64:
        offset = int.from_bytes(raw[:32], "big")
        if offset + 32 <= len(raw):
            length = int.from_bytes(raw[offset:offset + 32], "big")
            body = raw[offset + 32:offset + 32 + length]
            if len(body) == length:
                text = body.decode("utf-8", errors="replace").strip("\x00").strip()
                return text or None

    if len(raw) == 32:
        text = raw.rstrip(b"\x00").decode("utf-8", errors="replace").strip()
        return text or None

    return None


def _call_outcome(result: str | BaseException, decoder) -> CheckOutcome:
    if isinstance(result, RpcUnavailableError):
        return CheckOutcome.UNKNOWN
    if isinstance(result, BaseException):
        return CheckOutcome.FAIL
    return CheckOutcome.PASS if decoder(result) is not None else CheckOutcome.FAIL


def _bytecode_outcome(bytecode: str, selector: str, views_ok: bool) -> CheckOutcome:
    """Selector present in bytecode -> PASS.

    Proxies dispatch through delegatecall, so a missing selector is only a
    failure when the ERC20 views did not answer either.
    """
    if _has_selector(bytecode.lower(), selector):
        return CheckOutcome.PASS
    return CheckOutcome.UNKNOWN if views_ok else CheckOutcome.FAIL


def _has_selector(bytecode: str, selector: str) -> bool:
    """Selector present on a byte boundary of the hex-encoded bytecode."""
    start = bytecode.find(selector)
    while start != -1:
        if start % 2 == 0:
            return True
        start = bytecode.find(selector, start + 1)
    return False
