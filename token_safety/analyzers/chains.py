"""Supported EVM chains: id -> display name + RPC endpoint."""

from dataclasses import dataclass

from config.settings import Settings


@dataclass(frozen=True)
class Chain:
    chain_id: int
    name: str
    rpc_url: str


CHAIN_NAMES: dict[int, str] = {
    1: "Ethereum",
    56: "BSC",
    137: "Polygon",
    42161: "Arbitrum",
    10: "Optimism",
    8453: "Base",
    43114: "Avalanche",
}


class UnsupportedChainError(ValueError):
    """Chain id has no configured RPC endpoint."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Chain ID {chain_id} is not supported")
        self.chain_id = chain_id


def build_chains(s: Settings) -> dict[int, Chain]:
    """Chain table with RPC URLs from settings. Chains without a URL are skipped."""
    rpc_urls = {
        1: s.ethereum_rpc_url,
        56: s.bsc_rpc_url,
        137: s.polygon_rpc_url,
        42161: s.arbitrum_rpc_url,
        10: s.optimism_rpc_url,
        8453: s.base_rpc_url,
        43114: s.avalanche_rpc_url,
    }
    return {
        chain_id: Chain(chain_id, CHAIN_NAMES[chain_id], url)
        for chain_id, url in rpc_urls.items()
        if url
    }


def chain_name(chain_id: int) -> str:
    return CHAIN_NAMES.get(chain_id, "Unknown")
