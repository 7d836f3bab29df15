"""Shared test fixtures."""

import pytest

from token_safety.analyzers.models import CheckOutcome, HoneypotSourceRecord, OnchainSourceRecord

TOKEN = "0x" + "ab" * 20


@pytest.fixture
def clean_honeypot() -> HoneypotSourceRecord:
    """Simulation result of an unremarkable, well-distributed token."""
    return HoneypotSourceRecord(
        is_honeypot=False,
        buy_tax_percent=0.0,
        sell_tax_percent=0.0,
        transfer_tax_percent=0.0,
        holder_count=1500,
        top10_holders_percent=20.0,
        contract_verified=True,
        is_proxy=False,
        liquidity_usd=250_000.0,
        token_name="Clean Token",
        token_symbol="CLN",
    )


@pytest.fixture
def clean_onchain() -> OnchainSourceRecord:
    return OnchainSourceRecord(
        is_contract=True,
        is_erc20=True,
        code_size_bytes=4096,
        total_supply="1000000000000000000000000",
        decimals=18,
        checks={
            "has totalSupply function": CheckOutcome.PASS,
            "has balanceOf function": CheckOutcome.PASS,
            "has transfer function": CheckOutcome.PASS,
            "has approve function": CheckOutcome.PASS,
        },
        name="Clean Token",
        symbol="CLN",
    )
