"""Shared fixtures: a vault priced at $3100/ETH with funded accounts"""
import pytest

from vault_model.src.constants import WAD
from vault_model.src.oracle import StaticPriceFeed
from vault_model.src.vault import MiniStableVault

ETH_USD_3100 = 3100 * 10**8
FEED_UPDATED_AT = 1_700_000_000
FUNDED = (
    "0x000000000000000000000000000000000000a11c",
    "0x0000000000000000000000000000000000000b0b",
    "0x00000000000000000000000000000000000000cc",
)

@pytest.fixture
def feed():
    return StaticPriceFeed(ETH_USD_3100, decimals=8, updated_at=FEED_UPDATED_AT)

@pytest.fixture
def vault(feed):
    vault = MiniStableVault(feed)
    for account in FUNDED:
        vault.custody.fund(account, 100 * WAD)
    return vault
