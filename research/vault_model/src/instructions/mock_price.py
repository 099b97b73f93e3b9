"""Demo price override switches"""
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..vault import MiniStableVault

logger = logging.getLogger(__name__)

def enable_mock_price(vault: "MiniStableVault", price: int) -> None:
    vault.config.mock_price = price
    vault.config.mock_price_enabled = True
    logger.warning(f"Mock price enabled at {price}")

def disable_mock_price(vault: "MiniStableVault") -> None:
    vault.config.mock_price_enabled = False
    logger.info("Mock price disabled, using live feed")

def set_mock_price(vault: "MiniStableVault", price: int) -> None:
    # Stored even while disabled
    vault.config.mock_price = price
