"""Open a position: lock collateral, mint liability tokens"""
import logging
from typing import TYPE_CHECKING

from ..errors import InsufficientCollateral, NoCollateral, NoMintAmount
from ..events import PositionOpened
from ..state.position import Position
from .health_factor import debt_for_mint, prospective_health_factor

if TYPE_CHECKING:
    from ..vault import MiniStableVault

logger = logging.getLogger(__name__)

def open_position(vault: "MiniStableVault", sender: str, mint_amount_usd: int, value: int) -> int:
    """Open a position with ``value`` collateral and mint ``mint_amount_usd`` whole tokens

    Returns the new position id.
    """
    if value == 0:
        raise NoCollateral()
    if mint_amount_usd == 0:
        raise NoMintAmount()

    debt = debt_for_mint(mint_amount_usd)
    hf = prospective_health_factor(value, debt, vault.oracle.current_price())
    if hf < vault.config.min_health_factor:
        raise InsufficientCollateral(
            f"Health factor {hf} below minimum {vault.config.min_health_factor}"
        )

    vault.custody.deposit(sender, value)
    position_id = vault.allocate(Position(owner=sender, collateral_amount=value, debt=debt, open=True))
    vault.stable.mint(sender, debt)
    vault.emit(PositionOpened(position_id, sender, value, debt))

    logger.info(f"Opened position {position_id} for {sender}: collateral={value} debt={debt} hf={hf}")
    return position_id
