"""Permissionless liquidation of an under-collateralized position

The liquidator burns liability tokens equal to the debt. Collateral is not
seized: it stays in custody and the owner recovers it through ``withdraw``.
"""
import logging
from typing import TYPE_CHECKING

from ..errors import InsufficientBalance, PositionHealthy, PositionNotOpen
from ..events import PositionLiquidated
from .health_factor import health_factor

if TYPE_CHECKING:
    from ..vault import MiniStableVault

logger = logging.getLogger(__name__)

def liquidate(vault: "MiniStableVault", sender: str, position_id: int) -> None:
    position = vault.position_ref(position_id)
    if not position.open:
        raise PositionNotOpen(f"Position {position_id} is not open")

    hf = health_factor(position, vault.oracle.current_price())
    if hf >= vault.config.min_health_factor:
        raise PositionHealthy(f"Position {position_id} health factor {hf} is above minimum")
    if vault.stable.balance_of(sender) < position.debt:
        raise InsufficientBalance(f"{sender} cannot repay {position.debt}")

    position.close()
    debt = position.clear_debt()
    vault.stable.burn(sender, debt)
    vault.emit(PositionLiquidated(position_id, sender, debt))

    logger.info(f"Liquidated position {position_id} by {sender}: burned {debt}, hf was {hf}")
