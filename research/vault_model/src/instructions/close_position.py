"""Voluntary close of a solvent position by its owner"""
import logging
from typing import TYPE_CHECKING

from ..errors import InsufficientBalance, NotOwner, PositionNotOpen, PositionUnhealthy
from ..events import PositionClosed
from .health_factor import health_factor

if TYPE_CHECKING:
    from ..vault import MiniStableVault

logger = logging.getLogger(__name__)

def close_position(vault: "MiniStableVault", sender: str, position_id: int) -> None:
    position = vault.position_ref(position_id)
    if not position.open:
        raise PositionNotOpen(f"Position {position_id} is not open")
    if position.owner != sender:
        raise NotOwner(f"{sender} does not own position {position_id}")

    hf = health_factor(position, vault.oracle.current_price())
    if hf < vault.config.min_health_factor:
        raise PositionUnhealthy(f"Position {position_id} health factor {hf} below minimum")
    if vault.stable.balance_of(sender) < position.debt:
        raise InsufficientBalance(f"{sender} cannot repay {position.debt}")

    # State is committed before collateral leaves custody
    position.close()
    collateral = position.take_collateral()
    vault.stable.burn(sender, position.debt)
    vault.custody.transfer_out(sender, collateral)
    vault.emit(PositionClosed(position_id, sender, collateral, position.debt))

    logger.info(f"Closed position {position_id}: returned {collateral} collateral to {sender}")
