"""Owner withdrawal of collateral left in a closed position"""
import logging
from typing import TYPE_CHECKING

from ..errors import NotOwner, PositionStillOpen
from ..events import CollateralWithdrawn

if TYPE_CHECKING:
    from ..vault import MiniStableVault

logger = logging.getLogger(__name__)

def withdraw(vault: "MiniStableVault", sender: str, position_id: int) -> int:
    """Return the remaining collateral of a closed position to its owner"""
    position = vault.position_ref(position_id)
    if position.open:
        raise PositionStillOpen(f"Position {position_id} is still open")
    if position.owner != sender:
        raise NotOwner(f"{sender} does not own position {position_id}")

    amount = position.take_collateral()
    vault.custody.transfer_out(sender, amount)
    vault.emit(CollateralWithdrawn(position_id, sender, amount))

    logger.info(f"Withdrew {amount} collateral from position {position_id} to {sender}")
    return amount
