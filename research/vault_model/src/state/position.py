"""Position state management"""
from dataclasses import dataclass
from ..constants import ZERO_ADDRESS

@dataclass
class Position:
    """Represents a vault position, one collateral deposit against one debt"""
    owner: str = ZERO_ADDRESS
    collateral_amount: int = 0  # 18 decimals
    debt: int = 0  # 18 decimals
    open: bool = False

    def close(self) -> None:
        """Mark the position closed, terminal"""
        self.open = False

    def take_collateral(self) -> int:
        """Zero the collateral field and return what it held"""
        amount = self.collateral_amount
        self.collateral_amount = 0
        return amount

    def clear_debt(self) -> int:
        """Zero the debt field and return what it held"""
        debt = self.debt
        self.debt = 0
        return debt
