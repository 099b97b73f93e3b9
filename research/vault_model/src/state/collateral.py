"""Native collateral balances and vault custody"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple
from ..errors import InsufficientBalance, TransferFailed
from ..fixed_point import checked_add, checked_sub

# Called with (recipient, amount) after the recipient is credited
ReceiveHook = Callable[[str, int], None]

@dataclass
class CollateralVault:
    """Native coin ledger plus the collateral held in vault custody"""
    balances: Dict[str, int] = field(default_factory=dict)
    total_deposited: int = 0
    receive_hooks: Dict[str, ReceiveHook] = field(default_factory=dict)

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def fund(self, account: str, amount: int) -> None:
        """Credit native coins to an account outside of any vault flow"""
        self.balances[account] = checked_add(self.balance_of(account), amount)

    def deposit(self, sender: str, amount: int) -> None:
        """Move collateral from the sender into custody"""
        if self.balance_of(sender) < amount:
            raise InsufficientBalance(f"{sender} holds less than {amount} collateral")
        self.balances[sender] = checked_sub(self.balance_of(sender), amount)
        self.total_deposited = checked_add(self.total_deposited, amount)

    def transfer_out(self, recipient: str, amount: int) -> None:
        """Release collateral from custody to the recipient

        The recipient's receive hook runs after the credit, the way a value call
        hands control to the receiving contract. A hook exception fails the
        transfer.
        """
        if amount > self.total_deposited:
            raise InsufficientBalance("Insufficient collateral in vault")
        self.total_deposited = checked_sub(self.total_deposited, amount)
        self.balances[recipient] = checked_add(self.balance_of(recipient), amount)

        hook = self.receive_hooks.get(recipient)
        if hook is None:
            return
        try:
            hook(recipient, amount)
        except Exception as e:
            raise TransferFailed(f"Transfer to {recipient} failed: {e}") from e

    def snapshot(self) -> Tuple[Dict[str, int], int]:
        return dict(self.balances), self.total_deposited

    def restore(self, snapshot: Tuple[Dict[str, int], int]) -> None:
        balances, total_deposited = snapshot
        self.balances = dict(balances)
        self.total_deposited = total_deposited
