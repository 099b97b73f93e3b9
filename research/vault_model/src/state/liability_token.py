"""Liability token ledger, a plain fungible token"""
from dataclasses import dataclass, field
from typing import Dict, Tuple
from ..errors import InsufficientBalance
from ..fixed_point import checked_add, checked_sub

@dataclass
class LiabilityToken:
    """Pegged stablecoin minted against vault positions"""
    symbol: str = "mUSD"
    decimals: int = 18
    balances: Dict[str, int] = field(default_factory=dict)
    total_supply: int = 0

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def mint(self, account: str, amount: int) -> None:
        self.balances[account] = checked_add(self.balance_of(account), amount)
        self.total_supply = checked_add(self.total_supply, amount)

    def burn(self, account: str, amount: int) -> None:
        if self.balance_of(account) < amount:
            raise InsufficientBalance(f"{account} holds less than {amount} {self.symbol}")
        self.balances[account] = checked_sub(self.balance_of(account), amount)
        self.total_supply = checked_sub(self.total_supply, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if self.balance_of(sender) < amount:
            raise InsufficientBalance(f"{sender} holds less than {amount} {self.symbol}")
        self.balances[sender] = checked_sub(self.balance_of(sender), amount)
        self.balances[recipient] = checked_add(self.balance_of(recipient), amount)

    def snapshot(self) -> Tuple[Dict[str, int], int]:
        return dict(self.balances), self.total_supply

    def restore(self, snapshot: Tuple[Dict[str, int], int]) -> None:
        balances, total_supply = snapshot
        self.balances = dict(balances)
        self.total_supply = total_supply
