"""Events emitted by the vault"""
from dataclasses import dataclass

@dataclass(frozen=True)
class PositionOpened:
    position_id: int
    owner: str
    collateral_amount: int
    debt: int

@dataclass(frozen=True)
class PositionClosed:
    position_id: int
    owner: str
    collateral_returned: int
    debt_repaid: int

@dataclass(frozen=True)
class PositionLiquidated:
    position_id: int
    liquidator: str
    debt_repaid: int

@dataclass(frozen=True)
class CollateralWithdrawn:
    position_id: int
    owner: str
    amount: int
