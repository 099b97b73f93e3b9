"""Health factor evaluation

Pure functions over a position and a price snapshot. Collateral, debt and the
health factor are 1e18 scaled; the raw price carries ``price.decimals`` digits.
All products are taken before the division.
"""
from typing import Protocol

from ..constants import MAX_HEALTH_FACTOR, WAD
from ..fixed_point import checked_div_up, checked_mul, mul_div
from ..oracle import PriceSnapshot
from ..state.position import Position

class PriceReader(Protocol):
    def current_price(self) -> PriceSnapshot: ...

def collateral_value(amount: int, price: PriceSnapshot) -> int:
    """USD value of a collateral amount, 1e18 scaled"""
    # amount (1e18) * price (1e<decimals>) / 1e<decimals>
    return mul_div(amount, price.price, 10**price.decimals)

def prospective_health_factor(collateral_amount: int, debt: int, price: PriceSnapshot) -> int:
    """Health factor of a collateral/debt pair that is not stored yet"""
    if debt == 0:
        return MAX_HEALTH_FACTOR
    return mul_div(collateral_value(collateral_amount, price), WAD, debt)

def health_factor(position: Position, price: PriceSnapshot) -> int:
    """Health factor of a stored position, MAX_HEALTH_FACTOR when closed or debt free"""
    if not position.open or position.debt == 0:
        return MAX_HEALTH_FACTOR
    return prospective_health_factor(position.collateral_amount, position.debt, price)

def debt_for_mint(mint_amount_usd: int) -> int:
    """Liability amount for a whole-unit mint request"""
    return checked_mul(mint_amount_usd, WAD)

def collateral_needed_for(mint_amount_usd: int, price: PriceSnapshot, min_health_factor: int) -> int:
    """Smallest collateral amount that opens a ``mint_amount_usd`` position

    Depositing exactly the returned amount yields a health factor of at least
    ``min_health_factor``; one unit less falls below it.
    """
    # required USD value = debt * min_hf / 1e18, exact since debt is a multiple of 1e18
    required_value = mul_div(debt_for_mint(mint_amount_usd), min_health_factor, WAD)
    return checked_div_up(checked_mul(required_value, 10**price.decimals), price.price)

def needs_liquidation(position: Position, oracle: PriceReader, min_health_factor: int) -> bool:
    """Check if an open, indebted position is below the minimum health factor

    The price is only read for open positions with debt.
    """
    if not position.open or position.debt == 0:
        return False
    return health_factor(position, oracle.current_price()) < min_health_factor
