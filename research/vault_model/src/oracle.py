"""Price oracle adapter

The vault prices collateral through one of two sources: the live feed, or a
fixed demo price selected by ``VaultConfig.mock_price_enabled``. Nothing is
cached; each ``current_price`` call reads the selected source again.
"""
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from .constants import DEFAULT_ORACLE_DECIMALS
from .errors import InvalidPrice
from .state.vault_config import VaultConfig

@dataclass(frozen=True)
class RoundData:
    """One AggregatorV3 round"""
    round_id: int
    answer: int  # signed
    started_at: int
    updated_at: int
    answered_in_round: int

@dataclass(frozen=True)
class PriceSnapshot:
    """A validated price with its decimals"""
    price: int
    decimals: int

class PriceFeed(Protocol):
    def latest_round_data(self) -> RoundData: ...

    def decimals(self) -> int: ...

class StaticPriceFeed:
    """In-memory aggregator, every answer opens a new round"""

    def __init__(self, answer: int = 0, decimals: int = DEFAULT_ORACLE_DECIMALS, updated_at: Optional[int] = None):
        self._decimals = decimals
        self._round = RoundData(0, 0, 0, 0, 0)
        if answer or updated_at is not None:
            self.set_answer(answer, updated_at)

    def set_answer(self, answer: int, updated_at: Optional[int] = None) -> None:
        round_id = self._round.round_id + 1
        now = int(time.time()) if updated_at is None else updated_at
        self._round = RoundData(round_id, answer, now, now, round_id)

    def set_round(self, round_data: RoundData) -> None:
        self._round = round_data

    def latest_round_data(self) -> RoundData:
        return self._round

    def decimals(self) -> int:
        return self._decimals

class LivePriceSource:
    """Validated reads of the upstream feed"""

    def __init__(self, feed: PriceFeed, decimals: int):
        self.feed = feed
        self.decimals = decimals

    def current_price(self) -> PriceSnapshot:
        round_data = self.feed.latest_round_data()
        if round_data.answer <= 0:
            raise InvalidPrice(f"Feed answer {round_data.answer} is not positive")
        if round_data.updated_at == 0:
            raise InvalidPrice(f"Feed round {round_data.round_id} was never updated")
        return PriceSnapshot(round_data.answer, self.decimals)

@dataclass(frozen=True)
class FixedPriceSource:
    """Demo override price"""
    price: int
    decimals: int

    def current_price(self) -> PriceSnapshot:
        if self.price <= 0:
            raise InvalidPrice(f"Mock price {self.price} is not positive")
        return PriceSnapshot(self.price, self.decimals)

PriceSource = Union[LivePriceSource, FixedPriceSource]

class PriceOracle:
    """Selects the price source from the vault configuration"""

    def __init__(self, feed: PriceFeed, config: VaultConfig):
        self.config = config
        if config.oracle_decimals is None:
            config.oracle_decimals = feed.decimals()
        self.live = LivePriceSource(feed, config.oracle_decimals)

    @property
    def decimals(self) -> int:
        return self.live.decimals

    def source(self) -> PriceSource:
        if self.config.mock_price_enabled:
            return FixedPriceSource(self.config.mock_price, self.decimals)
        return self.live

    def current_price(self) -> PriceSnapshot:
        return self.source().current_price()
