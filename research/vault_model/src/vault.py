"""MiniStableVault: position ledger with the vault's read and write surface

Positions live in an arena keyed by sequential id starting at 1. Every write
runs as one transaction: state is snapshotted first and restored if anything
raises, so a failed call never leaves a partial mutation behind. Transactions
are serialized by a re-entrant lock, which lets a receive hook call back into
the vault and observe committed state.
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, List, Optional

from .constants import MAX_HEALTH_FACTOR, VAULT_ADDRESS
from .instructions import close_position, health_factor, liquidate, mock_price, open_position, withdraw
from .oracle import PriceFeed, PriceOracle
from .state.collateral import CollateralVault
from .state.liability_token import LiabilityToken
from .state.position import Position
from .state.vault_config import VaultConfig

logger = logging.getLogger(__name__)

class MiniStableVault:
    """Over-collateralized vault minting a USD liability token against collateral"""

    def __init__(
        self,
        price_feed: PriceFeed,
        config: Optional[VaultConfig] = None,
        stable: Optional[LiabilityToken] = None,
        custody: Optional[CollateralVault] = None,
        address: str = VAULT_ADDRESS,
    ):
        self.address = address
        self.config = config or VaultConfig()
        self.oracle = PriceOracle(price_feed, self.config)
        self.stable = stable or LiabilityToken()
        self.custody = custody or CollateralVault()
        self.events: List[object] = []
        self._positions: List[Position] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ arena

    @property
    def next_position_id(self) -> int:
        return len(self._positions) + 1

    def allocate(self, position: Position) -> int:
        self._positions.append(position)
        return len(self._positions)

    def position_ref(self, position_id: int) -> Position:
        """Mutable record for instructions; unknown ids read as an empty position"""
        if 1 <= position_id <= len(self._positions):
            return self._positions[position_id - 1]
        return Position()

    def emit(self, event: object) -> None:
        self.events.append(event)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All-or-nothing execution of one vault call"""
        with self._lock:
            positions = [replace(p) for p in self._positions]
            stable = self.stable.snapshot()
            custody = self.custody.snapshot()
            mock = (self.config.mock_price_enabled, self.config.mock_price)
            events = len(self.events)
            try:
                yield
            except Exception as e:
                logger.debug(f"Reverting vault transaction: {e!r}")
                # Restore in place so records held by outer frames stay valid
                for current, saved in zip(self._positions, positions):
                    current.__dict__.update(saved.__dict__)
                del self._positions[len(positions):]
                self.stable.restore(stable)
                self.custody.restore(custody)
                self.config.mock_price_enabled, self.config.mock_price = mock
                del self.events[events:]
                raise

    # ------------------------------------------------------------ write surface

    def open_position(self, sender: str, mint_amount_usd: int, value: int) -> int:
        with self.transaction():
            return open_position.open_position(self, sender, mint_amount_usd, value)

    def close_position(self, sender: str, position_id: int) -> None:
        with self.transaction():
            close_position.close_position(self, sender, position_id)

    def liquidate(self, sender: str, position_id: int) -> None:
        with self.transaction():
            liquidate.liquidate(self, sender, position_id)

    def withdraw(self, sender: str, position_id: int) -> int:
        with self.transaction():
            return withdraw.withdraw(self, sender, position_id)

    def enable_mock_price(self, price: int) -> None:
        with self.transaction():
            mock_price.enable_mock_price(self, price)

    def disable_mock_price(self) -> None:
        with self.transaction():
            mock_price.disable_mock_price(self)

    def set_mock_price(self, price: int) -> None:
        with self.transaction():
            mock_price.set_mock_price(self, price)

    # ------------------------------------------------------------- read surface

    # Reads hold the vault lock, uncommitted writes stay invisible to other threads

    def positions(self, position_id: int) -> Position:
        """Copy of a position record"""
        with self._lock:
            return replace(self.position_ref(position_id))

    def collateral_usd(self, amount: int) -> int:
        with self._lock:
            return health_factor.collateral_value(amount, self.oracle.current_price())

    def eth_needed_for_mint(self, mint_amount_usd: int) -> int:
        with self._lock:
            return health_factor.collateral_needed_for(
                mint_amount_usd, self.oracle.current_price(), self.config.min_health_factor
            )

    def health_factor(self, position_id: int) -> int:
        with self._lock:
            position = self.position_ref(position_id)
            if not position.open or position.debt == 0:
                return MAX_HEALTH_FACTOR
            return health_factor.health_factor(position, self.oracle.current_price())

    def needs_liquidation(self, position_id: int) -> bool:
        with self._lock:
            return health_factor.needs_liquidation(
                self.position_ref(position_id), self.oracle, self.config.min_health_factor
            )
