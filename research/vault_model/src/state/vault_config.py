"""Vault configuration state"""
from dataclasses import dataclass
from typing import Optional
from ..constants import DEFAULT_MIN_HEALTH_FACTOR

@dataclass
class VaultConfig:
    """Global vault parameters, the mock pair selects the demo price source"""
    min_health_factor: int = DEFAULT_MIN_HEALTH_FACTOR  # 1e18 scaled
    oracle_decimals: Optional[int] = None  # read from the feed when None
    mock_price_enabled: bool = False
    mock_price: int = 0  # oracle_decimals scaled

    def __post_init__(self):
        if self.min_health_factor <= 0:
            raise ValueError("min_health_factor must be positive")
        if self.oracle_decimals is not None and self.oracle_decimals < 0:
            raise ValueError("oracle_decimals must not be negative")
