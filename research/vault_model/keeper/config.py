"""Keeper configuration

The JSON file describes where the vault lives and when to check it:

    {
      "schedule": "*/30 * * * * *",
      "url": "https://sepolia.example/rpc",
      "evms": [
        {
          "targetContractAddress": "0x...",
          "chainSelectorName": "ethereum-testnet-sepolia",
          "gasLimit": "500000"
        }
      ],
      "watch": {"positionIds": [2]}
    }

Secrets never live in the file: the signing key comes from the environment
(``KEEPER_PRIVATE_KEY``), optionally through a ``.env`` file.
"""
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from web3 import Web3

from .errors import ConfigError

logger = logging.getLogger(__name__)

PRIVATE_KEY_ENV = "KEEPER_PRIVATE_KEY"
RPC_URL_ENV = "KEEPER_RPC_URL"

class EvmConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    target_contract_address: str = Field(alias="targetContractAddress")
    chain_selector_name: str = Field(alias="chainSelectorName")
    gas_limit: int = Field(alias="gasLimit")

    @field_validator("target_contract_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not Web3.is_address(value):
            raise ValueError(f"{value} is not an EVM address")
        return Web3.to_checksum_address(value)

    @field_validator("gas_limit", mode="before")
    @classmethod
    def _parse_gas_limit(cls, value: Union[str, int]) -> int:
        gas_limit = int(value)
        if gas_limit <= 0:
            raise ValueError("gasLimit must be positive")
        return gas_limit

class WatchConfig(BaseModel):
    """Positions checked each tick, an explicit list or an inclusive id range"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    position_ids: Optional[List[int]] = Field(default=None, alias="positionIds")
    from_id: Optional[int] = Field(default=None, alias="fromId")
    to_id: Optional[int] = Field(default=None, alias="toId")
    max_liquidations_per_tick: int = Field(default=10, alias="maxLiquidationsPerTick", ge=1)

    @model_validator(mode="after")
    def _check_selection(self) -> "WatchConfig":
        has_range = self.from_id is not None or self.to_id is not None
        if self.position_ids is not None and has_range:
            raise ValueError("use either positionIds or fromId/toId, not both")
        if has_range:
            if self.from_id is None or self.to_id is None:
                raise ValueError("fromId and toId must be given together")
            if not 1 <= self.from_id <= self.to_id:
                raise ValueError("expected 1 <= fromId <= toId")
        if self.position_ids is not None and any(i < 1 for i in self.position_ids):
            raise ValueError("position ids start at 1")
        return self

    def watched_ids(self) -> List[int]:
        """Ids to scan, ascending and without duplicates"""
        if self.from_id is not None and self.to_id is not None:
            return list(range(self.from_id, self.to_id + 1))
        if self.position_ids is None:
            return [1]
        return sorted(set(self.position_ids))

class MonitorConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    schedule: str
    url: str
    evms: List[EvmConfig] = Field(min_length=1)
    watch: WatchConfig = Field(default_factory=WatchConfig)

    @field_validator("schedule")
    @classmethod
    def _check_schedule(cls, value: str) -> str:
        if len(value.split()) not in (5, 6):
            raise ValueError("schedule must be a 5 or 6 field cron expression")
        return value

    @property
    def primary_evm(self) -> EvmConfig:
        return self.evms[0]

def load_config(path: Union[str, Path]) -> MonitorConfig:
    """Read and validate a keeper config file"""
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    try:
        config = MonitorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
    logger.info(f"Loaded keeper config from {path}: {len(config.watch.watched_ids())} watched positions")
    return config

def load_private_key(env_file: Optional[str] = None) -> str:
    load_dotenv(env_file)
    private_key = os.getenv(PRIVATE_KEY_ENV)
    if not private_key:
        raise ConfigError(f"{PRIVATE_KEY_ENV} is not set")
    return private_key

def resolve_rpc_url(config: MonitorConfig) -> str:
    """Environment override first, then the config url"""
    return os.getenv(RPC_URL_ENV) or config.url
