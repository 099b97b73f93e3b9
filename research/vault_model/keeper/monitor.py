"""Liquidation monitor

One tick is an independent read, decide, act cycle:

1. resolve the network and the vault backend from configuration
2. read ``needsLiquidation`` for every watched position, lowest id first
3. submit ``liquidate(id)`` for unhealthy positions, up to the per-tick cap

Nothing is carried between ticks. Failures are logged and turn into a False
result; a position that stays unhealthy is simply retried on the next tick.
"""
import logging
from typing import List, Optional

from .calls import encode_liquidate
from .clients import BackendFactory, KeeperBackend
from .config import MonitorConfig
from .networks import get_network

logger = logging.getLogger(__name__)

class LiquidationMonitor:
    def __init__(self, config: MonitorConfig, backend_factory: BackendFactory, is_testnet: bool = True):
        self.config = config
        self.backend_factory = backend_factory
        self.is_testnet = is_testnet

    def on_tick(self) -> bool:
        """Run one monitor tick, True if at least one liquidation confirmed"""
        backend = self._resolve_backend()
        if backend is None:
            return False

        unhealthy = self._find_unhealthy(backend)
        if not unhealthy:
            logger.info("No positions to liquidate at this time.")
            return False

        cap = self.config.watch.max_liquidations_per_tick
        if len(unhealthy) > cap:
            logger.warning(f"{len(unhealthy)} positions need liquidation, submitting the first {cap}")

        liquidated = [i for i in unhealthy[:cap] if self._liquidate(backend, i)]
        return bool(liquidated)

    def _resolve_backend(self) -> Optional[KeeperBackend]:
        evm_config = self.config.primary_evm
        try:
            network = get_network(evm_config.chain_selector_name, is_testnet=self.is_testnet)
            return self.backend_factory(evm_config, network)
        except Exception as e:
            logger.error(f"Error resolving target {evm_config.chain_selector_name}: {e}")
            return None

    def _find_unhealthy(self, backend: KeeperBackend) -> List[int]:
        unhealthy = []
        for position_id in self.config.watch.watched_ids():
            try:
                liquidatable = backend.reader.needs_liquidation(position_id)
            except Exception as e:
                logger.error(f"Error in needsLiquidation({position_id}): {e}")
                continue
            logger.info(f"Position {position_id} liquidatable: {liquidatable}")
            if liquidatable:
                unhealthy.append(position_id)
        return unhealthy

    def _liquidate(self, backend: KeeperBackend, position_id: int) -> bool:
        evm_config = self.config.primary_evm
        try:
            call = encode_liquidate(evm_config.target_contract_address, position_id)
            result = backend.submitter.submit(call, evm_config.gas_limit)
        except Exception as e:
            logger.error(f"Error in liquidate({position_id}): {e}")
            return False

        if not result.succeeded:
            logger.error(
                f"Liquidate({position_id}) failed: {result.error_message or result.status.value}"
                f" tx: {result.transaction_hash}"
            )
            return False

        logger.info(f"Liquidate({position_id}) transaction succeeded at txHash: {result.transaction_hash}")
        return True
