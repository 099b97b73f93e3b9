import numpy as np
import matplotlib.pyplot as plt
from dataclasses import dataclass, field
from typing import List, Optional
import pandas as pd
from pathlib import Path
from datetime import datetime

from vault_model.src.constants import MAX_HEALTH_FACTOR, WAD
from vault_model.src.oracle import StaticPriceFeed
from vault_model.src.vault import MiniStableVault
from vault_model.keeper.clients import in_process_backend_factory
from vault_model.keeper.config import EvmConfig, MonitorConfig, WatchConfig
from vault_model.keeper.monitor import LiquidationMonitor

PRICE_DECIMALS = 8
KEEPER = "0x00000000000000000000000000000000000000cc"

@dataclass
class PositionParams:
    collateral_eth: float = 1.0
    mint_usd: int = 2000

@dataclass
class SimulationParams:
    initial_price: float = 3100.0
    drift: float = 0.0             # per step
    price_volatility: float = 0.01  # per step
    steps: int = 500
    random_seed: Optional[int] = None
    experiment_name: str = "default"
    positions: List[PositionParams] = field(default_factory=lambda: [
        PositionParams(collateral_eth=1.0, mint_usd=2000),   # hf 1.55
        PositionParams(collateral_eth=1.0, mint_usd=2500),   # hf 1.24
        PositionParams(collateral_eth=2.0, mint_usd=3000),   # hf 2.07
    ])

def to_feed_price(price: float) -> int:
    return int(round(price * 10**PRICE_DECIMALS))

def to_wei(amount: float) -> int:
    # 1e-9 resolution is plenty for the simulation
    return int(round(amount * 10**9)) * 10**9

def owner_address(index: int) -> str:
    return "0x" + f"{index + 1:040x}"

class LiquidationSimulation:
    """Drives a vault and its keeper along a simulated ETH price path"""

    def __init__(self, params: SimulationParams):
        self.params = params
        self.rng = np.random.default_rng(params.random_seed)

        self.feed = StaticPriceFeed(to_feed_price(params.initial_price), PRICE_DECIMALS, updated_at=1)
        self.vault = MiniStableVault(self.feed)
        self.position_ids: List[int] = []

        for index, position in enumerate(params.positions):
            owner = owner_address(index)
            collateral = to_wei(position.collateral_eth)
            self.vault.custody.fund(owner, collateral)
            self.position_ids.append(self.vault.open_position(owner, position.mint_usd, collateral))

        # The keeper holds enough liability tokens to repay every position
        total_debt = sum(self.vault.positions(i).debt for i in self.position_ids)
        self.vault.stable.mint(KEEPER, total_debt)

        config = MonitorConfig(
            schedule="*/30 * * * * *",
            url="in-process",
            evms=[EvmConfig(
                target_contract_address=self.vault.address,
                chain_selector_name="ethereum-testnet-sepolia",
                gas_limit=500_000,
            )],
            watch=WatchConfig(position_ids=self.position_ids),
        )
        self.monitor = LiquidationMonitor(config, in_process_backend_factory(self.vault, KEEPER))
        self.results: Optional[pd.DataFrame] = None

    def price_path(self) -> np.ndarray:
        """Geometric Brownian motion, one price per keeper tick"""
        sigma = self.params.price_volatility
        shocks = self.rng.normal(self.params.drift - 0.5 * sigma**2, sigma, self.params.steps)
        return self.params.initial_price * np.exp(np.cumsum(shocks))

    def simulate(self) -> pd.DataFrame:
        rows = []
        for step, price in enumerate(self.price_path()):
            self.feed.set_answer(to_feed_price(price), updated_at=step + 2)
            acted = self.monitor.on_tick()

            for position_id in self.position_ids:
                position = self.vault.positions(position_id)
                hf = self.vault.health_factor(position_id)
                rows.append({
                    "step": step,
                    "price": price,
                    "position_id": position_id,
                    "open": position.open,
                    "debt": position.debt / WAD,
                    "health_factor": np.nan if hf == MAX_HEALTH_FACTOR else hf / WAD,
                    "keeper_acted": acted,
                })

        self.results = pd.DataFrame(rows)
        return self.results

    def summary(self) -> pd.DataFrame:
        """First closing step and the price it happened at, per position"""
        if self.results is None:
            raise RuntimeError("run simulate() first")
        closed = self.results[~self.results["open"]]
        first_closed = closed.groupby("position_id").first()
        lowest_hf = self.results.groupby("position_id")["health_factor"].min()
        return pd.DataFrame({
            "liquidated_at_step": first_closed["step"],
            "liquidation_price": first_closed["price"],
            "lowest_health_factor": lowest_hf,
        }).reindex(self.position_ids)

    def plot_results(self):
        if self.results is None:
            raise RuntimeError("run simulate() first")
        output_dir = Path('research/results') / self.params.experiment_name
        output_dir.mkdir(parents=True, exist_ok=True)

        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

        prices = self.results.groupby("step")["price"].first()
        ax1.plot(prices.index, prices.values, label='ETH Price')
        ax1.set_ylabel('Price (USD)')
        ax1.set_title('Collateral Price Over Time')
        ax1.legend()
        ax1.grid(True)

        min_hf = self.vault.config.min_health_factor / WAD
        for position_id, frame in self.results.groupby("position_id"):
            ax2.plot(frame["step"], frame["health_factor"], label=f'Position {position_id}')
        ax2.axhline(y=min_hf, color='r', linestyle='--', alpha=0.5, label='Minimum health factor')
        ax2.set_ylabel('Health Factor')
        ax2.set_xlabel('Keeper tick')
        ax2.set_title('Position Health Over Time')
        ax2.legend()
        ax2.grid(True)

        plt.tight_layout()

        plot_name = f"vol_{self.params.price_volatility}_steps_{self.params.steps}"
        if self.params.random_seed is not None:
            plot_name += f"_seed_{self.params.random_seed}"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        plt.savefig(output_dir / f"{plot_name}_{timestamp}.png")
        plt.close()

def main():
    params = SimulationParams(
        experiment_name="keeper_gbm",
        price_volatility=0.01,
        drift=-0.0005,
        steps=500,
        random_seed=57,
    )
    sim = LiquidationSimulation(params)
    sim.simulate()
    print(sim.summary())
    sim.plot_results()

if __name__ == "__main__":
    main()
