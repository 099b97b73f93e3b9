"""Chain selector name resolution"""
from dataclasses import dataclass
from typing import Dict

from .errors import NetworkNotFoundError

@dataclass(frozen=True)
class Network:
    name: str
    chain_id: int
    selector: int  # CCIP chain selector
    is_testnet: bool

NETWORKS: Dict[str, Network] = {
    n.name: n
    for n in (
        Network("ethereum-mainnet", 1, 5009297550715157269, False),
        Network("ethereum-testnet-sepolia", 11155111, 16015286601757825753, True),
        Network("ethereum-testnet-sepolia-base-1", 84532, 10344971235874465080, True),
        Network("ethereum-testnet-sepolia-arbitrum-1", 421614, 3478487238524512106, True),
        Network("avalanche-testnet-fuji", 43113, 14767482510784806043, True),
    )
}

def get_network(chain_selector_name: str, is_testnet: bool = True) -> Network:
    network = NETWORKS.get(chain_selector_name)
    if network is None or network.is_testnet != is_testnet:
        raise NetworkNotFoundError(f"Network not found for chain selector name: {chain_selector_name}")
    return network
