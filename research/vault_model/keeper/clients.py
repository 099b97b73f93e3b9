"""Vault readers and action submitters

Two backends share one surface. The web3 backend talks to a deployed vault:
``eth_call`` for views, signed transactions for writes, blocking on the receipt.
The in-process backend drives a ``MiniStableVault`` model directly and is what
the tests and the research simulation use.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import keccak, to_hex
from web3 import Web3
from web3.exceptions import TimeExhausted

from ..src.errors import ProtocolError
from ..src.vault import MiniStableVault
from .abi import MINI_STABLE_VAULT_ABI, VAULT_METHODS
from .calls import ContractCall, decode_call
from .config import EvmConfig
from .errors import NetworkNotFoundError, SubmissionError
from .networks import Network

logger = logging.getLogger(__name__)

class TxStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"

@dataclass(frozen=True)
class SubmissionResult:
    status: TxStatus
    transaction_hash: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == TxStatus.SUCCESS

class VaultReader(Protocol):
    def needs_liquidation(self, position_id: int) -> bool: ...

class ActionSubmitter(Protocol):
    def submit(self, call: ContractCall, gas_limit: int) -> SubmissionResult: ...

@dataclass(frozen=True)
class KeeperBackend:
    reader: VaultReader
    submitter: ActionSubmitter

BackendFactory = Callable[[EvmConfig, Network], KeeperBackend]

# ---------------------------------------------------------------------- web3

class Web3VaultReader:
    def __init__(self, w3: Web3, address: str):
        self.contract = w3.eth.contract(address=Web3.to_checksum_address(address), abi=MINI_STABLE_VAULT_ABI)

    def needs_liquidation(self, position_id: int) -> bool:
        return self.contract.functions.needsLiquidation(position_id).call(block_identifier="latest")

class Web3ActionSubmitter:
    """Signs with a local key and waits for the receipt"""

    def __init__(self, w3: Web3, account: LocalAccount, chain_id: int, receipt_timeout: float = 120):
        self.w3 = w3
        self.account = account
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout

    def submit(self, call: ContractCall, gas_limit: int) -> SubmissionResult:
        try:
            transaction = {
                "to": Web3.to_checksum_address(call.to),
                "from": self.account.address,
                "data": call.data_hex,
                "value": call.value,
                "gas": gas_limit,
                "gasPrice": self.w3.eth.gas_price,
                "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
                "chainId": self.chain_id,
            }
            signed = self.account.sign_transaction(transaction)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            raise SubmissionError(f"Could not broadcast {call.function_name}{call.args}: {e}") from e

        logger.info(f"Broadcast {call.function_name}{call.args}, tx: {to_hex(tx_hash)}")
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except TimeExhausted:
            return SubmissionResult(TxStatus.FAILURE, to_hex(tx_hash), "Timed out waiting for receipt")

        if receipt["status"] != 1:
            return SubmissionResult(TxStatus.FAILURE, to_hex(tx_hash), "Transaction reverted")
        return SubmissionResult(TxStatus.SUCCESS, to_hex(tx_hash))

def connect(rpc_url: str) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url))

def web3_backend_factory(rpc_url: str, private_key: str) -> BackendFactory:
    account = Account.from_key(private_key)

    def build(evm_config: EvmConfig, network: Network) -> KeeperBackend:
        w3 = connect(rpc_url)
        chain_id = w3.eth.chain_id
        if chain_id != network.chain_id:
            raise NetworkNotFoundError(
                f"RPC serves chain {chain_id}, {network.name} expects {network.chain_id}"
            )
        return KeeperBackend(
            reader=Web3VaultReader(w3, evm_config.target_contract_address),
            submitter=Web3ActionSubmitter(w3, account, network.chain_id),
        )

    return build

# ---------------------------------------------------------------- in-process

class InProcessVaultReader:
    def __init__(self, vault: MiniStableVault):
        self.vault = vault

    def needs_liquidation(self, position_id: int) -> bool:
        return self.vault.needs_liquidation(position_id)

class InProcessActionSubmitter:
    """Executes calldata against the vault as ``sender``

    A vault revert comes back as a failed submission carrying the revert reason.
    """

    def __init__(self, vault: MiniStableVault, sender: str):
        self.vault = vault
        self.sender = sender
        self.nonce = 0
        self.submitted = []

    def submit(self, call: ContractCall, gas_limit: int) -> SubmissionResult:
        function_name, args = decode_call(call.data)
        method = getattr(self.vault, VAULT_METHODS[function_name])
        self.submitted.append(call)

        tx_hash = to_hex(keccak(self.sender.encode() + self.nonce.to_bytes(32, "big") + call.data))
        self.nonce += 1
        try:
            if function_name in ("enableMockPrice", "disableMockPrice", "setMockPrice"):
                method(*args)
            elif function_name == "openPosition":
                method(self.sender, *args, value=call.value)
            else:
                method(self.sender, *args)
        except ProtocolError as e:
            return SubmissionResult(TxStatus.FAILURE, tx_hash, f"{e.reason}: {e.message}")
        return SubmissionResult(TxStatus.SUCCESS, tx_hash)

def in_process_backend_factory(vault: MiniStableVault, sender: str) -> BackendFactory:
    backend = KeeperBackend(InProcessVaultReader(vault), InProcessActionSubmitter(vault, sender))

    def build(evm_config: EvmConfig, network: Network) -> KeeperBackend:
        return backend

    return build
