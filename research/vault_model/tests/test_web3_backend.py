"""Web3 reader and submitter tests over a stubbed connection"""
from types import SimpleNamespace

import pytest
from eth_account import Account
from eth_utils import keccak, to_hex
from web3.exceptions import TimeExhausted

from vault_model.keeper import clients
from vault_model.keeper.abi import MINI_STABLE_VAULT_ABI
from vault_model.keeper.calls import encode_call, encode_liquidate
from vault_model.keeper.clients import TxStatus, Web3ActionSubmitter, web3_backend_factory
from vault_model.keeper.config import MonitorConfig
from vault_model.keeper.errors import NetworkNotFoundError, SubmissionError
from vault_model.keeper.monitor import LiquidationMonitor
from vault_model.keeper.networks import get_network

VAULT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
PRIVATE_KEY = "0x" + "11" * 32
SEPOLIA = get_network("ethereum-testnet-sepolia")

class StubContractFunctions:
    def __init__(self, liquidatable):
        self.liquidatable = liquidatable
        self.reads = []

    def needsLiquidation(self, position_id):
        def call(block_identifier="latest"):
            self.reads.append((position_id, block_identifier))
            return position_id in self.liquidatable
        return SimpleNamespace(call=call)

class StubEth:
    """The slice of ``w3.eth`` the keeper touches"""

    def __init__(self, chain_id=SEPOLIA.chain_id, receipt_status=1, timeout=False, broadcast_error=None,
                 liquidatable=()):
        self.chain_id = chain_id
        self.gas_price = 2 * 10**9
        self.receipt_status = receipt_status
        self.timeout = timeout
        self.broadcast_error = broadcast_error
        self.functions = StubContractFunctions(set(liquidatable))
        self.contracts = []
        self.sent = []

    def contract(self, address, abi):
        self.contracts.append((address, abi))
        return SimpleNamespace(functions=self.functions)

    def get_transaction_count(self, address, block_identifier):
        return 7

    def send_raw_transaction(self, raw_transaction):
        if self.broadcast_error:
            raise self.broadcast_error
        self.sent.append(bytes(raw_transaction))
        return keccak(bytes(raw_transaction))

    def wait_for_transaction_receipt(self, tx_hash, timeout):
        if self.timeout:
            raise TimeExhausted(f"Transaction {to_hex(tx_hash)} is not in the chain after {timeout} seconds")
        return {"status": self.receipt_status, "transactionHash": tx_hash}

def config(**watch):
    return {
        "schedule": "*/30 * * * * *",
        "url": "http://localhost:8545",
        "evms": [{"targetContractAddress": VAULT, "chainSelectorName": "ethereum-testnet-sepolia", "gasLimit": "500000"}],
        "watch": watch or {"positionIds": [1]},
    }

class RecordingAccount:
    """Local account that keeps every transaction it signs"""

    def __init__(self):
        self.account = Account.from_key(PRIVATE_KEY)
        self.address = self.account.address
        self.signed = []

    def sign_transaction(self, transaction):
        self.signed.append(transaction)
        return self.account.sign_transaction(transaction)

def submitter(eth):
    return Web3ActionSubmitter(SimpleNamespace(eth=eth), Account.from_key(PRIVATE_KEY), SEPOLIA.chain_id)

def test_confirmed_submission():
    eth = StubEth()
    result = submitter(eth).submit(encode_liquidate(VAULT, 2), 500_000)

    assert result.status == TxStatus.SUCCESS
    assert result.succeeded
    assert result.transaction_hash == to_hex(keccak(eth.sent[0]))
    assert Account.recover_transaction(eth.sent[0]) == Account.from_key(PRIVATE_KEY).address

def test_signed_transaction_fields():
    eth = StubEth()
    account = RecordingAccount()
    Web3ActionSubmitter(SimpleNamespace(eth=eth), account, SEPOLIA.chain_id).submit(
        encode_call(VAULT, "openPosition", 1000, value=10**18), 300_000
    )

    transaction = account.signed[0]
    assert transaction["to"] == VAULT
    assert transaction["nonce"] == 7
    assert transaction["gas"] == 300_000
    assert transaction["gasPrice"] == 2 * 10**9
    assert transaction["value"] == 10**18
    assert transaction["chainId"] == SEPOLIA.chain_id
    assert len(eth.sent) == 1

def test_reverted_receipt_is_failure():
    eth = StubEth(receipt_status=0)
    result = submitter(eth).submit(encode_liquidate(VAULT, 2), 500_000)

    assert result.status == TxStatus.FAILURE
    assert result.error_message == "Transaction reverted"
    assert result.transaction_hash == to_hex(keccak(eth.sent[0]))

def test_receipt_timeout_is_failure_with_hash():
    eth = StubEth(timeout=True)
    result = submitter(eth).submit(encode_liquidate(VAULT, 2), 500_000)

    assert result.status == TxStatus.FAILURE
    assert result.error_message == "Timed out waiting for receipt"
    assert result.transaction_hash == to_hex(keccak(eth.sent[0]))

def test_broadcast_error_raises():
    eth = StubEth(broadcast_error=ValueError("nonce too low"))
    with pytest.raises(SubmissionError, match="nonce too low"):
        submitter(eth).submit(encode_liquidate(VAULT, 2), 500_000)
    assert eth.sent == []

def test_backend_rejects_wrong_chain(monkeypatch):
    monkeypatch.setattr(clients, "connect", lambda rpc_url: SimpleNamespace(eth=StubEth(chain_id=1)))
    build = web3_backend_factory("http://localhost:8545", PRIVATE_KEY)
    evm = MonitorConfig.model_validate(config()).primary_evm

    with pytest.raises(NetworkNotFoundError):
        build(evm, SEPOLIA)

def test_backend_reads_vault(monkeypatch):
    eth = StubEth(liquidatable={2})
    monkeypatch.setattr(clients, "connect", lambda rpc_url: SimpleNamespace(eth=eth))
    backend = web3_backend_factory("http://localhost:8545", PRIVATE_KEY)(
        MonitorConfig.model_validate(config()).primary_evm, SEPOLIA
    )

    assert backend.reader.needs_liquidation(2) is True
    assert backend.reader.needs_liquidation(3) is False
    assert eth.contracts == [(VAULT, MINI_STABLE_VAULT_ABI)]
    assert eth.functions.reads == [(2, "latest"), (3, "latest")]

@pytest.mark.parametrize("eth, acted", [
    (StubEth(liquidatable={2}), True),
    (StubEth(liquidatable={2}, receipt_status=0), False),
    (StubEth(liquidatable={2}, broadcast_error=ValueError("insufficient funds")), False),
    (StubEth(liquidatable=()), False),
])
def test_monitor_over_web3_backend(monkeypatch, eth, acted):
    monkeypatch.setattr(clients, "connect", lambda rpc_url: SimpleNamespace(eth=eth))
    factory = web3_backend_factory("http://localhost:8545", PRIVATE_KEY)
    monitor = LiquidationMonitor(MonitorConfig.model_validate(config(fromId=1, toId=3)), factory)

    assert monitor.on_tick() is acted
    assert eth.functions.reads == [(1, "latest"), (2, "latest"), (3, "latest")]
