"""Vault calldata encoding"""
from dataclasses import dataclass
from typing import Tuple

from eth_abi import decode, encode
from eth_utils import function_abi_to_4byte_selector, to_hex

from .abi import MINI_STABLE_VAULT_ABI, function_abi, input_types

@dataclass(frozen=True)
class ContractCall:
    """A constructed vault call, ready to sign"""
    to: str
    function_name: str
    args: Tuple
    data: bytes
    value: int = 0  # attached collateral, wei

    @property
    def data_hex(self) -> str:
        return to_hex(self.data)

def encode_call(to: str, function_name: str, *args, value: int = 0) -> ContractCall:
    selector = function_abi_to_4byte_selector(function_abi(function_name))
    data = selector + encode(input_types(function_name), list(args))
    return ContractCall(to=to, function_name=function_name, args=tuple(args), data=data, value=value)

def encode_liquidate(to: str, position_id: int) -> ContractCall:
    return encode_call(to, "liquidate", position_id)

def decode_call(data: bytes) -> Tuple[str, Tuple]:
    """Function name and arguments for raw calldata"""
    selector, payload = bytes(data[:4]), bytes(data[4:])
    for entry in MINI_STABLE_VAULT_ABI:
        if function_abi_to_4byte_selector(entry) == selector:
            return entry["name"], tuple(decode(input_types(entry["name"]), payload))
    raise ValueError(f"Unknown selector {to_hex(selector)}")
