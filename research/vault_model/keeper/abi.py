"""MiniStableVault contract ABI, the subset the keeper and scripts call"""

def _function(name, inputs, outputs, mutability):
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t, "internalType": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t, "internalType": t} for n, t in outputs],
        "stateMutability": mutability,
    }

MINI_STABLE_VAULT_ABI = [
    _function("openPosition", [("usdAmount", "uint256")], [("id", "uint256")], "payable"),
    _function("closePosition", [("id", "uint256")], [], "nonpayable"),
    _function("liquidate", [("id", "uint256")], [], "nonpayable"),
    _function("withdraw", [("id", "uint256")], [], "nonpayable"),
    _function("enableMockPrice", [("price", "int256")], [], "nonpayable"),
    _function("disableMockPrice", [], [], "nonpayable"),
    _function("setMockPrice", [("price", "int256")], [], "nonpayable"),
    _function("collateralUsd", [("amount", "uint256")], [("", "uint256")], "view"),
    _function("ethNeededForMint", [("usdAmount", "uint256")], [("", "uint256")], "view"),
    _function("healthFactor", [("id", "uint256")], [("", "uint256")], "view"),
    _function("needsLiquidation", [("id", "uint256")], [("", "bool")], "view"),
    _function(
        "positions",
        [("", "uint256")],
        [("owner", "address"), ("collateral", "uint256"), ("debt", "uint256"), ("open", "bool")],
        "view",
    ),
]

# Python method names of the in-process vault, keyed by ABI name
VAULT_METHODS = {
    "openPosition": "open_position",
    "closePosition": "close_position",
    "liquidate": "liquidate",
    "withdraw": "withdraw",
    "enableMockPrice": "enable_mock_price",
    "disableMockPrice": "disable_mock_price",
    "setMockPrice": "set_mock_price",
}

def function_abi(name: str) -> dict:
    for entry in MINI_STABLE_VAULT_ABI:
        if entry["name"] == name:
            return entry
    raise KeyError(f"No function {name} in vault ABI")

def input_types(name: str) -> list:
    return [i["type"] for i in function_abi(name)["inputs"]]
