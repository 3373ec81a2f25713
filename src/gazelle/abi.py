"""Minimal contract ABIs used by the on-chain reader."""

from __future__ import annotations


def _view(name: str, inputs: list[dict], output_type: str) -> dict:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": [{"internalType": output_type, "name": "", "type": output_type}],
        "stateMutability": "view",
        "type": "function",
    }


_ACCOUNT_INPUT = [{"internalType": "address", "name": "account", "type": "address"}]

ERC20_ABI: list[dict] = [
    _view("balanceOf", _ACCOUNT_INPUT, "uint256"),
    _view("totalSupply", [], "uint256"),
    _view("decimals", [], "uint8"),
    _view("name", [], "string"),
    _view("symbol", [], "string"),
]

# Curve-style pools expose the redemption price of one LP token (18 decimals).
STABLE_SWAP_POOL_ABI: list[dict] = [
    _view("get_virtual_price", [], "uint256"),
]

# Yearn-style strategies point at the token they farm.
STRATEGY_ABI: list[dict] = [
    _view("want", [], "address"),
]


def load_erc20_abi() -> list[dict]:
    """Load the ERC20 ABI."""
    return ERC20_ABI


def load_stable_swap_pool_abi() -> list[dict]:
    """Load the stable-swap pool ABI."""
    return STABLE_SWAP_POOL_ABI


def load_strategy_abi() -> list[dict]:
    """Load the strategy ABI."""
    return STRATEGY_ABI
