"""Ethereum adapter constants and dry-run output models."""

from dataclasses import dataclass
from typing import Tuple

# keccak256("Transfer(address,address,uint256)")
TRANSFER_EVENT_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

ERC20_ABI = (
    {
        "constant": True,
        "inputs": [{"name": "owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
)


@dataclass(frozen=True)
class DryRunTxResult:
    originator: str
    nonce: int
    to_address: str
    gas_limit: int
    max_fee_wei: int
    value_wei: int
    tx_hash: str
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DryRunResult:
    tx_results: Tuple[DryRunTxResult, ...]
    total_gas_limit: int
    total_max_fee_wei: int
    total_value_wei: int
    notes: Tuple[str, ...] = ()
