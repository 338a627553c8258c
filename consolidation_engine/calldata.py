"""ERC-20 ``transfer(address,uint256)`` call data."""

from eth_utils import keccak, to_canonical_address

TRANSFER_SIGNATURE = "transfer(address,uint256)"
TRANSFER_SELECTOR = keccak(text=TRANSFER_SIGNATURE)[:4]

_WORD_SIZE = 32
_MAX_UINT256 = 2**256 - 1


def encode_transfer_call(destination: str, amount: int) -> bytes:
    if amount < 0 or amount > _MAX_UINT256:
        raise ValueError("Token amount must fit in an unsigned 256-bit word.")
    address_word = to_canonical_address(destination).rjust(_WORD_SIZE, b"\x00")
    amount_word = amount.to_bytes(_WORD_SIZE, "big")
    return TRANSFER_SELECTOR + address_word + amount_word
