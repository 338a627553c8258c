"""Transaction signing with per-account keys."""

from typing import Any, Dict

from eth_account import Account
from eth_utils import to_checksum_address

from consolidation_engine.models import KeyHandle, SignedTransaction, UnsignedTransaction


class EthAccountSigner:
    """Signs legacy EIP-155 transactions locally; nothing leaves the process."""

    def sign(self, transaction: UnsignedTransaction, key: KeyHandle) -> SignedTransaction:
        signed = Account.sign_transaction(to_transaction_dict(transaction), key.private_key)
        return SignedTransaction(
            transaction=transaction,
            raw_transaction=bytes(signed.raw_transaction),
            tx_hash="0x" + bytes(signed.hash).hex(),
        )


def to_transaction_dict(transaction: UnsignedTransaction) -> Dict[str, Any]:
    return {
        "nonce": transaction.nonce,
        "to": to_checksum_address(transaction.to_address),
        "value": transaction.value,
        "gas": transaction.gas_limit,
        "gasPrice": transaction.gas_price,
        "data": transaction.data,
        "chainId": transaction.chain_id,
    }
