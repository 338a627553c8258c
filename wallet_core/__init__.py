from .keys import KeyDerivationError, derivation_paths, derive_accounts, key_from_private_key, keys_from_mnemonic
from .models import DerivationPath, DerivedKey
from .signer import EthAccountSigner, to_transaction_dict

__all__ = [
    "DerivationPath",
    "DerivedKey",
    "EthAccountSigner",
    "KeyDerivationError",
    "derivation_paths",
    "derive_accounts",
    "key_from_private_key",
    "keys_from_mnemonic",
    "to_transaction_dict",
]
