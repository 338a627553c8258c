"""Derive source accounts from seed phrases and raw private keys."""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from eth_account import Account

from consolidation_engine.models import AccountState, KeyHandle

from .models import DerivationPath, DerivedKey

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_OF_ACCOUNTS = 3

Account.enable_unaudited_hdwallet_features()


class KeyDerivationError(ValueError):
    """Raised when supplied key material cannot produce accounts."""


def derivation_paths(number_of_accounts: int) -> Tuple[DerivationPath, ...]:
    """Vary both the change and the address index levels.

    Wallets disagree on which level they increment, so ``n`` yields ``n * n``
    candidate paths.
    """
    return tuple(
        DerivationPath(change=change, address_index=index)
        for change in range(number_of_accounts)
        for index in range(number_of_accounts)
    )


def keys_from_mnemonic(mnemonic: str, number_of_accounts: int) -> Tuple[DerivedKey, ...]:
    if not mnemonic or not mnemonic.strip():
        raise KeyDerivationError("Mnemonic is required.")
    keys: List[DerivedKey] = []
    for path in derivation_paths(number_of_accounts):
        path_string = path.to_string()
        try:
            local = Account.from_mnemonic(mnemonic.strip(), account_path=path_string)
        except Exception as exc:
            raise KeyDerivationError(f"Mnemonic is invalid: {exc}") from exc
        keys.append(DerivedKey(address=local.address, private_key=bytes(local.key), source=path_string))
    return tuple(keys)


def key_from_private_key(private_key: str) -> DerivedKey:
    value = private_key.strip()
    if value.startswith(("0x", "0X")):
        value = value[2:]
    try:
        local = Account.from_key(bytes.fromhex(value))
    except Exception as exc:
        raise KeyDerivationError("Private key is invalid.") from exc
    return DerivedKey(address=local.address, private_key=bytes(local.key), source="private_key")


def derive_accounts(
    mnemonics: Sequence[str],
    private_keys: Sequence[str],
    number_of_accounts: int = DEFAULT_NUMBER_OF_ACCOUNTS,
) -> Tuple[AccountState, ...]:
    """Return zeroed account snapshots, deduplicated by address and sorted."""
    if not mnemonics and not private_keys:
        raise KeyDerivationError("No mnemonics or private keys supplied.")
    if number_of_accounts <= 0:
        number_of_accounts = DEFAULT_NUMBER_OF_ACCOUNTS

    by_address: Dict[str, DerivedKey] = {}
    for key in _all_keys(mnemonics, private_keys, number_of_accounts):
        by_address[key.address] = key

    logger.info("Derived %d distinct accounts", len(by_address))
    return tuple(
        AccountState(address=address, key=KeyHandle(private_key=by_address[address].private_key))
        for address in sorted(by_address)
    )


def _all_keys(
    mnemonics: Sequence[str], private_keys: Sequence[str], number_of_accounts: int
) -> Iterable[DerivedKey]:
    for mnemonic in mnemonics:
        yield from keys_from_mnemonic(mnemonic, number_of_accounts)
    for private_key in private_keys:
        yield key_from_private_key(private_key)
