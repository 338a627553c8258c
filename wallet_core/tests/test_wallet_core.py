"""Unit tests for key derivation and transaction signing."""

import unittest

from eth_account import Account
from eth_utils import to_checksum_address

from consolidation_engine.models import KeyHandle, UnsignedTransaction
from wallet_core.keys import (
    KeyDerivationError,
    derivation_paths,
    derive_accounts,
    key_from_private_key,
    keys_from_mnemonic,
)
from wallet_core.models import DerivationPath
from wallet_core.signer import EthAccountSigner, to_transaction_dict

TEST_MNEMONIC = "test test test test test test test test test test test junk"
FIRST_MNEMONIC_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
SECOND_MNEMONIC_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_PRIVATE_KEY_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


class DerivationPathTests(unittest.TestCase):
    def test_default_path_is_ethereum(self) -> None:
        self.assertEqual(DerivationPath().to_string(), "m/44'/60'/0'/0/0")

    def test_paths_cover_change_and_index(self) -> None:
        paths = [path.to_string() for path in derivation_paths(2)]

        self.assertEqual(
            paths,
            [
                "m/44'/60'/0'/0/0",
                "m/44'/60'/0'/0/1",
                "m/44'/60'/0'/1/0",
                "m/44'/60'/0'/1/1",
            ],
        )
        self.assertEqual(len(derivation_paths(3)), 9)


class KeyDerivationTests(unittest.TestCase):
    def test_private_key_with_and_without_prefix(self) -> None:
        with_prefix = key_from_private_key(TEST_PRIVATE_KEY)
        without_prefix = key_from_private_key(TEST_PRIVATE_KEY[2:])

        self.assertEqual(with_prefix.address, TEST_PRIVATE_KEY_ADDRESS)
        self.assertEqual(with_prefix, without_prefix)
        self.assertNotIn(TEST_PRIVATE_KEY[2:], repr(with_prefix))

    def test_invalid_private_key_is_rejected(self) -> None:
        with self.assertRaises(KeyDerivationError):
            key_from_private_key("0x1234")
        with self.assertRaises(KeyDerivationError):
            key_from_private_key("not hex at all")

    def test_mnemonic_derivation(self) -> None:
        keys = keys_from_mnemonic(TEST_MNEMONIC, 2)
        addresses = [key.address for key in keys]

        self.assertEqual(len(keys), 4)
        self.assertEqual(addresses[0], FIRST_MNEMONIC_ADDRESS)
        self.assertEqual(addresses[1], SECOND_MNEMONIC_ADDRESS)
        self.assertEqual(keys[0].source, "m/44'/60'/0'/0/0")

    def test_invalid_mnemonic_is_rejected(self) -> None:
        with self.assertRaises(KeyDerivationError):
            keys_from_mnemonic(" ".join(["notaword"] * 12), 1)
        with self.assertRaises(KeyDerivationError):
            keys_from_mnemonic("   ", 1)

    def test_accounts_are_deduplicated_and_sorted(self) -> None:
        first_key = keys_from_mnemonic(TEST_MNEMONIC, 1)[0]

        accounts = derive_accounts(
            [TEST_MNEMONIC],
            [TEST_PRIVATE_KEY, TEST_PRIVATE_KEY, "0x" + first_key.private_key.hex()],
            number_of_accounts=1,
        )

        addresses = [account.address for account in accounts]
        self.assertEqual(addresses, sorted([FIRST_MNEMONIC_ADDRESS, TEST_PRIVATE_KEY_ADDRESS]))
        for account in accounts:
            self.assertEqual(account.balance, 0)
            self.assertIsNone(account.chain_id)
            self.assertEqual(len(account.key.private_key), 32)

    def test_non_positive_count_falls_back_to_default(self) -> None:
        accounts = derive_accounts([TEST_MNEMONIC], [], number_of_accounts=0)

        self.assertEqual(len(accounts), 9)

    def test_key_material_is_required(self) -> None:
        with self.assertRaises(KeyDerivationError):
            derive_accounts([], [])


class EthAccountSignerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.key = KeyHandle(private_key=bytes.fromhex(TEST_PRIVATE_KEY[2:]))
        self.transaction = UnsignedTransaction(
            to_address="0x" + "dd" * 20,
            value=10**15,
            gas_limit=21_000,
            gas_price=10**9,
            nonce=5,
            data=b"",
            chain_id=1,
        )

    def test_transaction_dict_uses_checksummed_target(self) -> None:
        payload = to_transaction_dict(self.transaction)

        self.assertEqual(payload["to"], to_checksum_address("0x" + "dd" * 20))
        self.assertEqual(payload["chainId"], 1)
        self.assertEqual(payload["nonce"], 5)
        self.assertEqual(payload["gasPrice"], 10**9)

    def test_signature_recovers_originator(self) -> None:
        signed = EthAccountSigner().sign(self.transaction, self.key)

        self.assertEqual(signed.transaction, self.transaction)
        self.assertTrue(signed.tx_hash.startswith("0x"))
        self.assertEqual(len(signed.tx_hash), 66)
        self.assertEqual(
            Account.recover_transaction(signed.raw_transaction), TEST_PRIVATE_KEY_ADDRESS
        )

    def test_signing_is_deterministic(self) -> None:
        signer = EthAccountSigner()

        self.assertEqual(
            signer.sign(self.transaction, self.key), signer.sign(self.transaction, self.key)
        )


if __name__ == "__main__":
    unittest.main()
