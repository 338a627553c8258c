import hashlib
import unittest

from eth_utils import to_checksum_address

from consolidation_engine.drain import DEFAULT_GAS_PRICE_STEP, drain_quote, plan_balance_drain
from consolidation_engine.models import (
    TRANSFER_GAS,
    AccountState,
    KeyHandle,
    LedgerState,
    Phase,
    SignedTransaction,
)

OWNER = "0x" + "a1" * 20
OTHER = "0x" + "b2" * 20
DESTINATION = to_checksum_address("0x" + "dd" * 20)


class HashSigner:
    def sign(self, transaction, key):
        payload = repr(transaction).encode("utf-8") + key.private_key
        return SignedTransaction(
            transaction=transaction,
            raw_transaction=payload,
            tx_hash="0x" + hashlib.sha256(payload).hexdigest(),
        )


def _account(address, balance, nonce=0):
    return AccountState(
        address=address,
        key=KeyHandle(private_key=address.encode("ascii")),
        balance=balance,
        nonce=nonce,
        chain_id=1,
    )


class DrainQuoteTests(unittest.TestCase):
    def test_quote_at_full_price(self) -> None:
        quote = drain_quote(10**18, 10**9, DEFAULT_GAS_PRICE_STEP)

        self.assertEqual(quote, (10**9, 10**18 - TRANSFER_GAS * 10**9))

    def test_price_is_lowered_until_something_is_left(self) -> None:
        balance = TRANSFER_GAS * 2_000_000 + 5

        price, amount = drain_quote(balance, 3_000_000, 1_000_000)

        self.assertEqual(price, 2_000_000)
        self.assertEqual(amount, 5)
        self.assertEqual(amount + price * TRANSFER_GAS, balance)

    def test_dust_below_minimum_fee_has_no_quote(self) -> None:
        self.assertIsNone(drain_quote(100, 1, DEFAULT_GAS_PRICE_STEP))
        self.assertIsNone(drain_quote(0, 10**9, DEFAULT_GAS_PRICE_STEP))

    def test_price_never_goes_below_zero(self) -> None:
        balance = TRANSFER_GAS * 500_000 + 7
        self.assertEqual(drain_quote(balance, 1_500_000, 1_000_000), (500_000, 7))
        self.assertIsNone(drain_quote(TRANSFER_GAS + 1, 1_500_000, 1_000_000))


class BalanceDrainTests(unittest.TestCase):
    def test_every_funded_account_drains_to_destination(self) -> None:
        ledger = LedgerState.from_accounts(
            [_account(OWNER, 10**18, nonce=3), _account(OTHER, 5 * 10**17)]
        )
        gas_price = 10**9

        plan = plan_balance_drain(ledger, gas_price, DESTINATION, HashSigner())

        self.assertEqual(len(plan.records), 2)
        for record in plan.records:
            tx = record.transaction
            self.assertEqual(record.phase, Phase.BALANCE_DRAIN)
            self.assertEqual(tx.to_address, DESTINATION)
            self.assertEqual(tx.gas_limit, TRANSFER_GAS)
            self.assertEqual(tx.data, b"")
            self.assertEqual(
                tx.value + tx.fee, ledger.get(record.originator).balance
            )
            self.assertEqual(plan.ledger.get(record.originator).balance, 0)
        self.assertEqual(plan.records[0].transaction.nonce, 3)
        self.assertEqual(plan.ledger.get(OWNER).nonce, 4)
        self.assertEqual(plan.unresolved, ())

    def test_scenario_dust_account_is_left_behind(self) -> None:
        ledger = LedgerState.from_accounts([_account(OWNER, 100)])

        plan = plan_balance_drain(ledger, 1, DESTINATION, HashSigner())

        self.assertEqual(plan.records, ())
        self.assertEqual(plan.unresolved, (OWNER,))
        self.assertEqual(plan.ledger, ledger)

    def test_empty_account_is_not_reported_as_dust(self) -> None:
        ledger = LedgerState.from_accounts([_account(OWNER, 0)])

        plan = plan_balance_drain(ledger, 10**9, DESTINATION, HashSigner())

        self.assertEqual(plan.records, ())
        self.assertEqual(plan.unresolved, ())

    def test_lowered_price_is_used_on_the_transaction(self) -> None:
        balance = TRANSFER_GAS * 2_000_000 + 5
        ledger = LedgerState.from_accounts([_account(OWNER, balance)])

        plan = plan_balance_drain(
            ledger, 3_000_000, DESTINATION, HashSigner(), gas_price_step=1_000_000
        )

        tx = plan.records[0].transaction
        self.assertEqual(tx.gas_price, 2_000_000)
        self.assertEqual(tx.value, 5)
        self.assertEqual(plan.ledger.get(OWNER).balance, 0)

    def test_non_positive_step_is_rejected(self) -> None:
        ledger = LedgerState.from_accounts([_account(OWNER, 10**18)])

        with self.assertRaises(ValueError):
            plan_balance_drain(ledger, 1, DESTINATION, HashSigner(), gas_price_step=0)


if __name__ == "__main__":
    unittest.main()
