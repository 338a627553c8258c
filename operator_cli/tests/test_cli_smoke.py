"""Smoke tests for the operator CLI."""

import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from dataclasses import replace
from io import StringIO
from pathlib import Path
from unittest import mock

from consolidation_engine.models import LedgerState
from operator_cli.cli import main

PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SOURCE = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
DESTINATION = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class FakeAdapter:
    def __init__(self, balance=10**17):
        self.balance = balance
        self.sent = []

    def gas_price(self, multiplier=1.0):
        return int(10**9 * multiplier)

    def load_snapshot(self, accounts, pending_nonce=False, gas_limit_override=None):
        return LedgerState.from_accounts(
            replace(account, balance=self.balance, chain_id=1) for account in accounts
        )

    def refresh_balances(self, ledger):
        return ledger

    def send(self, record):
        self.sent.append(record)
        return record.tx_hash

    def is_pending(self, tx_hash):
        return False


def _settings(**overrides):
    payload = {
        "node_url": "http://127.0.0.1:8545",
        "destination_address": DESTINATION,
        "private_keys": [PRIVATE_KEY],
        "confirmation_initial_delay": 0,
        "confirmation_poll_interval": 0,
    }
    payload.update(overrides)
    return json.dumps(payload)


class OperatorCliSmokeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = FakeAdapter()
        patcher = mock.patch("operator_cli.cli.Web3LedgerAdapter")
        adapter_cls = patcher.start()
        adapter_cls.connect.return_value = self.adapter
        self.addCleanup(patcher.stop)
        self.adapter_cls = adapter_cls

    def _run(self, args):
        out = StringIO()
        err = StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(args)
        return code, out.getvalue(), err.getvalue()

    def test_simulated_consolidation_prints_plan(self) -> None:
        code, output, _ = self._run(["consolidate", "--simulate", _settings()])

        self.assertEqual(code, 0)
        self.assertIn(f"Address: {SOURCE}", output)
        self.assertIn("== Balance drain: 1 transaction(s)", output)
        self.assertIn(f"From: {SOURCE}", output)
        self.assertIn(f"To: {DESTINATION}", output)
        self.assertIn("Mode: SIMULATE", output)
        self.assertEqual(self.adapter.sent, [])
        self.adapter_cls.connect.assert_called_once_with("http://127.0.0.1:8545", DESTINATION)

    def test_json_report(self) -> None:
        code, output, _ = self._run(["consolidate", "--simulate", "--json", _settings()])

        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["mode"], "SIMULATE")
        self.assertEqual(payload["gas_price_wei"], str(10**9))
        phases = {phase["phase"]: phase for phase in payload["phases"]}
        drain = phases["BALANCE_DRAIN"]["transactions"]
        self.assertEqual(len(drain), 1)
        self.assertEqual(drain[0]["from"], SOURCE)
        self.assertEqual(drain[0]["value_wei"], str(10**17 - 21_000 * 10**9))
        self.assertEqual(payload["final_balances"], {SOURCE: "0"})

    def test_broadcast_sends_through_adapter(self) -> None:
        code, output, _ = self._run(["consolidate", _settings()])

        self.assertEqual(code, 0)
        self.assertEqual(len(self.adapter.sent), 1)
        self.assertIn("Mode: BROADCAST", output)
        self.assertIn("sent 1, failed 0", output)

    def test_settings_file(self) -> None:
        with tempfile.TemporaryDirectory() as tempdir:
            path = Path(tempdir) / "settings.json"
            path.write_text(_settings(simulate=True, gas_price_multiplier=2))
            code, output, _ = self._run(["accounts", "--json", "--settings-file", str(path)])

        self.assertEqual(code, 0)
        accounts = json.loads(output)
        self.assertEqual([account["address"] for account in accounts], [SOURCE])
        self.assertEqual(accounts[0]["balance_wei"], str(10**17))

    def test_destination_is_not_a_source(self) -> None:
        code, output, _ = self._run(
            ["accounts", "--json", _settings(destination_address=SOURCE)]
        )

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output), [])

    def test_invalid_settings_report_error(self) -> None:
        code, output, err = self._run(["consolidate", json.dumps({"node_url": "http://x"})])

        self.assertEqual(code, 2)
        self.assertEqual(output, "")
        self.assertIn("ERROR:", err)

    def test_invalid_private_key_reports_error(self) -> None:
        code, _, err = self._run(["consolidate", "--simulate", _settings(private_keys=["0x12"])])

        self.assertEqual(code, 2)
        self.assertIn("Private key is invalid", err)

    def test_missing_chain_id_blocks_run(self) -> None:
        self.adapter.load_snapshot = lambda accounts, **kwargs: LedgerState.from_accounts(
            replace(account, balance=10**17) for account in accounts
        )

        code, _, err = self._run(["consolidate", "--simulate", _settings()])

        self.assertEqual(code, 2)
        self.assertIn("Chain id", err)


if __name__ == "__main__":
    unittest.main()
