"""Operator CLI for wallet consolidation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from consolidation_engine.models import Phase, PhasePlan
from consolidation_engine.validation import PlanValidationError
from execution_adapter.ethereum.adapter import LedgerQueryError, Web3LedgerAdapter
from execution_adapter.ethereum.simulator import SimulationError
from execution_controller.controller import ExecutionBlockedError
from wallet_core.keys import KeyDerivationError

from .report import ledger_to_dict, phase_lines, report_to_dict, snapshot_lines, summary_lines
from .runner import build_pipeline, load_ledger
from .settings import ConsolidationSettings, load_settings, load_settings_file

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="wallet-consolidator")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    consolidate = subparsers.add_parser("consolidate")
    _add_settings_args(consolidate)
    consolidate.add_argument("--simulate", action="store_true")
    consolidate.add_argument("--json", action="store_true")
    consolidate.set_defaults(func=_consolidate)

    accounts = subparsers.add_parser("accounts")
    _add_settings_args(accounts)
    accounts.add_argument("--json", action="store_true")
    accounts.set_defaults(func=_accounts)

    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        return args.func(args)
    except (
        ValueError,
        KeyDerivationError,
        PlanValidationError,
        LedgerQueryError,
        ExecutionBlockedError,
        SimulationError,
    ) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2


def _consolidate(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    if args.simulate:
        settings = settings.model_copy(update={"simulate": True})

    adapter = Web3LedgerAdapter.connect(settings.node_url, settings.destination_address)
    ledger, gas_price = load_ledger(settings, adapter)
    if not args.json:
        _print_lines(snapshot_lines(ledger, gas_price))

    reporter = None if args.json else _phase_printer(settings.simulate)
    pipeline = build_pipeline(settings, adapter, reporter=reporter)
    report = pipeline.run(ledger, gas_price)

    if args.json:
        print(json.dumps(report_to_dict(report), indent=2))
    else:
        _print_lines(summary_lines(report))
    return 0


def _accounts(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    adapter = Web3LedgerAdapter.connect(settings.node_url, settings.destination_address)
    ledger, gas_price = load_ledger(settings, adapter)
    if args.json:
        print(json.dumps(ledger_to_dict(ledger, gas_price), indent=2))
    else:
        _print_lines(snapshot_lines(ledger, gas_price))
    return 0


def _add_settings_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("settings", nargs="?", help="settings as a JSON object")
    source.add_argument("--settings-file")


def _load_settings(args: argparse.Namespace) -> ConsolidationSettings:
    if args.settings_file:
        return load_settings_file(Path(args.settings_file))
    if args.settings == "-":
        return load_settings(sys.stdin.read())
    return load_settings(args.settings)


def _phase_printer(simulate: bool) -> Callable[[PhasePlan], None]:
    swept = []

    def _print_phase(plan: PhasePlan) -> None:
        if plan.phase == Phase.TOKEN_SWEEP:
            swept.extend(plan.records)
        if plan.phase == Phase.BALANCE_DRAIN and simulate and swept:
            print(
                "\nThese transactions might change based on gas left in accounts "
                "after token transactions are actually mined:"
            )
        _print_lines(phase_lines(plan))

    return _print_phase


def _print_lines(lines: List[str]) -> None:
    for line in lines:
        print(line)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=_LOG_FORMAT, stream=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
