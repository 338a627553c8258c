"""Console and JSON rendering of snapshots, plans and run reports."""

from decimal import Decimal
from typing import List, Optional

from consolidation_engine.models import (
    WEI_PER_ETHER,
    WEI_PER_GWEI,
    AccountState,
    LedgerState,
    PhasePlan,
    SignedTransactionRecord,
    Token,
)
from execution_adapter.ethereum.models import DryRunResult
from execution_controller.modes import ConsolidationReport, PhaseOutcome

_PHASE_TITLES = {
    "GAS_REDISTRIBUTION": "Gas redistribution",
    "TOKEN_SWEEP": "Token sweep",
    "BALANCE_DRAIN": "Balance drain",
}


def format_ether(wei: int) -> str:
    return f"{Decimal(wei) / Decimal(WEI_PER_ETHER):.8f}"


def format_gwei(wei: int) -> str:
    return f"{Decimal(wei) / Decimal(WEI_PER_GWEI):.2f}"


def account_line(account: AccountState, gas_price: int) -> str:
    return (
        f"Address: {account.address}, Nonce: {account.nonce:4d}, "
        f"Token Transfer Gas Needed: {format_ether(account.required_gas(gas_price))} ETH, "
        f"Balance: {format_ether(account.balance)} ETH"
    )


def token_line(token: Token, gas_price: int) -> str:
    return (
        f"\tContract Address: {token.contract}, "
        f"Gas Needed: {format_ether(token.transfer_fee(gas_price))} ETH, "
        f"Balance({token.symbol:>6}): {token.decimal_balance():.8f}"
    )


def snapshot_lines(ledger: LedgerState, gas_price: int) -> List[str]:
    lines: List[str] = []
    for account in ledger.accounts:
        lines.append(account_line(account, gas_price))
        lines.extend(token_line(token, gas_price) for token in account.tokens)
        lines.append("")
    return lines


def transaction_line(record: SignedTransactionRecord) -> str:
    tx = record.transaction
    return (
        f"From: {record.originator}, Nonce: {tx.nonce:4d}, To: {tx.to_address}, "
        f"Gas Limit: {tx.gas_limit:6d}, Gas Price: {format_gwei(tx.gas_price)} Gwei, "
        f"Value: {format_ether(tx.value)} ETH, TxHash: {record.tx_hash}, "
        f"Data: 0x{tx.data.hex()}"
    )


def phase_lines(plan: PhasePlan) -> List[str]:
    title = _PHASE_TITLES[plan.phase.value]
    lines = [f"== {title}: {len(plan.records)} transaction(s)"]
    lines.extend(transaction_line(record) for record in plan.records)
    if plan.unresolved:
        lines.append(f"   left behind: {', '.join(plan.unresolved)}")
    return lines


def dry_run_lines(dry_run: Optional[DryRunResult]) -> List[str]:
    if dry_run is None or not dry_run.tx_results:
        return []
    return [
        f"   dry run: gas limit {dry_run.total_gas_limit}, "
        f"max fees {format_ether(dry_run.total_max_fee_wei)} ETH, "
        f"value {format_ether(dry_run.total_value_wei)} ETH"
    ]


def summary_lines(report: ConsolidationReport) -> List[str]:
    lines = [f"Mode: {report.mode.value}, Gas Price: {format_gwei(report.gas_price)} Gwei"]
    for outcome in report.phases:
        title = _PHASE_TITLES[outcome.phase.value]
        lines.append(
            f"{title}: planned {len(outcome.plan.records)}, "
            f"sent {len(outcome.sent)}, failed {len(outcome.failed)}"
        )
        lines.extend(dry_run_lines(outcome.dry_run))
    return lines


def ledger_to_dict(ledger: LedgerState, gas_price: int) -> List[dict]:
    return [
        {
            "address": account.address,
            "nonce": account.nonce,
            "chain_id": account.chain_id,
            "balance_wei": str(account.balance),
            "gas_needed_wei": str(account.required_gas(gas_price)),
            "tokens": [
                {
                    "contract": token.contract,
                    "symbol": token.symbol,
                    "decimals": token.decimals,
                    "balance": str(token.balance),
                    "gas_limit": token.gas_limit,
                }
                for token in account.tokens
            ],
        }
        for account in ledger.accounts
    ]


def record_to_dict(record: SignedTransactionRecord) -> dict:
    tx = record.transaction
    return {
        "from": record.originator,
        "phase": record.phase.value,
        "nonce": tx.nonce,
        "to": tx.to_address,
        "gas_limit": tx.gas_limit,
        "gas_price_wei": str(tx.gas_price),
        "value_wei": str(tx.value),
        "chain_id": tx.chain_id,
        "tx_hash": record.tx_hash,
        "data": "0x" + tx.data.hex(),
    }


def outcome_to_dict(outcome: PhaseOutcome) -> dict:
    return {
        "phase": outcome.phase.value,
        "transactions": [record_to_dict(record) for record in outcome.plan.records],
        "unresolved": list(outcome.plan.unresolved),
        "sent": list(outcome.sent),
        "failed": list(outcome.failed),
    }


def report_to_dict(report: ConsolidationReport) -> dict:
    # Wei amounts are strings so JSON consumers keep full precision.
    return {
        "mode": report.mode.value,
        "gas_price_wei": str(report.gas_price),
        "accounts": ledger_to_dict(report.snapshot, report.gas_price),
        "phases": [outcome_to_dict(outcome) for outcome in report.phases],
        "final_balances": {
            account.address: str(account.balance) for account in report.ledger.accounts
        },
    }
