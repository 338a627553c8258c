"""Token sweep: move every affordable token balance to the destination."""

import logging
from dataclasses import replace
from typing import List, Tuple

from .calldata import encode_transfer_call
from .models import LedgerState, Phase, PhasePlan, SignedTransactionRecord, Token
from .transactions import Signer, sign_for
from .validation import PlanValidationError, validate_phase

logger = logging.getLogger(__name__)


def plan_token_sweep(
    ledger: LedgerState, gas_price: int, destination: str, signer: Signer
) -> PhasePlan:
    before = ledger
    records: List[SignedTransactionRecord] = []
    left_behind: List[str] = []

    for account in before.accounts:
        swept = set()
        for token in sweep_order(account.tokens):
            if token.balance <= 0:
                continue
            fee = token.transfer_fee(gas_price)
            if account.balance < fee:
                logger.warning(
                    "Skipping %s on %s: fee %d exceeds balance %d",
                    token.symbol,
                    account.address,
                    fee,
                    account.balance,
                )
                left_behind.append(f"{account.address}:{token.contract}")
                continue
            try:
                record = sign_for(
                    signer,
                    Phase.TOKEN_SWEEP,
                    account,
                    to_address=token.contract,
                    value=0,
                    gas_limit=token.gas_limit,
                    gas_price=gas_price,
                    data=encode_transfer_call(destination, token.balance),
                )
            except PlanValidationError:
                raise
            except Exception:
                logger.exception(
                    "Failed to sign %s transfer for %s; token left behind",
                    token.symbol,
                    account.address,
                )
                left_behind.append(f"{account.address}:{token.contract}")
                continue
            account = replace(account, balance=account.balance - fee, nonce=account.nonce + 1)
            records.append(record)
            swept.add(token.contract)
        remaining = (token for token in account.tokens if token.contract not in swept)
        ledger = ledger.replace(account.with_tokens(remaining))

    plan = PhasePlan(
        phase=Phase.TOKEN_SWEEP,
        ledger=ledger,
        records=tuple(records),
        unresolved=tuple(left_behind),
    )
    validate_phase(before, plan)
    return plan


def sweep_order(tokens: Tuple[Token, ...]) -> Tuple[Token, ...]:
    """Largest raw balance first; contract address breaks ties."""
    return tuple(sorted(tokens, key=lambda token: (-token.balance, token.contract)))
