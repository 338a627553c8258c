"""Wire settings, keys and the web3 adapter into a consolidation run."""

import logging
from typing import Callable, Optional, Tuple

from consolidation_engine.models import LedgerState, PhasePlan
from consolidation_engine.planner import ConsolidationPlanner
from execution_adapter.ethereum.adapter import Web3LedgerAdapter
from execution_controller.controller import ConsolidationPipeline
from execution_controller.modes import ExecutionMode
from wallet_core.keys import derive_accounts
from wallet_core.signer import EthAccountSigner

from .settings import ConsolidationSettings

logger = logging.getLogger(__name__)


def load_ledger(
    settings: ConsolidationSettings, adapter: Web3LedgerAdapter
) -> Tuple[LedgerState, int]:
    """Derive the source accounts and snapshot them at the run's gas price."""
    accounts = derive_accounts(
        settings.mnemonics, settings.private_keys, settings.number_of_accounts
    )
    sources = tuple(
        account for account in accounts if account.address != settings.destination_address
    )
    if len(sources) != len(accounts):
        logger.warning("Destination %s is also a source account; excluding it", settings.destination_address)

    gas_price = adapter.gas_price(settings.gas_price_multiplier)
    ledger = adapter.load_snapshot(
        sources,
        pending_nonce=settings.pending_nonce,
        gas_limit_override=settings.gas_limit_override,
    )
    return ledger, gas_price


def build_pipeline(
    settings: ConsolidationSettings,
    adapter: Web3LedgerAdapter,
    reporter: Optional[Callable[[PhasePlan], None]] = None,
) -> ConsolidationPipeline:
    planner = ConsolidationPlanner(
        signer=EthAccountSigner(),
        destination=settings.destination_address,
        gas_price_step=settings.drain_gas_price_step,
    )
    mode = ExecutionMode.SIMULATE if settings.simulate else ExecutionMode.BROADCAST
    return ConsolidationPipeline(
        planner=planner,
        mode=mode,
        broadcaster=adapter,
        confirmer=adapter,
        refresher=adapter,
        reporter=reporter,
        initial_delay=settings.confirmation_initial_delay,
        poll_interval=settings.confirmation_poll_interval,
    )
