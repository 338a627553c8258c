"""Consolidation pipeline: plan, broadcast and await each phase in turn."""

import logging
import time
from typing import Callable, List, Optional, Protocol, Sequence, Set

from consolidation_engine.models import LedgerState, PhasePlan, SignedTransactionRecord
from consolidation_engine.planner import ConsolidationPlanner
from consolidation_engine.validation import PlanValidationError, validate_ledger
from execution_adapter.ethereum.adapter import BroadcastError
from execution_adapter.ethereum.simulator import simulate

from .modes import ConsolidationReport, ExecutionMode, PhaseOutcome

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_DELAY = 2.0
DEFAULT_POLL_INTERVAL = 15.0


class ExecutionBlockedError(RuntimeError):
    """Raised when the pipeline lacks what its execution mode requires."""


class Broadcaster(Protocol):
    def send(self, record: SignedTransactionRecord) -> str:
        ...


class Confirmer(Protocol):
    def is_pending(self, tx_hash: str) -> bool:
        ...


class BalanceRefresher(Protocol):
    def refresh_balances(self, ledger: LedgerState) -> LedgerState:
        ...


class ConsolidationPipeline:
    """Runs gas redistribution, token sweep and balance drain in order.

    In ``SIMULATE`` mode every phase is planned and reported but nothing is
    broadcast, awaited or refreshed; the drain then plans against the
    in-memory ledger left by the sweep rather than mined state.
    """

    def __init__(
        self,
        planner: ConsolidationPlanner,
        mode: ExecutionMode = ExecutionMode.SIMULATE,
        broadcaster: Optional[Broadcaster] = None,
        confirmer: Optional[Confirmer] = None,
        refresher: Optional[BalanceRefresher] = None,
        reporter: Optional[Callable[[PhasePlan], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if mode == ExecutionMode.BROADCAST and (
            broadcaster is None or confirmer is None or refresher is None
        ):
            raise ExecutionBlockedError(
                "BROADCAST mode requires a broadcaster, a confirmer and a balance refresher."
            )
        self._planner = planner
        self._mode = mode
        self._broadcaster = broadcaster
        self._confirmer = confirmer
        self._refresher = refresher
        self._reporter = reporter
        self._sleep = sleep
        self._initial_delay = initial_delay
        self._poll_interval = poll_interval

    @property
    def mode(self) -> ExecutionMode:
        return self._mode

    def run(self, ledger: LedgerState, gas_price: int) -> ConsolidationReport:
        if gas_price <= 0:
            raise PlanValidationError("Gas price must be positive.")
        validate_ledger(ledger)
        snapshot = ledger
        # Originators whose planned nonces no longer match the chain.
        blocked: Set[str] = set()

        gas_plan = self._planner.redistribute_gas(ledger, gas_price)
        gas_outcome = self._execute(gas_plan, blocked)

        sweep_plan = self._planner.sweep_tokens(gas_plan.ledger, gas_price)
        sweep_outcome = self._execute(sweep_plan, blocked)

        ledger = sweep_plan.ledger
        if self._mode == ExecutionMode.BROADCAST:
            ledger = self._refresher.refresh_balances(ledger)
            blocked.clear()

        drain_plan = self._planner.drain_balances(ledger, gas_price)
        drain_outcome = self._execute(drain_plan, blocked)

        return ConsolidationReport(
            mode=self._mode,
            gas_price=gas_price,
            snapshot=snapshot,
            phases=(gas_outcome, sweep_outcome, drain_outcome),
            ledger=drain_plan.ledger,
        )

    def _execute(self, plan: PhasePlan, blocked: Set[str]) -> PhaseOutcome:
        logger.info("%s: %d transactions planned", plan.phase.value, len(plan.records))
        if self._reporter is not None:
            self._reporter(plan)

        if self._mode == ExecutionMode.SIMULATE:
            return PhaseOutcome(plan=plan, dry_run=simulate(plan.records))

        sent: List[str] = []
        failed: List[str] = []
        for record in plan.records:
            if record.originator in blocked:
                logger.warning(
                    "Not sending %s: an earlier transaction from %s failed",
                    record.tx_hash,
                    record.originator,
                )
                failed.append(record.tx_hash)
                continue
            try:
                self._broadcaster.send(record)
            except BroadcastError as exc:
                logger.error("%s", exc)
                failed.append(record.tx_hash)
                blocked.add(record.originator)
                continue
            sent.append(record.tx_hash)

        self._await_confirmation(sent)
        return PhaseOutcome(plan=plan, sent=tuple(sent), failed=tuple(failed))

    def _await_confirmation(self, tx_hashes: Sequence[str]) -> None:
        if not tx_hashes:
            return
        self._sleep(self._initial_delay)
        pending = list(tx_hashes)
        while True:
            pending = [tx_hash for tx_hash in pending if self._confirmer.is_pending(tx_hash)]
            if not pending:
                break
            logger.info(
                "%d transactions still pending; checking again in %.0fs",
                len(pending),
                self._poll_interval,
            )
            self._sleep(self._poll_interval)
