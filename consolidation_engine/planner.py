"""Deterministic consolidation planner producing signed transaction plans."""

from eth_utils import is_address, to_checksum_address

from .drain import DEFAULT_GAS_PRICE_STEP, plan_balance_drain
from .models import LedgerState, PhasePlan
from .redistribution import plan_gas_redistribution
from .sweep import plan_token_sweep
from .transactions import Signer


class ConsolidationPlanner:
    """Builds the three phase plans without broadcasting anything.

    Every method takes a ledger and returns a new one inside the
    :class:`PhasePlan`; the input ledger is never modified.
    """

    def __init__(
        self,
        signer: Signer,
        destination: str,
        gas_price_step: int = DEFAULT_GAS_PRICE_STEP,
    ) -> None:
        if not is_address(destination):
            raise ValueError(f"Invalid destination address: {destination!r}")
        self._signer = signer
        self._destination = to_checksum_address(destination)
        self._gas_price_step = gas_price_step

    @property
    def destination(self) -> str:
        return self._destination

    def redistribute_gas(self, ledger: LedgerState, gas_price: int) -> PhasePlan:
        return plan_gas_redistribution(ledger, gas_price, self._signer)

    def sweep_tokens(self, ledger: LedgerState, gas_price: int) -> PhasePlan:
        return plan_token_sweep(ledger, gas_price, self._destination, self._signer)

    def drain_balances(self, ledger: LedgerState, gas_price: int) -> PhasePlan:
        return plan_balance_drain(
            ledger,
            gas_price,
            self._destination,
            self._signer,
            gas_price_step=self._gas_price_step,
        )
