"""Domain models for the consolidation planner."""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

TRANSFER_GAS = 21_000
WEI_PER_GWEI = 10**9
WEI_PER_ETHER = 10**18
UNKNOWN_SYMBOL = "???"


class Phase(Enum):
    GAS_REDISTRIBUTION = "GAS_REDISTRIBUTION"
    TOKEN_SWEEP = "TOKEN_SWEEP"
    BALANCE_DRAIN = "BALANCE_DRAIN"


@dataclass(frozen=True)
class KeyHandle:
    """Opaque signing capability owned by exactly one account."""

    private_key: bytes = field(repr=False)


@dataclass(frozen=True)
class Token:
    contract: str
    balance: int
    decimals: int = 0
    symbol: str = UNKNOWN_SYMBOL
    gas_limit: int = 0

    def transfer_fee(self, gas_price: int) -> int:
        return gas_price * self.gas_limit

    def decimal_balance(self) -> Decimal:
        if self.decimals == 0:
            return Decimal(self.balance)
        return Decimal(self.balance) / (Decimal(10) ** self.decimals)


@dataclass(frozen=True)
class AccountState:
    """Snapshot of one source account as seen by the planners.

    ``available`` is derived rather than stored so it always reflects the
    current balance and gas price.
    """

    address: str
    key: KeyHandle = field(repr=False, compare=False)
    balance: int = 0
    nonce: int = 0
    chain_id: Optional[int] = None
    tokens: Tuple[Token, ...] = ()
    total_gas_budget: int = 0

    def required_gas(self, gas_price: int) -> int:
        return gas_price * self.total_gas_budget

    def available(self, gas_price: int) -> int:
        return self.balance - self.required_gas(gas_price)

    def with_tokens(self, tokens: Iterable[Token]) -> "AccountState":
        tokens = tuple(tokens)
        return replace(
            self,
            tokens=tokens,
            total_gas_budget=sum(token.gas_limit for token in tokens),
        )


@dataclass(frozen=True)
class LedgerState:
    """Ordered, immutable view of every account taking part in a run."""

    accounts: Tuple[AccountState, ...]

    @staticmethod
    def from_accounts(accounts: Iterable[AccountState]) -> "LedgerState":
        by_address: Dict[str, AccountState] = {}
        for account in accounts:
            if account.address in by_address:
                raise ValueError(f"Duplicate account {account.address}.")
            by_address[account.address] = account
        return LedgerState(
            accounts=tuple(by_address[address] for address in sorted(by_address))
        )

    @property
    def addresses(self) -> Tuple[str, ...]:
        return tuple(account.address for account in self.accounts)

    def get(self, address: str) -> AccountState:
        for account in self.accounts:
            if account.address == address:
                return account
        raise KeyError(f"Unknown account: {address}")

    def replace(self, updated: AccountState) -> "LedgerState":
        accounts = []
        found = False
        for account in self.accounts:
            if account.address == updated.address:
                accounts.append(updated)
                found = True
            else:
                accounts.append(account)
        if not found:
            raise KeyError(f"Unknown account: {updated.address}")
        return LedgerState(accounts=tuple(accounts))

    def total_balance(self) -> int:
        return sum(account.balance for account in self.accounts)


@dataclass(frozen=True)
class UnsignedTransaction:
    to_address: str
    value: int
    gas_limit: int
    gas_price: int
    nonce: int
    data: bytes
    chain_id: int

    @property
    def fee(self) -> int:
        return self.gas_limit * self.gas_price


@dataclass(frozen=True)
class SignedTransaction:
    transaction: UnsignedTransaction
    raw_transaction: bytes = field(repr=False)
    tx_hash: str


@dataclass(frozen=True)
class SignedTransactionRecord:
    originator: str
    phase: Phase
    signed: SignedTransaction

    @property
    def transaction(self) -> UnsignedTransaction:
        return self.signed.transaction

    @property
    def tx_hash(self) -> str:
        return self.signed.tx_hash


@dataclass(frozen=True)
class PhasePlan:
    """Outcome of one planning phase.

    ``unresolved`` lists what the phase had to leave behind: under-funded
    accounts, ``address:contract`` pairs of unswept tokens, or dust accounts.
    """

    phase: Phase
    ledger: LedgerState
    records: Tuple[SignedTransactionRecord, ...]
    unresolved: Tuple[str, ...] = ()
