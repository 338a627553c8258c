"""Web3 adapter: ledger snapshots, gas price, broadcast and confirmation."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import TransactionNotFound

from consolidation_engine.calldata import encode_transfer_call
from consolidation_engine.models import UNKNOWN_SYMBOL, AccountState, LedgerState, SignedTransactionRecord, Token

from .models import ERC20_ABI, TRANSFER_EVENT_TOPIC

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_GAS_LIMIT = 40_000
GAS_ESTIMATE_SAFETY_FACTOR = Decimal("1.7")


class LedgerQueryError(RuntimeError):
    """Raised when a query the run cannot do without fails."""


class BroadcastError(RuntimeError):
    """Raised when the node rejects a signed transaction."""


class Web3LedgerAdapter:
    """Reads account state from a JSON-RPC node and submits signed transactions."""

    def __init__(self, web3: Web3, destination: str) -> None:
        self._web3 = web3
        self._destination = to_checksum_address(destination)

    @classmethod
    def connect(cls, node_url: str, destination: str) -> "Web3LedgerAdapter":
        return cls(Web3(Web3.HTTPProvider(node_url)), destination)

    def gas_price(self, multiplier: float = 1.0) -> int:
        try:
            suggested = int(self._web3.eth.gas_price)
        except Exception as exc:
            raise LedgerQueryError(f"Could not fetch gas price: {exc}") from exc
        gas_price = int(Decimal(suggested) * Decimal(str(multiplier)))
        logger.info("Suggested gas price %d wei, using %d wei (x%s)", suggested, gas_price, multiplier)
        return gas_price

    def load_snapshot(
        self,
        accounts: Iterable[AccountState],
        pending_nonce: bool = False,
        gas_limit_override: Optional[int] = None,
    ) -> LedgerState:
        """Populate balances, nonces, chain ids and token holdings.

        Accounts holding neither native currency nor tokens are dropped.
        """
        loaded: List[AccountState] = []
        for account in accounts:
            account = self._with_account_state(account, pending_nonce)
            account = account.with_tokens(self.discover_tokens(account.address, gas_limit_override))
            if account.tokens or account.balance:
                loaded.append(account)
            else:
                logger.debug("Ignoring unused account %s", account.address)
        return LedgerState.from_accounts(loaded)

    def discover_tokens(
        self, owner: str, gas_limit_override: Optional[int] = None
    ) -> Tuple[Token, ...]:
        try:
            logs = self._web3.eth.get_logs(
                {
                    "fromBlock": 0,
                    "toBlock": "latest",
                    "topics": [TRANSFER_EVENT_TOPIC, None, _address_topic(owner)],
                }
            )
        except Exception as exc:
            logger.warning("Token transfer log query failed for %s: %s", owner, exc)
            return ()

        contracts = sorted({to_checksum_address(entry["address"]) for entry in logs})
        tokens = []
        for contract in contracts:
            token = self._load_token(contract, owner, gas_limit_override)
            if token is not None:
                tokens.append(token)
        return tuple(tokens)

    def refresh_balances(self, ledger: LedgerState) -> LedgerState:
        """Reload pending balances and nonces; failed queries keep the old value."""
        for account in ledger.accounts:
            balance = account.balance
            try:
                balance = int(self._web3.eth.get_balance(account.address, "pending"))
            except Exception as exc:
                logger.warning("Pending balance query failed for %s: %s", account.address, exc)

            nonce = account.nonce
            try:
                nonce = int(self._web3.eth.get_transaction_count(account.address, "pending"))
            except Exception as exc:
                logger.warning("Pending nonce query failed for %s: %s", account.address, exc)

            ledger = ledger.replace(replace(account, balance=balance, nonce=nonce))
        return ledger

    def send(self, record: SignedTransactionRecord) -> str:
        try:
            self._web3.eth.send_raw_transaction(record.signed.raw_transaction)
        except Exception as exc:
            raise BroadcastError(f"Broadcast of {record.tx_hash} failed: {exc}") from exc
        logger.info("Broadcast %s from %s", record.tx_hash, record.originator)
        return record.tx_hash

    def is_pending(self, tx_hash: str) -> bool:
        try:
            transaction = self._web3.eth.get_transaction(tx_hash)
        except TransactionNotFound:
            return True
        except Exception as exc:
            logger.debug("Status query for %s failed, assuming pending: %s", tx_hash, exc)
            return True
        return transaction.get("blockNumber") is None

    def _with_account_state(self, account: AccountState, pending_nonce: bool) -> AccountState:
        address = account.address
        balance = 0
        try:
            balance = int(self._web3.eth.get_balance(address))
        except Exception as exc:
            logger.warning("Balance query failed for %s: %s", address, exc)

        nonce = 0
        block = "pending" if pending_nonce else "latest"
        try:
            nonce = int(self._web3.eth.get_transaction_count(address, block))
        except Exception as exc:
            logger.warning("Nonce query failed for %s: %s", address, exc)

        chain_id = account.chain_id
        try:
            chain_id = int(self._web3.eth.chain_id)
        except Exception as exc:
            logger.warning("Chain id query failed for %s: %s", address, exc)

        return replace(account, balance=balance, nonce=nonce, chain_id=chain_id)

    def _load_token(
        self, contract: str, owner: str, gas_limit_override: Optional[int]
    ) -> Optional[Token]:
        erc20 = self._web3.eth.contract(address=contract, abi=list(ERC20_ABI))
        try:
            balance = int(erc20.functions.balanceOf(owner).call())
        except Exception as exc:
            logger.warning("balanceOf failed for %s on %s: %s", owner, contract, exc)
            return None
        if balance == 0:
            return None

        try:
            symbol = str(erc20.functions.symbol().call())
        except Exception as exc:
            logger.debug("symbol() failed on %s: %s", contract, exc)
            symbol = UNKNOWN_SYMBOL
        try:
            decimals = int(erc20.functions.decimals().call())
        except Exception as exc:
            logger.debug("decimals() failed on %s: %s", contract, exc)
            decimals = 0

        return Token(
            contract=contract,
            balance=balance,
            decimals=decimals,
            symbol=symbol,
            gas_limit=self._transfer_gas_limit(contract, owner, balance, gas_limit_override),
        )

    def _transfer_gas_limit(
        self, contract: str, owner: str, balance: int, gas_limit_override: Optional[int]
    ) -> int:
        if gas_limit_override:
            return gas_limit_override
        call = {
            "from": owner,
            "to": contract,
            "data": Web3.to_hex(encode_transfer_call(self._destination, balance)),
        }
        try:
            estimate = int(self._web3.eth.estimate_gas(call))
        except Exception as exc:
            logger.warning(
                "Gas estimate failed for %s on %s, assuming %d: %s",
                owner,
                contract,
                DEFAULT_TOKEN_GAS_LIMIT,
                exc,
            )
            estimate = DEFAULT_TOKEN_GAS_LIMIT
        return int(Decimal(estimate) * GAS_ESTIMATE_SAFETY_FACTOR)


def _address_topic(address: str) -> str:
    return "0x" + address[2:].lower().rjust(64, "0")
