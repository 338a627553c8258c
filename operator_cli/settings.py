"""JSON run settings."""

from pathlib import Path
from typing import List, Optional

from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, Field, field_validator, model_validator

from consolidation_engine.drain import DEFAULT_GAS_PRICE_STEP
from execution_controller.controller import DEFAULT_INITIAL_DELAY, DEFAULT_POLL_INTERVAL
from wallet_core.keys import DEFAULT_NUMBER_OF_ACCOUNTS


class ConsolidationSettings(BaseModel):
    node_url: str
    destination_address: str
    mnemonics: List[str] = Field(default_factory=list, repr=False)
    private_keys: List[str] = Field(default_factory=list, repr=False)
    gas_price_multiplier: float = 1.0
    simulate: bool = False
    number_of_accounts: int = DEFAULT_NUMBER_OF_ACCOUNTS
    pending_nonce: bool = False
    # Replaces estimated token transfer gas limits only when set and non-zero.
    token_transfer_gas_limit: Optional[int] = None
    drain_gas_price_step: int = DEFAULT_GAS_PRICE_STEP
    confirmation_poll_interval: float = DEFAULT_POLL_INTERVAL
    confirmation_initial_delay: float = DEFAULT_INITIAL_DELAY

    @field_validator("node_url")
    @classmethod
    def _node_url_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("node_url is required")
        return value.strip()

    @field_validator("destination_address")
    @classmethod
    def _valid_destination(cls, value: str) -> str:
        if not is_address(value):
            raise ValueError(f"destination_address is not a valid address: {value!r}")
        return to_checksum_address(value)

    @field_validator("gas_price_multiplier")
    @classmethod
    def _positive_multiplier(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("gas_price_multiplier must be positive")
        return value

    @field_validator("number_of_accounts")
    @classmethod
    def _account_count(cls, value: int) -> int:
        if value < 0:
            raise ValueError("number_of_accounts must not be negative")
        return value or DEFAULT_NUMBER_OF_ACCOUNTS

    @field_validator("token_transfer_gas_limit")
    @classmethod
    def _non_negative_override(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("token_transfer_gas_limit must not be negative")
        return value

    @field_validator("drain_gas_price_step")
    @classmethod
    def _positive_step(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("drain_gas_price_step must be positive")
        return value

    @field_validator("confirmation_poll_interval", "confirmation_initial_delay")
    @classmethod
    def _non_negative_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("confirmation delays must not be negative")
        return value

    @model_validator(mode="after")
    def _key_material_required(self) -> "ConsolidationSettings":
        if not self.mnemonics and not self.private_keys:
            raise ValueError("at least one mnemonic or private key is required")
        return self

    @property
    def gas_limit_override(self) -> Optional[int]:
        return self.token_transfer_gas_limit or None


def load_settings(raw: str) -> ConsolidationSettings:
    return ConsolidationSettings.model_validate_json(raw)


def load_settings_file(path: Path) -> ConsolidationSettings:
    return load_settings(path.read_text())
