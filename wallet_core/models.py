"""Domain models for the wallet core."""

from dataclasses import dataclass, field

ETHEREUM_COIN_TYPE = 60


@dataclass(frozen=True)
class DerivationPath:
    """BIP44-style derivation path components."""

    purpose: int = 44
    coin_type: int = ETHEREUM_COIN_TYPE
    account: int = 0
    change: int = 0
    address_index: int = 0

    def to_string(self) -> str:
        return (
            f"m/{self.purpose}'/{self.coin_type}'/"
            f"{self.account}'/{self.change}/{self.address_index}"
        )


@dataclass(frozen=True)
class DerivedKey:
    address: str
    private_key: bytes = field(repr=False)
    source: str = "private_key"
