"""Exchange rate value objects."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.xp_common.enums import RatePath


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """How many `to_program` points one `from_program` point buys, as of `as_of`."""

    from_program: str
    to_program: str
    rate: Decimal
    as_of: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.rate, Decimal):
            object.__setattr__(self, "rate", Decimal(str(self.rate)))
        if self.rate <= 0:
            raise ValueError(f"Exchange rate must be positive, got {self.rate}")

    @property
    def pair(self) -> str:
        return f"{self.from_program}/{self.to_program}"


@dataclass(frozen=True, slots=True)
class RateQuote:
    from_program: str
    to_program: str
    rate: Decimal
    path: RatePath
    as_of: datetime | None  # oldest rate used; None for IDENTITY
