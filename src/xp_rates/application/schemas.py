"""Pydantic schemas for the xp_rates API."""

from pydantic import BaseModel

from src.xp_rates.domain.models import RateQuote


class RateQuoteResponse(BaseModel):
    from_program: str
    to_program: str
    rate: str          # Decimal as string, no float rounding
    path: str
    as_of: str | None  # ISO8601 of the oldest rate used

    @classmethod
    def from_domain(cls, quote: RateQuote) -> "RateQuoteResponse":
        return cls(
            from_program=quote.from_program,
            to_program=quote.to_program,
            rate=str(quote.rate),
            path=quote.path.value,
            as_of=quote.as_of.isoformat() if quote.as_of else None,
        )


class RefreshRatesResponse(BaseModel):
    pairs_loaded: int
    loaded_at: str
