"""RateApplicationService — quotes and snapshot refresh over the shared resolver."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.enums import parse_program
from src.xp_rates.application.schemas import RateQuoteResponse, RefreshRatesResponse
from src.xp_rates.domain.resolver import RateResolver
from src.xp_rates.infrastructure.persistence import RateFeedRepository

# One resolver per process; every service reads the same snapshot.
rate_resolver = RateResolver(feed=RateFeedRepository())


class RateApplicationService:
    def __init__(self, resolver: RateResolver | None = None) -> None:
        self._resolver = resolver or rate_resolver

    async def get_quote(
        self, db: AsyncSession, from_program: str, to_program: str
    ) -> RateQuoteResponse:
        source = parse_program(from_program, "from_program").value
        dest = parse_program(to_program, "to_program").value
        await self._resolver.ensure_loaded(db)
        return RateQuoteResponse.from_domain(self._resolver.quote(source, dest))

    async def refresh(self, db: AsyncSession) -> RefreshRatesResponse:
        snapshot = await self._resolver.refresh(db)
        return RefreshRatesResponse(
            pairs_loaded=len(snapshot),
            loaded_at=snapshot.loaded_at.isoformat() if snapshot.loaded_at else "",
        )
