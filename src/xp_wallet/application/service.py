"""WalletApplicationService — read wallets and fund them.

`credit` stands in for external issuance (the program crediting points it
has earned the member); only the admin router calls it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.xp_common.database import set_lock_timeout, translate_db_errors
from src.xp_common.enums import parse_program
from src.xp_common.points import validate_amount
from src.xp_common.retry import retry_on_conflict
from src.xp_wallet.application.schemas import WalletItem, WalletListResponse
from src.xp_wallet.domain.locks import WalletLockManager, wallet_key, wallet_locks
from src.xp_wallet.domain.repository import WalletStoreProtocol
from src.xp_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class WalletApplicationService:
    def __init__(
        self,
        repo: WalletStoreProtocol | None = None,
        locks: WalletLockManager | None = None,
    ) -> None:
        self._repo: WalletStoreProtocol = repo or WalletRepository()
        self._locks = locks or wallet_locks

    async def list_wallets(self, db: AsyncSession, user_id: str) -> WalletListResponse:
        wallets = await self._repo.list_wallets(db, user_id)
        return WalletListResponse(
            user_id=user_id,
            wallets=[WalletItem.from_domain(w) for w in wallets],
        )

    async def credit(
        self, db: AsyncSession, user_id: str, program: str, amount: int
    ) -> WalletItem:
        program_code = parse_program(program).value
        validate_amount(amount)

        async def _unit() -> WalletItem:
            async with self._locks.hold(wallet_key(user_id, program_code)):
                try:
                    async with translate_db_errors():
                        await set_lock_timeout(db, settings.DB_LOCK_TIMEOUT_MS)
                        wallet = await self._repo.credit(db, user_id, program_code, amount)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
            return WalletItem.from_domain(wallet)

        item = await retry_on_conflict(_unit, name="wallet.credit")
        logger.info("Credited %d %s points to %s", amount, program_code, user_id)
        return item
