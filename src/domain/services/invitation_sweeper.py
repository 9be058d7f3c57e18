"""Background expiry of stale invitations."""

from collections.abc import Callable
from datetime import datetime

import structlog

from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class InvitationSweeper:
    """Marks pending invitations past their expiry as expired.

    Bookkeeping only: the granter refuses expired invitations whether or
    not a sweep has run.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def sweep_expired(self) -> int:
        """Expire stale invitations. Returns how many were updated."""
        async with self._uow_factory() as uow:
            count = await uow.invitations.expire_pending(self._clock())
            await uow.commit()

        if count > 0:
            logger.info("invitations_expired", expired_count=count)
        return count
