from __future__ import annotations

import asyncio

import structlog

from core.config import settings
from core.container import build_container
from core.logging import bind_user
from domain.ports import AchievementNotifier
from infra.db.session import Database


log = structlog.get_logger(__name__)


class AchievementDispatcher(AchievementNotifier):
    """Runs achievement checks in the background after a committed write.

    Every check gets its own session so it never shares a transaction with
    the request that triggered it. Failures are logged and dropped; the next
    logged meal or workout schedules another check.
    """

    def __init__(self, db: Database, *, enabled: bool | None = None) -> None:
        self.db = db
        self.enabled = settings.achievement_checks_enabled if enabled is None else enabled
        self._tasks: set[asyncio.Task] = set()

    def notify(self, user_id: int) -> None:
        if not self.enabled:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.warning("achievement_check_skipped", user_id=user_id, reason="no_running_loop")
            return
        task = loop.create_task(self._run(user_id), name=f"achievements:{user_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, user_id: int) -> list[str]:
        bind_user(user_id)
        try:
            async with self.db.session() as session:
                unlocked = await build_container(session).evaluator.check(user_id)
        except Exception:
            log.exception("achievement_dispatch_failed")
            return []
        if unlocked:
            log.info("achievements_dispatched", unlocked=unlocked)
        return unlocked

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for scheduled checks; call before shutting the loop down."""
        while self._tasks:
            batch = list(self._tasks)
            await asyncio.gather(*batch, return_exceptions=True)
            self._tasks.difference_update(batch)
