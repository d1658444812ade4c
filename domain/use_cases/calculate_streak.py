from __future__ import annotations

from datetime import datetime
from typing import Callable

import structlog

from core.config import settings
from domain.calculations import local_day, resolve_timezone, utc_now, workout_streak
from domain.entities import User
from domain.ports import UserReader, WorkoutReader


log = structlog.get_logger(__name__)


class StreakCalculator:
    def __init__(
        self,
        users: UserReader,
        workouts: WorkoutReader,
        *,
        lookback: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.users = users
        self.workouts = workouts
        self.lookback = lookback or settings.streak_lookback
        self.clock = clock

    async def calculate(self, user_id: int, *, user: User | None = None) -> int:
        """Current streak in days; storage failures count as a broken streak."""
        try:
            if user is None:
                user = await self.users.get(user_id)
            recent = await self.workouts.list_recent(user_id, limit=self.lookback)
        except Exception:
            log.exception("streak_failed", user_id=user_id)
            return 0
        if not recent:
            return 0
        tz = resolve_timezone(user.timezone if user else None, settings.default_timezone)
        today = local_day(self.clock(), tz)
        return workout_streak((local_day(w.date, tz) for w in recent), today)
