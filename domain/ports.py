"""Repository interfaces the use cases depend on.

The SQL implementations live in ``infra/db/repositories``; tests use
in-memory fakes. Writers accept ``autocommit`` so a caller can group several
writes into one transaction and finish it through a :class:`UnitOfWork`.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from domain.dtos import MealDTO, MealPatch, WorkoutDTO
from domain.entities import (
    Achievement,
    AchievementType,
    Meal,
    MealTotals,
    User,
    WeightEntry,
    Workout,
)


class UnitOfWork:
    async def commit(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def rollback(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class UserReader:
    async def get(self, user_id: int) -> User | None:  # pragma: no cover - interface
        raise NotImplementedError


class UserWriter(UserReader):
    async def update(
        self, user_id: int, *, autocommit: bool = True, **patch: Any
    ) -> User:  # pragma: no cover - interface
        raise NotImplementedError


class WorkoutReader:
    async def list_recent(self, user_id: int, *, limit: int) -> list[Workout]:  # pragma: no cover - interface
        """Most recent first."""
        raise NotImplementedError

    async def list_since(self, user_id: int, *, since: datetime) -> list[Workout]:  # pragma: no cover - interface
        raise NotImplementedError

    async def count(self, user_id: int) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    async def sum_calories_burned(self, user_id: int) -> float:  # pragma: no cover - interface
        raise NotImplementedError


class WorkoutWriter(WorkoutReader):
    async def create(self, dto: WorkoutDTO, *, autocommit: bool = True) -> Workout:  # pragma: no cover - interface
        raise NotImplementedError


class MealReader:
    async def list_recent(self, user_id: int, *, limit: int) -> list[Meal]:  # pragma: no cover - interface
        """Most recent first."""
        raise NotImplementedError

    async def list_since(self, user_id: int, *, since: datetime) -> list[Meal]:  # pragma: no cover - interface
        raise NotImplementedError

    async def count(self, user_id: int) -> int:  # pragma: no cover - interface
        raise NotImplementedError


class MealWriter(MealReader):
    async def get(self, meal_id: int, *, user_id: int) -> Meal | None:  # pragma: no cover - interface
        raise NotImplementedError

    async def create(
        self, dto: MealDTO, totals: MealTotals, *, autocommit: bool = True
    ) -> Meal:  # pragma: no cover - interface
        raise NotImplementedError

    async def update(
        self,
        meal_id: int,
        *,
        user_id: int,
        patch: MealPatch,
        totals: MealTotals | None,
        autocommit: bool = True,
    ) -> Meal:  # pragma: no cover - interface
        raise NotImplementedError


class AchievementStore:
    async def exists(self, user_id: int, achievement_type: AchievementType) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    async def create(
        self, user_id: int, achievement_type: AchievementType, *, points: int
    ) -> Achievement:  # pragma: no cover - interface
        """Insert an unlock; raises ``AchievementAlreadyUnlocked`` on a duplicate."""
        raise NotImplementedError

    async def list_by_user(self, user_id: int) -> list[Achievement]:  # pragma: no cover - interface
        """Most recently unlocked first."""
        raise NotImplementedError

    async def total_points(self, user_id: int) -> int:  # pragma: no cover - interface
        raise NotImplementedError


class WeightWriter:
    async def add(
        self, user_id: int, *, weight: float, recorded_at: datetime, autocommit: bool = True
    ) -> WeightEntry:  # pragma: no cover - interface
        raise NotImplementedError


class AchievementNotifier:
    def notify(self, user_id: int) -> None:  # pragma: no cover - interface
        """Called after a committed write; must not block or raise."""
        raise NotImplementedError
