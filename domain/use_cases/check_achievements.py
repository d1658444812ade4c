from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

from domain.dtos import AchievementStats
from domain.entities import Achievement, AchievementType, User
from domain.errors import AchievementAlreadyUnlocked
from domain.ports import AchievementStore, MealReader, UserReader, WorkoutReader
from domain.use_cases.calculate_streak import StreakCalculator


log = structlog.get_logger(__name__)


@dataclass
class ProgressMetrics:
    streak: int
    workout_count: int
    calories_burned: float
    meal_count: int
    goal_gap_kg: float | None  # |current - goal|, None without both weights


@dataclass(frozen=True)
class AchievementRule:
    type: AchievementType
    points: int
    satisfied: Callable[[ProgressMetrics], bool]


def _goal_reached(m: ProgressMetrics) -> bool:
    return m.goal_gap_kg is not None and m.goal_gap_kg <= 1


RULES: tuple[AchievementRule, ...] = (
    AchievementRule(AchievementType.workout_streak_7, 10, lambda m: m.streak >= 7),
    AchievementRule(AchievementType.workout_streak_30, 50, lambda m: m.streak >= 30),
    AchievementRule(AchievementType.workout_streak_100, 200, lambda m: m.streak >= 100),
    AchievementRule(AchievementType.workout_count_10, 10, lambda m: m.workout_count >= 10),
    AchievementRule(AchievementType.workout_count_50, 50, lambda m: m.workout_count >= 50),
    AchievementRule(AchievementType.workout_count_100, 100, lambda m: m.workout_count >= 100),
    AchievementRule(AchievementType.calories_10k, 25, lambda m: m.calories_burned >= 10_000),
    AchievementRule(AchievementType.calories_50k, 100, lambda m: m.calories_burned >= 50_000),
    AchievementRule(AchievementType.meal_count_30, 15, lambda m: m.meal_count >= 30),
    AchievementRule(AchievementType.meal_count_100, 50, lambda m: m.meal_count >= 100),
    AchievementRule(AchievementType.goal_reached, 100, _goal_reached),
)


class AchievementEvaluator:
    def __init__(
        self,
        users: UserReader,
        workouts: WorkoutReader,
        meals: MealReader,
        achievements: AchievementStore,
        streaks: StreakCalculator,
        *,
        rules: tuple[AchievementRule, ...] = RULES,
    ) -> None:
        self.users = users
        self.workouts = workouts
        self.meals = meals
        self.achievements = achievements
        self.streaks = streaks
        self.rules = rules

    async def check(self, user_id: int) -> list[str]:
        """Unlock every newly satisfied achievement; return the unlocked type ids.

        Safe to re-run: an already unlocked type is skipped, and a duplicate
        insert lost to a concurrent check is treated as a no-op. Any other
        failure aborts the run with an empty result, since the next logged
        meal or workout triggers another check.
        """
        try:
            user = await self.users.get(user_id)
            if user is None:
                return []
            metrics = await self._collect(user)
            unlocked: list[str] = []
            for rule in self.rules:
                if not rule.satisfied(metrics):
                    continue
                if await self.achievements.exists(user_id, rule.type):
                    continue
                try:
                    await self.achievements.create(user_id, rule.type, points=rule.points)
                except AchievementAlreadyUnlocked:
                    log.info("achievement_already_unlocked", user_id=user_id, type=rule.type.value)
                    continue
                log.info("achievement_unlocked", user_id=user_id, type=rule.type.value, points=rule.points)
                unlocked.append(rule.type.value)
            return unlocked
        except Exception:
            log.exception("achievement_check_failed", user_id=user_id)
            return []

    async def _collect(self, user: User) -> ProgressMetrics:
        gap = None
        if user.current_weight and user.goal_weight:
            gap = abs(user.current_weight - user.goal_weight)
        return ProgressMetrics(
            streak=await self.streaks.calculate(user.id, user=user),
            workout_count=await self.workouts.count(user.id),
            calories_burned=await self.workouts.sum_calories_burned(user.id),
            meal_count=await self.meals.count(user.id),
            goal_gap_kg=gap,
        )

    async def list_unlocked(self, user_id: int) -> list[Achievement]:
        return await self.achievements.list_by_user(user_id)

    async def stats(self, user_id: int) -> AchievementStats:
        achievements = await self.achievements.list_by_user(user_id)
        return AchievementStats(
            total_achievements=len(achievements),
            total_points=await self.achievements.total_points(user_id),
            current_streak=await self.streaks.calculate(user_id),
            achievements=achievements,
        )
