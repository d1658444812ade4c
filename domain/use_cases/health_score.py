from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

import structlog

from core.config import settings
from domain.calculations import (
    TARGET_MACRO_SPLIT,
    clamp,
    grade_for_score,
    local_day,
    local_midnight,
    macro_split,
    resolve_timezone,
    round_int,
    utc_now,
)
from domain.dtos import HealthFactor, HealthScore
from domain.entities import Meal, User
from domain.errors import NotFoundError
from domain.ports import MealReader, UserReader, WorkoutReader


log = structlog.get_logger(__name__)

MAX_SCORE = 100
# ~4 workouts a week over a 30 day window
TARGET_WORKOUT_DAYS = 17


class HealthScoreService:
    """Weighted 0-100 score over a trailing window.

    Factors and their maximum points: workout frequency 30, calorie adherence
    25, goal progress 20, consistency 15, nutrition balance 10. Every factor
    reports its raw value and target next to the points it earned.
    """

    def __init__(
        self,
        users: UserReader,
        workouts: WorkoutReader,
        meals: MealReader,
        *,
        window_days: int | None = None,
        min_goal_span_kg: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.users = users
        self.workouts = workouts
        self.meals = meals
        self.window_days = window_days or settings.health_window_days
        self.min_goal_span_kg = (
            settings.goal_progress_min_span_kg if min_goal_span_kg is None else min_goal_span_kg
        )
        self.clock = clock

    async def compute(self, user_id: int) -> HealthScore:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")

        now = self.clock()
        tz = resolve_timezone(user.timezone, settings.default_timezone)
        since = local_midnight(local_day(now, tz) - timedelta(days=self.window_days), tz)
        workouts = await self.workouts.list_since(user_id, since=since)
        meals = await self.meals.list_since(user_id, since=since)

        workout_days = {local_day(w.date, tz) for w in workouts}
        meal_days = {local_day(m.date, tz) for m in meals}

        factors = {
            "workout_frequency": self._workout_frequency(workout_days),
            "calorie_adherence": self._calorie_adherence(user, meals, len(meal_days)),
            "goal_progress": self._goal_progress(user),
            "consistency": self._consistency(workout_days | meal_days),
            "nutrition_balance": self._nutrition_balance(meals),
        }
        total = min(sum(f.score for f in factors.values()), MAX_SCORE)
        log.info("health_score_computed", user_id=user_id, total=total)
        return HealthScore(
            total_score=total,
            max_score=MAX_SCORE,
            percentage=round_int(total / MAX_SCORE * 100),
            grade=grade_for_score(total),
            factors=factors,
            last_updated=now,
        )

    def _workout_frequency(self, workout_days: set) -> HealthFactor:
        frequency = min(1.0, len(workout_days) / TARGET_WORKOUT_DAYS)
        return HealthFactor(
            score=round_int(frequency * 30),
            max_score=30,
            value=len(workout_days),
            target=TARGET_WORKOUT_DAYS,
            label="Workout Frequency",
        )

    def _calorie_adherence(self, user: User, meals: list[Meal], meal_day_count: int) -> HealthFactor:
        goal = user.daily_calorie_goal
        if not goal:
            return HealthFactor(
                score=0, max_score=25, value=0, target=0, label="Calorie Goal Adherence (No goal set)"
            )
        total = sum(m.totals.total_calories for m in meals)
        avg_daily = total / meal_day_count if meal_day_count else 0.0
        deviation = abs(avg_daily - goal) / goal
        # full marks at the goal, nothing once 50% off
        adherence = max(0.0, 1 - deviation * 2)
        return HealthFactor(
            score=round_int(adherence * 25),
            max_score=25,
            value=round_int(avg_daily),
            target=goal,
            label="Calorie Goal Adherence",
        )

    def _goal_progress(self, user: User) -> HealthFactor:
        current, goal = user.current_weight, user.goal_weight
        if not current or not goal:
            return HealthFactor(
                score=0,
                max_score=20,
                value=current or 0,
                target=goal or 0,
                label="Weight Goal Progress (No goal set)",
            )
        baseline = user.starting_weight if user.starting_weight is not None else current
        span = max(abs(baseline - goal), self.min_goal_span_kg)
        progress = clamp(1 - abs(current - goal) / span, 0.0, 1.0) if span > 0 else 1.0
        return HealthFactor(
            score=round_int(progress * 20),
            max_score=20,
            value=current,
            target=goal,
            label="Weight Goal Progress",
        )

    def _consistency(self, active_days: set) -> HealthFactor:
        consistency = min(1.0, len(active_days) / self.window_days)
        return HealthFactor(
            score=round_int(consistency * 15),
            max_score=15,
            value=len(active_days),
            target=self.window_days,
            label="Activity Consistency",
        )

    def _nutrition_balance(self, meals: list[Meal]) -> HealthFactor:
        empty = {"protein": 0, "carbs": 0, "fat": 0}
        if not meals:
            return HealthFactor(
                score=0,
                max_score=10,
                value=empty,
                target=dict(TARGET_MACRO_SPLIT),
                label="Nutrition Balance (No data)",
            )
        split = macro_split(
            sum(m.totals.total_protein for m in meals),
            sum(m.totals.total_carbs for m in meals),
            sum(m.totals.total_fat for m in meals),
        )
        if split is None:
            return HealthFactor(
                score=0, max_score=10, value=empty, target=dict(TARGET_MACRO_SPLIT), label="Nutrition Balance"
            )
        deviation = split.deviation_from(TARGET_MACRO_SPLIT)
        return HealthFactor(
            score=round_int(max(0.0, 10 - deviation / 5)),
            max_score=10,
            value={
                "protein": round_int(split.protein),
                "carbs": round_int(split.carbs),
                "fat": round_int(split.fat),
            },
            target=dict(TARGET_MACRO_SPLIT),
            label="Nutrition Balance",
        )
