from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Callable

import structlog

from core.config import settings
from domain.calculations import (
    age_on,
    bmr_mifflin,
    local_day,
    local_midnight,
    resolve_timezone,
    tdee_from_activity,
    utc_now,
    weight_change_kg,
)
from domain.dtos import TrajectoryPrediction
from domain.entities import Meal
from domain.errors import NotFoundError, ValidationError
from domain.ports import MealReader, UserReader


log = structlog.get_logger(__name__)

DEFAULT_DAILY_CALORIES = 2000.0
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_AGE = 30
# predictions within this many kg of the goal count as on track
ON_TRACK_TOLERANCE_KG = 2.0


def parse_target_date(value: date | datetime | str, tz) -> date:
    if isinstance(value, datetime):
        return local_day(value, tz) if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError("Invalid date format") from None
        return local_day(parsed, tz) if parsed.tzinfo else parsed.date()
    raise ValidationError("Invalid date format")


def average_daily_calories(meals: list[Meal], tz) -> float | None:
    """Mean of per-day calorie sums over days with at least one meal."""
    per_day: dict[date, float] = defaultdict(float)
    for m in meals:
        per_day[local_day(m.date, tz)] += m.totals.total_calories or 0.0
    if not per_day:
        return None
    return sum(per_day.values()) / len(per_day)


class TrajectoryPredictor:
    def __init__(
        self,
        users: UserReader,
        meals: MealReader,
        *,
        window_days: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.users = users
        self.meals = meals
        self.window_days = window_days or settings.trajectory_window_days
        self.clock = clock

    async def predict(self, user_id: int, target_date: date | datetime | str) -> TrajectoryPrediction:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not user.current_weight or not user.goal_weight:
            raise ValidationError(
                "User weight data not available. Please update your profile with current weight and goal weight."
            )

        tz = resolve_timezone(user.timezone, settings.default_timezone)
        today = local_day(self.clock(), tz)
        target = parse_target_date(target_date, tz)
        days_remaining = (target - today).days
        if days_remaining < 0:
            raise ValidationError("Target date must be in the future")

        age = age_on(user.date_of_birth, today) if user.date_of_birth else DEFAULT_AGE
        bmr = bmr_mifflin(user.gender, age, user.height_cm or DEFAULT_HEIGHT_CM, user.current_weight)
        tdee = tdee_from_activity(bmr, user.activity_level)

        since = local_midnight(today - timedelta(days=self.window_days), tz)
        meals = await self.meals.list_since(user_id, since=since)
        avg = average_daily_calories(meals, tz)
        avg_daily_calories = DEFAULT_DAILY_CALORIES if avg is None else avg

        # positive deficit means losing weight
        daily_deficit = tdee - avg_daily_calories
        predicted_weight = user.current_weight - weight_change_kg(daily_deficit, days_remaining)

        log.info(
            "weight_trajectory_predicted",
            user_id=user_id,
            days_remaining=days_remaining,
            daily_deficit=round(daily_deficit, 1),
        )
        return TrajectoryPrediction(
            current_weight=user.current_weight,
            goal_weight=user.goal_weight,
            predicted_weight=predicted_weight,
            predicted_date=target,
            daily_deficit=daily_deficit,
            days_remaining=days_remaining,
            weekly_weight_change=weight_change_kg(daily_deficit, 7),
            on_track=abs(predicted_weight - user.goal_weight) < ON_TRACK_TOLERANCE_KG,
            bmr=bmr,
            tdee=tdee,
            avg_daily_calories=avg_daily_calories,
            weight_difference=predicted_weight - user.goal_weight,
        )
