from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Callable

import structlog

from core.config import settings
from domain.calculations import as_utc, local_day, resolve_timezone, round_int, utc_now
from domain.dtos import Suggestion, SuggestionBundle
from domain.entities import Meal, User, Workout
from domain.ports import MealReader, UserReader, WorkoutReader


log = structlog.get_logger(__name__)

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}

RECENT_WORKOUTS = 10
RECENT_MEALS = 7


def sort_by_priority(suggestions: list[Suggestion]) -> list[Suggestion]:
    # sorted() is stable, so equal priorities keep their input order
    return sorted(suggestions, key=lambda s: PRIORITY_RANK[s.priority])


def workout_rules(user: User, recent: list[Workout], now: datetime, tz) -> list[Suggestion]:
    out: list[Suggestion] = []
    week_ago = now - timedelta(days=7)
    last_week = [w for w in recent if as_utc(w.date) >= week_ago]

    if len(last_week) < 3:
        out.append(Suggestion("workout_frequency", "Try to work out at least 3 times per week for best results", "high"))

    tags = {tag for w in recent for tag in (w.tags or [])}
    if len(tags) < 2 and len(recent) >= 3:
        out.append(Suggestion("workout_variety", "Add variety to your workouts! Try different types of exercises", "medium"))

    if user.current_weight and user.goal_weight:
        diff = user.current_weight - user.goal_weight
        if diff > 5:
            out.append(Suggestion("weight_loss", "Focus on cardio workouts to reach your weight loss goal", "high"))
        elif diff < -5:
            out.append(
                Suggestion(
                    "weight_gain",
                    "Focus on strength training and ensure adequate nutrition for muscle gain",
                    "high",
                )
            )

    if user.activity_level == "sedentary" and not last_week:
        out.append(Suggestion("start_working_out", "Start with light activities like walking or yoga", "high"))

    if recent and local_day(recent[0].date, tz) == local_day(now, tz) and len(last_week) >= 5:
        out.append(Suggestion("rest_day", "Consider taking a rest day to allow your body to recover", "low"))

    return out


def nutrition_rules(user: User, recent: list[Meal], tz) -> list[Suggestion]:
    if not recent:
        return [Suggestion("start_tracking", "Start logging your meals to get personalized nutrition suggestions", "high")]

    out: list[Suggestion] = []
    avg_calories = sum(m.totals.total_calories for m in recent) / len(recent)
    if user.daily_calorie_goal:
        percentage = avg_calories / user.daily_calorie_goal * 100
        if percentage > 110:
            out.append(
                Suggestion(
                    "calorie_excess",
                    f"You're consuming {round_int(percentage - 100)}% more calories than your goal. "
                    "Consider reducing portion sizes",
                    "high",
                )
            )
        elif percentage < 90:
            out.append(
                Suggestion(
                    "calorie_deficit",
                    f"You're consuming {round_int(100 - percentage)}% fewer calories than your goal. "
                    "Make sure you're eating enough!",
                    "medium",
                )
            )
        else:
            out.append(Suggestion("calorie_on_track", "Great job! You're staying within your calorie goal", "low"))

    if user.current_weight:
        recommended = user.current_weight * 1.0  # g protein per kg
        avg_protein = sum(m.totals.total_protein for m in recent) / len(recent)
        if avg_protein < recommended * 0.8:
            out.append(
                Suggestion(
                    "protein_low",
                    f"Consider increasing protein intake. Aim for {round_int(recommended)}g per day",
                    "medium",
                )
            )

    per_day = Counter(local_day(m.date, tz) for m in recent)
    if len(recent) / len(per_day) < 3:
        out.append(Suggestion("meal_frequency", "Try to eat 3-4 balanced meals per day for better metabolism", "medium"))

    return out


class SuggestionService:
    """Rule-based advice. Each category is best effort and degrades to []."""

    def __init__(
        self,
        users: UserReader,
        workouts: WorkoutReader,
        meals: MealReader,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.users = users
        self.workouts = workouts
        self.meals = meals
        self.clock = clock

    async def workout_suggestions(self, user_id: int) -> list[Suggestion]:
        try:
            user = await self.users.get(user_id)
            if user is None:
                return []
            recent = await self.workouts.list_recent(user_id, limit=RECENT_WORKOUTS)
            tz = resolve_timezone(user.timezone, settings.default_timezone)
            return workout_rules(user, recent, as_utc(self.clock()), tz)
        except Exception:
            log.exception("workout_suggestions_failed", user_id=user_id)
            return []

    async def nutrition_suggestions(self, user_id: int) -> list[Suggestion]:
        try:
            user = await self.users.get(user_id)
            if user is None:
                return []
            recent = await self.meals.list_recent(user_id, limit=RECENT_MEALS)
            tz = resolve_timezone(user.timezone, settings.default_timezone)
            return nutrition_rules(user, recent, tz)
        except Exception:
            log.exception("nutrition_suggestions_failed", user_id=user_id)
            return []

    async def all(self, user_id: int) -> SuggestionBundle:
        workout = await self.workout_suggestions(user_id)
        nutrition = await self.nutrition_suggestions(user_id)
        return SuggestionBundle(workout=workout, nutrition=nutrition, all=sort_by_priority(workout + nutrition))
