from __future__ import annotations

import structlog

from domain.calculations import meal_totals
from domain.dtos import MealDTO, MealPatch, WorkoutDTO
from domain.entities import Meal, Workout
from domain.errors import NotFoundError, ValidationError
from domain.ports import AchievementNotifier, MealWriter, WorkoutWriter


log = structlog.get_logger(__name__)

MEAL_TYPES = {"breakfast", "lunch", "dinner", "snack"}


class ActivityLogger:
    """Meal and workout writes followed by a post-commit achievement check.

    Meal totals are always derived from the food items here, so a stored
    meal's totals match its items.
    """

    def __init__(
        self,
        meals: MealWriter,
        workouts: WorkoutWriter,
        notifier: AchievementNotifier | None = None,
    ) -> None:
        self.meals = meals
        self.workouts = workouts
        self.notifier = notifier

    async def log_meal(self, dto: MealDTO) -> Meal:
        if dto.type not in MEAL_TYPES:
            raise ValidationError(f"Unknown meal type: {dto.type}")
        meal = await self.meals.create(dto, meal_totals(dto.food_items))
        log.info("meal_logged", user_id=dto.user_id, meal_id=meal.id, calories=meal.totals.total_calories)
        self._after_commit(dto.user_id)
        return meal

    async def update_meal(self, meal_id: int, *, user_id: int, patch: MealPatch) -> Meal:
        if patch.type is not None and patch.type not in MEAL_TYPES:
            raise ValidationError(f"Unknown meal type: {patch.type}")
        if await self.meals.get(meal_id, user_id=user_id) is None:
            raise NotFoundError("Meal not found")
        totals = meal_totals(patch.food_items) if patch.food_items is not None else None
        return await self.meals.update(meal_id, user_id=user_id, patch=patch, totals=totals)

    async def log_workout(self, dto: WorkoutDTO) -> Workout:
        if dto.calories_burned < 0 or dto.total_duration < 0:
            raise ValidationError("Duration and calories burned must not be negative")
        workout = await self.workouts.create(dto)
        log.info("workout_logged", user_id=dto.user_id, workout_id=workout.id)
        self._after_commit(dto.user_id)
        return workout

    def _after_commit(self, user_id: int) -> None:
        if self.notifier is not None:
            self.notifier.notify(user_id)
