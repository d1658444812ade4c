from __future__ import annotations

import pytest

from domain.dtos import ExerciseDTO, MealDTO, MealPatch, WorkoutDTO
from domain.entities import FoodItem
from domain.errors import NotFoundError, ValidationError
from domain.use_cases import ActivityLogger
from tests.fakes import NOW, FakeMeals, FakeWorkouts, RecordingNotifier


BREAKFAST = [
    FoodItem("eggs", 120, calories=180, protein=15, carbs=1, fat=12),
    FoodItem("toast", 60, calories=160, protein=5, carbs=30, fat=2),
]


@pytest.fixture
def logger_parts():
    meals, workouts, notifier = FakeMeals(), FakeWorkouts(), RecordingNotifier()
    return ActivityLogger(meals, workouts, notifier), meals, workouts, notifier


@pytest.mark.asyncio
async def test_meal_totals_are_derived_from_items(logger_parts):
    logger, meals, _, notifier = logger_parts

    meal = await logger.log_meal(MealDTO(user_id=1, date=NOW, type="breakfast", food_items=BREAKFAST))

    assert meal.totals.total_calories == 340
    assert meal.totals.total_protein == 20
    assert meal.totals.total_carbs == 31
    assert meal.totals.total_fat == 14
    assert notifier.calls == [1]


@pytest.mark.asyncio
async def test_unknown_meal_type_is_rejected(logger_parts):
    logger, meals, _, notifier = logger_parts
    with pytest.raises(ValidationError):
        await logger.log_meal(MealDTO(user_id=1, date=NOW, type="brunch"))  # type: ignore[arg-type]
    assert meals.rows == []
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_update_recomputes_totals_only_with_new_items(logger_parts):
    logger, _, _, notifier = logger_parts
    meal = await logger.log_meal(MealDTO(user_id=1, date=NOW, type="breakfast", food_items=BREAKFAST))

    renamed = await logger.update_meal(meal.id, user_id=1, patch=MealPatch(name="Big breakfast"))
    assert renamed.name == "Big breakfast"
    assert renamed.totals.total_calories == 340

    trimmed = await logger.update_meal(meal.id, user_id=1, patch=MealPatch(food_items=BREAKFAST[:1]))
    assert trimmed.totals.total_calories == 180
    assert trimmed.totals.total_fat == 12
    # edits do not trigger achievement checks
    assert notifier.calls == [1]


@pytest.mark.asyncio
async def test_update_of_someone_elses_meal_is_not_found(logger_parts):
    logger, _, _, _ = logger_parts
    meal = await logger.log_meal(MealDTO(user_id=1, date=NOW, food_items=BREAKFAST))
    with pytest.raises(NotFoundError):
        await logger.update_meal(meal.id, user_id=2, patch=MealPatch(name="mine now"))


@pytest.mark.asyncio
async def test_workout_is_stored_and_checked(logger_parts):
    logger, _, workouts, notifier = logger_parts

    workout = await logger.log_workout(
        WorkoutDTO(
            user_id=3,
            date=NOW,
            exercises=[ExerciseDTO("squat", sets=5, reps=5, weight=100)],
            total_duration=45,
            calories_burned=320,
            tags=["strength"],
        )
    )

    assert workout.calories_burned == 320
    assert workout.exercises[0].name == "squat"
    assert await workouts.count(3) == 1
    assert notifier.calls == [3]


@pytest.mark.asyncio
async def test_negative_workout_values_are_rejected(logger_parts):
    logger, _, workouts, _ = logger_parts
    with pytest.raises(ValidationError):
        await logger.log_workout(WorkoutDTO(user_id=1, date=NOW, calories_burned=-5))
    assert workouts.rows == []


@pytest.mark.asyncio
async def test_logging_works_without_notifier():
    logger = ActivityLogger(FakeMeals(), FakeWorkouts())
    meal = await logger.log_meal(MealDTO(user_id=1, date=NOW, food_items=BREAKFAST))
    assert meal.id == 1
