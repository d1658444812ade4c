from __future__ import annotations

from datetime import timedelta

import pytest

from domain.entities import User
from domain.errors import NotFoundError
from domain.use_cases import HealthScoreService
from infra.api.schemas import HealthScoreOut
from tests.fakes import NOW, FakeMeals, FakeUsers, FakeWorkouts, fixed_clock


def service(user: User, workouts: FakeWorkouts | None = None, meals: FakeMeals | None = None):
    return HealthScoreService(
        FakeUsers(user),
        workouts or FakeWorkouts(),
        meals or FakeMeals(),
        window_days=30,
        min_goal_span_kg=10,
        clock=fixed_clock(),
    )


@pytest.mark.asyncio
async def test_empty_profile_scores_zero_with_grade_f():
    score = await service(User(id=1)).compute(1)

    assert score.total_score == 0
    assert score.percentage == 0
    assert score.grade == "F"
    assert score.max_score == 100
    assert score.factors["calorie_adherence"].label == "Calorie Goal Adherence (No goal set)"
    assert score.factors["goal_progress"].label == "Weight Goal Progress (No goal set)"
    assert score.factors["nutrition_balance"].label == "Nutrition Balance (No data)"
    assert score.last_updated == NOW


@pytest.mark.asyncio
async def test_ideal_month_scores_full_marks():
    workouts, meals = FakeWorkouts(), FakeMeals()
    for n in range(30):
        day = NOW - timedelta(days=n)
        workouts.add(1, day)
        meals.add(1, day, calories=2000, protein=150, carbs=200, fat=200 / 3)
    user = User(id=1, daily_calorie_goal=2000, current_weight=70, goal_weight=70, starting_weight=80)

    score = await service(user, workouts, meals).compute(1)

    assert {k: f.score for k, f in score.factors.items()} == {
        "workout_frequency": 30,
        "calorie_adherence": 25,
        "goal_progress": 20,
        "consistency": 15,
        "nutrition_balance": 10,
    }
    assert score.total_score == 100
    assert score.grade == "A+"
    assert score.factors["nutrition_balance"].value == {"protein": 30, "carbs": 40, "fat": 30}


@pytest.mark.asyncio
async def test_output_factors_use_camel_case_keys():
    meals = FakeMeals()
    meals.add(1, NOW, calories=2000, protein=150, carbs=200, fat=200 / 3)

    out = HealthScoreOut.from_domain(await service(User(id=1), meals=meals).compute(1)).dump()

    assert list(out["factors"]) == [
        "workoutFrequency",
        "calorieAdherence",
        "goalProgress",
        "consistency",
        "nutritionBalance",
    ]
    nutrition = out["factors"]["nutritionBalance"]
    assert nutrition["value"] == {"protein": 30, "carbs": 40, "fats": 30}
    assert nutrition["target"] == {"protein": 30, "carbs": 40, "fats": 30}
    assert nutrition["maxScore"] == 10


@pytest.mark.asyncio
async def test_calorie_adherence_rounds_half_up():
    meals = FakeMeals()
    meals.add(1, NOW, calories=1500)
    meals.add(1, NOW - timedelta(hours=1), calories=1000)
    score = await service(User(id=1, daily_calorie_goal=2000), meals=meals).compute(1)

    factor = score.factors["calorie_adherence"]
    # 2500 kcal on one day is 25% over: 0.5 * 25 = 12.5
    assert factor.score == 13
    assert factor.value == 2500
    assert factor.target == 2000


@pytest.mark.parametrize(
    "starting, current, goal, expected",
    [
        (90, 80, 70, 10),
        (None, 80, 70, 0),
        (72, 71, 70, 18),
        (70, 75, 70, 10),
        (90, 100, 70, 0),
    ],
)
@pytest.mark.asyncio
async def test_goal_progress(starting, current, goal, expected):
    user = User(id=1, starting_weight=starting, current_weight=current, goal_weight=goal)
    score = await service(user).compute(1)
    assert score.factors["goal_progress"].score == expected


@pytest.mark.asyncio
async def test_old_activity_is_outside_the_window():
    workouts, meals = FakeWorkouts(), FakeMeals()
    workouts.add(1, NOW - timedelta(days=45))
    meals.add(1, NOW - timedelta(days=45), calories=2000, protein=100)

    score = await service(User(id=1), workouts, meals).compute(1)

    assert score.factors["workout_frequency"].value == 0
    assert score.factors["consistency"].value == 0


@pytest.mark.asyncio
async def test_scores_stay_within_bounds_for_extreme_inputs():
    workouts, meals = FakeWorkouts(), FakeMeals()
    for n in range(31):
        workouts.add(1, NOW - timedelta(days=n))
        meals.add(1, NOW - timedelta(days=n), calories=50_000, fat=5000)
    user = User(id=1, daily_calorie_goal=1200, current_weight=150, goal_weight=60, starting_weight=70)

    score = await service(user, workouts, meals).compute(1)

    assert 0 <= score.total_score <= 100
    assert score.factors["consistency"].score == 15
    assert score.factors["calorie_adherence"].score == 0
    assert score.factors["goal_progress"].score == 0
    for factor in score.factors.values():
        assert 0 <= factor.score <= factor.max_score


@pytest.mark.asyncio
async def test_missing_user_is_not_found():
    with pytest.raises(NotFoundError):
        await service(User(id=1)).compute(2)
