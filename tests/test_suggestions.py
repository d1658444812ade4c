from __future__ import annotations

from datetime import timedelta

import pytest

from domain.dtos import Suggestion
from domain.entities import User
from domain.use_cases import SuggestionService, sort_by_priority
from infra.api.schemas import SuggestionsOut
from tests.fakes import NOW, FakeMeals, FakeUsers, FakeWorkouts, fixed_clock


def build(user: User):
    workouts, meals = FakeWorkouts(), FakeMeals()
    svc = SuggestionService(FakeUsers(user), workouts, meals, clock=fixed_clock())
    return svc, workouts, meals


def types(suggestions: list[Suggestion]) -> list[str]:
    return [s.type for s in suggestions]


def test_sort_by_priority_is_stable():
    items = [
        Suggestion("a", "", "low"),
        Suggestion("b", "", "high"),
        Suggestion("c", "", "medium"),
        Suggestion("d", "", "high"),
        Suggestion("e", "", "low"),
    ]
    assert types(sort_by_priority(items)) == ["b", "d", "c", "a", "e"]


@pytest.mark.asyncio
async def test_sedentary_user_without_workouts():
    svc, _, _ = build(User(id=1, activity_level="sedentary"))
    assert types(await svc.workout_suggestions(1)) == ["workout_frequency", "start_working_out"]


@pytest.mark.asyncio
async def test_busy_week_suggests_rest():
    svc, workouts, _ = build(User(id=1))
    for n, tag in enumerate(["run", "lift", "swim", "run", "lift"]):
        workouts.add(1, NOW - timedelta(days=n, hours=1), tags=[tag])

    assert types(await svc.workout_suggestions(1)) == ["rest_day"]


@pytest.mark.asyncio
async def test_rest_day_needs_a_workout_today():
    svc, workouts, _ = build(User(id=1))
    for n, tag in enumerate(["run", "lift", "swim", "run", "lift"]):
        workouts.add(1, NOW - timedelta(days=n + 1), tags=[tag])

    assert "rest_day" not in types(await svc.workout_suggestions(1))


@pytest.mark.asyncio
async def test_same_tag_everywhere_asks_for_variety():
    svc, workouts, _ = build(User(id=1))
    for n in range(3):
        workouts.add(1, NOW - timedelta(days=n * 4), tags=["run"])

    assert types(await svc.workout_suggestions(1)) == ["workout_frequency", "workout_variety"]


@pytest.mark.parametrize(
    "current, goal, expected",
    [(90, 80, "weight_loss"), (60, 70, "weight_gain")],
)
@pytest.mark.asyncio
async def test_goal_focus(current, goal, expected):
    svc, _, _ = build(User(id=1, current_weight=current, goal_weight=goal))
    assert expected in types(await svc.workout_suggestions(1))


@pytest.mark.asyncio
async def test_small_goal_gap_has_no_focus():
    svc, _, _ = build(User(id=1, current_weight=72, goal_weight=70))
    found = types(await svc.workout_suggestions(1))
    assert "weight_loss" not in found
    assert "weight_gain" not in found


@pytest.mark.asyncio
async def test_no_meals_means_start_tracking():
    svc, _, _ = build(User(id=1, daily_calorie_goal=2000))
    assert types(await svc.nutrition_suggestions(1)) == ["start_tracking"]


@pytest.mark.asyncio
async def test_calorie_excess_message():
    svc, _, meals = build(User(id=1, daily_calorie_goal=2000))
    for n in range(3):
        meals.add(1, NOW - timedelta(hours=n), calories=2300)

    found = await svc.nutrition_suggestions(1)

    assert types(found) == ["calorie_excess"]
    assert found[0].message == (
        "You're consuming 15% more calories than your goal. Consider reducing portion sizes"
    )
    assert found[0].priority == "high"


@pytest.mark.asyncio
async def test_low_protein_and_sparse_meals():
    svc, _, meals = build(User(id=1, daily_calorie_goal=2000, current_weight=80))
    for n in range(7):
        meals.add(1, NOW - timedelta(days=n), calories=1500, protein=40)

    found = await svc.nutrition_suggestions(1)

    assert types(found) == ["calorie_deficit", "protein_low", "meal_frequency"]
    assert found[0].message.startswith("You're consuming 25% fewer calories")
    assert found[1].message == "Consider increasing protein intake. Aim for 80g per day"


@pytest.mark.asyncio
async def test_on_track_calories():
    svc, _, meals = build(User(id=1, daily_calorie_goal=2000))
    for n in range(3):
        meals.add(1, NOW - timedelta(hours=n), calories=2100)
    assert types(await svc.nutrition_suggestions(1)) == ["calorie_on_track"]


@pytest.mark.asyncio
async def test_failing_category_degrades_to_empty():
    svc, workouts, _ = build(User(id=1, activity_level="sedentary"))
    workouts.fail = True

    bundle = await svc.all(1)

    assert bundle.workout == []
    assert types(bundle.nutrition) == ["start_tracking"]


@pytest.mark.asyncio
async def test_bundle_merges_by_priority_with_icons():
    svc, workouts, meals = build(User(id=1, activity_level="sedentary", daily_calorie_goal=2000))
    for n in range(3):
        meals.add(1, NOW - timedelta(hours=n), calories=2100)

    bundle = await svc.all(1)

    assert types(bundle.all) == ["workout_frequency", "start_working_out", "calorie_on_track"]
    out = SuggestionsOut.from_domain(bundle).dump()
    assert [s["icon"] for s in out["all"]] == ["💪", "🚶", "✅"]


@pytest.mark.asyncio
async def test_unknown_user_gets_nothing():
    svc, _, _ = build(User(id=1))
    bundle = await svc.all(99)
    assert bundle.all == []
