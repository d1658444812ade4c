from __future__ import annotations

from datetime import timedelta

import pytest

from domain.entities import AchievementType, User
from domain.use_cases import RULES, AchievementEvaluator, StreakCalculator
from domain.use_cases.check_achievements import ProgressMetrics
from tests.fakes import NOW, FakeAchievements, FakeMeals, FakeUsers, FakeWorkouts, fixed_clock


class World:
    def __init__(self, user: User | None = None) -> None:
        self.users = FakeUsers(user or User(id=1))
        self.workouts = FakeWorkouts()
        self.meals = FakeMeals()
        self.achievements = FakeAchievements()
        self.streaks = StreakCalculator(self.users, self.workouts, lookback=100, clock=fixed_clock())
        self.evaluator = AchievementEvaluator(
            self.users, self.workouts, self.meals, self.achievements, self.streaks
        )


def metrics(**overrides) -> ProgressMetrics:
    fields = dict(streak=0, workout_count=0, calories_burned=0, meal_count=0, goal_gap_kg=None)
    fields.update(overrides)
    return ProgressMetrics(**fields)


def test_every_achievement_type_has_one_rule():
    assert sorted(r.type.value for r in RULES) == sorted(t.value for t in AchievementType)


@pytest.mark.parametrize(
    "kind, points, below, at",
    [
        ("workout_streak_7", 10, {"streak": 6}, {"streak": 7}),
        ("workout_streak_30", 50, {"streak": 29}, {"streak": 30}),
        ("workout_streak_100", 200, {"streak": 99}, {"streak": 100}),
        ("workout_count_10", 10, {"workout_count": 9}, {"workout_count": 10}),
        ("workout_count_50", 50, {"workout_count": 49}, {"workout_count": 50}),
        ("workout_count_100", 100, {"workout_count": 99}, {"workout_count": 100}),
        ("calories_10k", 25, {"calories_burned": 9_999}, {"calories_burned": 10_000}),
        ("calories_50k", 100, {"calories_burned": 49_999}, {"calories_burned": 50_000}),
        ("meal_count_30", 15, {"meal_count": 29}, {"meal_count": 30}),
        ("meal_count_100", 50, {"meal_count": 99}, {"meal_count": 100}),
        ("goal_reached", 100, {"goal_gap_kg": 1.01}, {"goal_gap_kg": 1.0}),
    ],
)
def test_rule_thresholds_and_points(kind, points, below, at):
    rule = next(r for r in RULES if r.type == AchievementType(kind))

    assert rule.points == points
    assert rule.satisfied(metrics(**below)) is False
    assert rule.satisfied(metrics(**at)) is True


def test_goal_rule_needs_both_weights():
    rule = next(r for r in RULES if r.type == AchievementType.goal_reached)
    assert rule.satisfied(metrics(goal_gap_kg=None)) is False


@pytest.mark.asyncio
async def test_ten_consecutive_workouts_unlock_expected_badges():
    w = World()
    for n in range(10):
        w.workouts.add(1, NOW - timedelta(days=n), calories=1050)

    unlocked = await w.evaluator.check(1)

    assert unlocked == ["workout_streak_7", "workout_count_10", "calories_10k"]
    assert "workout_count_50" not in unlocked


@pytest.mark.asyncio
async def test_ten_scattered_workouts_do_not_unlock_streak():
    w = World()
    for n in range(10):
        w.workouts.add(1, NOW - timedelta(days=n * 2), calories=1050)

    assert await w.evaluator.check(1) == ["workout_count_10", "calories_10k"]


@pytest.mark.asyncio
async def test_check_is_idempotent():
    w = World()
    for n in range(10):
        w.workouts.add(1, NOW - timedelta(days=n), calories=1050)

    first = await w.evaluator.check(1)
    second = await w.evaluator.check(1)

    assert first
    assert second == []
    assert len(w.achievements.rows) == len(first)


@pytest.mark.asyncio
async def test_lost_insert_race_is_a_no_op():
    w = World()
    for n in range(10):
        w.workouts.add(1, NOW - timedelta(days=n), calories=1050)
    w.achievements.raced = {AchievementType.workout_count_10}

    unlocked = await w.evaluator.check(1)

    assert unlocked == ["workout_streak_7", "calories_10k"]


@pytest.mark.asyncio
async def test_goal_within_one_kg_is_reached():
    w = World(User(id=1, current_weight=70.8, goal_weight=70))
    assert await w.evaluator.check(1) == ["goal_reached"]


@pytest.mark.asyncio
async def test_goal_needs_both_weights():
    w = World(User(id=1, current_weight=70))
    assert await w.evaluator.check(1) == []


@pytest.mark.asyncio
async def test_meal_count_badges():
    w = World()
    for n in range(30):
        w.meals.add(1, NOW - timedelta(hours=n))
    assert await w.evaluator.check(1) == ["meal_count_30"]


@pytest.mark.asyncio
async def test_unknown_user_unlocks_nothing():
    w = World()
    assert await w.evaluator.check(42) == []


@pytest.mark.asyncio
async def test_storage_failure_aborts_the_whole_check():
    w = World()
    for n in range(10):
        w.workouts.add(1, NOW - timedelta(days=n), calories=1050)
    w.workouts.fail = True

    assert await w.evaluator.check(1) == []
    assert w.achievements.rows == {}


@pytest.mark.asyncio
async def test_stats_sum_points_and_report_streak():
    w = World()
    for n in range(10):
        w.workouts.add(1, NOW - timedelta(days=n), calories=1050)
    await w.evaluator.check(1)

    stats = await w.evaluator.stats(1)

    assert stats.total_achievements == 3
    assert stats.total_points == 10 + 10 + 25
    assert stats.current_streak == 10
    assert {a.type for a in await w.evaluator.list_unlocked(1)} == {
        AchievementType.workout_streak_7,
        AchievementType.workout_count_10,
        AchievementType.calories_10k,
    }
