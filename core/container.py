from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from domain.ports import AchievementNotifier
from domain.use_cases import (
    AchievementEvaluator,
    ActivityLogger,
    HealthScoreService,
    StreakCalculator,
    SuggestionService,
    TrajectoryPredictor,
)
from infra.db.repositories.achievement_repo import AchievementRepo
from infra.db.repositories.meal_repo import MealRepo
from infra.db.repositories.user_repo import UserRepo
from infra.db.repositories.weight_repo import WeightRepo
from infra.db.repositories.workout_repo import WorkoutRepo
from infra.db.session import SqlUnitOfWork


@dataclass
class Container:
    """Repositories and services bound to one session."""

    uow: SqlUnitOfWork
    users: UserRepo
    workouts: WorkoutRepo
    meals: MealRepo
    achievements: AchievementRepo
    weights: WeightRepo
    streaks: StreakCalculator
    evaluator: AchievementEvaluator
    health: HealthScoreService
    trajectory: TrajectoryPredictor
    suggestions: SuggestionService
    activity: ActivityLogger
    notifier: AchievementNotifier | None = None


def build_container(session: AsyncSession, *, notifier: AchievementNotifier | None = None) -> Container:
    users = UserRepo(session)
    workouts = WorkoutRepo(session)
    meals = MealRepo(session)
    achievements = AchievementRepo(session)
    streaks = StreakCalculator(users, workouts, lookback=settings.streak_lookback)
    return Container(
        uow=SqlUnitOfWork(session),
        users=users,
        workouts=workouts,
        meals=meals,
        achievements=achievements,
        weights=WeightRepo(session),
        streaks=streaks,
        evaluator=AchievementEvaluator(users, workouts, meals, achievements, streaks),
        health=HealthScoreService(
            users,
            workouts,
            meals,
            window_days=settings.health_window_days,
            min_goal_span_kg=settings.goal_progress_min_span_kg,
        ),
        trajectory=TrajectoryPredictor(users, meals, window_days=settings.trajectory_window_days),
        suggestions=SuggestionService(users, workouts, meals),
        activity=ActivityLogger(meals, workouts, notifier),
        notifier=notifier,
    )
