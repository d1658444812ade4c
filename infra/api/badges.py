from __future__ import annotations

from dataclasses import dataclass

from domain.entities import AchievementType


@dataclass(frozen=True)
class Badge:
    title: str
    description: str
    icon: str


BADGES: dict[AchievementType, Badge] = {
    AchievementType.workout_streak_7: Badge("7 Day Streak", "Complete 7 days of workouts in a row", "🔥"),
    AchievementType.workout_streak_30: Badge("30 Day Streak", "Complete 30 days of workouts in a row", "🔥"),
    AchievementType.workout_streak_100: Badge("100 Day Streak", "Complete 100 days of workouts in a row", "🔥"),
    AchievementType.workout_count_10: Badge("10 Workouts", "Complete 10 workouts", "💪"),
    AchievementType.workout_count_50: Badge("50 Workouts", "Complete 50 workouts", "💪"),
    AchievementType.workout_count_100: Badge("100 Workouts", "Complete 100 workouts", "💪"),
    AchievementType.calories_10k: Badge("10K Calories", "Burn 10,000 calories", "🔥"),
    AchievementType.calories_50k: Badge("50K Calories", "Burn 50,000 calories", "🔥"),
    AchievementType.meal_count_30: Badge("30 Meals Logged", "Log 30 meals", "🍎"),
    AchievementType.meal_count_100: Badge("100 Meals Logged", "Log 100 meals", "🍎"),
    AchievementType.goal_reached: Badge("Goal Achieved", "Reach your weight goal", "🎯"),
}

DEFAULT_BADGE_ICON = "🏆"

SUGGESTION_ICONS = {
    "workout_frequency": "💪",
    "workout_variety": "🔄",
    "weight_loss": "🏃",
    "weight_gain": "💪",
    "start_working_out": "🚶",
    "rest_day": "😴",
    "start_tracking": "🍎",
    "calorie_excess": "⚠️",
    "calorie_deficit": "📉",
    "calorie_on_track": "✅",
    "protein_low": "🥩",
    "meal_frequency": "🍽️",
}


def badge_for(achievement_type: AchievementType | str) -> Badge:
    try:
        return BADGES[AchievementType(achievement_type)]
    except (KeyError, ValueError):
        return Badge(str(getattr(achievement_type, "value", achievement_type)), "", DEFAULT_BADGE_ICON)


def suggestion_icon(suggestion_type: str) -> str:
    return SUGGESTION_ICONS.get(suggestion_type, "💡")
