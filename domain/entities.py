from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Literal


MealType = Literal["breakfast", "lunch", "dinner", "snack"]
Gender = Literal["male", "female", "other"]
Priority = Literal["high", "medium", "low"]


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    lightly_active = "lightly_active"
    moderately_active = "moderately_active"
    very_active = "very_active"
    extremely_active = "extremely_active"


class AchievementType(str, Enum):
    workout_streak_7 = "workout_streak_7"
    workout_streak_30 = "workout_streak_30"
    workout_streak_100 = "workout_streak_100"
    workout_count_10 = "workout_count_10"
    workout_count_50 = "workout_count_50"
    workout_count_100 = "workout_count_100"
    calories_10k = "calories_10k"
    calories_50k = "calories_50k"
    meal_count_30 = "meal_count_30"
    meal_count_100 = "meal_count_100"
    goal_reached = "goal_reached"


@dataclass
class User:
    id: int
    name: str = ""
    email: str | None = None
    timezone: str = "UTC"
    height_cm: float | None = None
    starting_weight: float | None = None
    current_weight: float | None = None
    goal_weight: float | None = None
    activity_level: str | None = None
    daily_calorie_goal: float | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    last_weight_checkin_at: datetime | None = None


@dataclass
class Exercise:
    name: str
    sets: int = 0
    reps: int = 0
    weight: float = 0.0


@dataclass
class Workout:
    id: int
    user_id: int
    date: datetime
    exercises: List[Exercise] = field(default_factory=list)
    total_duration: int = 0
    calories_burned: float = 0.0
    tags: List[str] = field(default_factory=list)
    name: str = "Workout"


@dataclass
class FoodItem:
    name: str
    amount: float = 0.0
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


@dataclass
class MealTotals:
    total_calories: float = 0.0
    total_protein: float = 0.0
    total_carbs: float = 0.0
    total_fat: float = 0.0


@dataclass
class Meal:
    id: int
    user_id: int
    date: datetime
    type: MealType = "snack"
    name: str = "Meal"
    food_items: List[FoodItem] = field(default_factory=list)
    totals: MealTotals = field(default_factory=MealTotals)
    notes: str = ""


@dataclass
class Achievement:
    id: int
    user_id: int
    type: AchievementType
    title: str
    description: str
    icon: str
    points: int
    unlocked_at: datetime


@dataclass
class WeightEntry:
    id: int
    user_id: int
    weight: float
    recorded_at: datetime
