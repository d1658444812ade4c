from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List

from domain.entities import Achievement, FoodItem, MealType, Priority


@dataclass
class ExerciseDTO:
    name: str
    sets: int = 0
    reps: int = 0
    weight: float = 0.0


@dataclass
class WorkoutDTO:
    user_id: int
    date: datetime
    exercises: List[ExerciseDTO] = field(default_factory=list)
    total_duration: int = 0
    calories_burned: float = 0.0
    tags: List[str] = field(default_factory=list)
    name: str = "Workout"


@dataclass
class MealDTO:
    user_id: int
    date: datetime
    type: MealType = "snack"
    food_items: List[FoodItem] = field(default_factory=list)
    name: str = "Meal"
    notes: str = ""


@dataclass
class MealPatch:
    """Partial meal update; ``None`` leaves a field unchanged."""

    date: datetime | None = None
    type: MealType | None = None
    food_items: List[FoodItem] | None = None
    name: str | None = None
    notes: str | None = None


@dataclass
class HealthFactor:
    score: int
    max_score: int
    value: Any
    target: Any
    label: str


@dataclass
class HealthScore:
    total_score: int
    max_score: int
    percentage: int
    grade: str
    factors: Dict[str, HealthFactor]
    last_updated: datetime


@dataclass
class TrajectoryPrediction:
    current_weight: float
    goal_weight: float
    predicted_weight: float
    predicted_date: date
    daily_deficit: float
    days_remaining: int
    weekly_weight_change: float
    on_track: bool
    bmr: float
    tdee: float
    avg_daily_calories: float
    weight_difference: float


@dataclass
class Suggestion:
    type: str
    message: str
    priority: Priority


@dataclass
class SuggestionBundle:
    workout: List[Suggestion]
    nutrition: List[Suggestion]
    all: List[Suggestion]


@dataclass
class AchievementStats:
    total_achievements: int
    total_points: int
    current_streak: int
    achievements: List[Achievement]
