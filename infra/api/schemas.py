from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.calculations import round_half_up, round_int
from domain.dtos import (
    AchievementStats,
    HealthFactor,
    HealthScore,
    Suggestion,
    SuggestionBundle,
    TrajectoryPrediction,
)
from domain.entities import Achievement
from infra.api.badges import suggestion_icon


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class APIResponse(BaseModel):
    ok: bool = True
    data: dict | None = None
    error: dict | None = None


# macro breakdowns are published under the JSON contract key "fats"
MACRO_KEYS = {"fat": "fats"}


def _macro_keys(v: Any) -> Any:
    if isinstance(v, dict):
        return {MACRO_KEYS.get(k, k): x for k, x in v.items()}
    return v


class HealthFactorOut(CamelModel):
    score: int
    max_score: int
    value: Any
    target: Any
    label: str

    @classmethod
    def from_domain(cls, f: HealthFactor) -> "HealthFactorOut":
        return cls(
            score=f.score,
            max_score=f.max_score,
            value=_macro_keys(f.value),
            target=_macro_keys(f.target),
            label=f.label,
        )


class HealthScoreOut(CamelModel):
    total_score: int = Field(..., ge=0, le=100)
    max_score: int
    percentage: int
    grade: Literal["A+", "A", "B+", "B", "C+", "C", "D", "F"]
    factors: dict[str, HealthFactorOut]
    last_updated: datetime

    @classmethod
    def from_domain(cls, s: HealthScore) -> "HealthScoreOut":
        return cls(
            total_score=s.total_score,
            max_score=s.max_score,
            percentage=s.percentage,
            grade=s.grade,  # type: ignore[arg-type]
            factors={to_camel(k): HealthFactorOut.from_domain(v) for k, v in s.factors.items()},
            last_updated=s.last_updated,
        )


class TrajectoryOut(CamelModel):
    # weights to 0.1 kg, energy figures to whole kcal
    current_weight: float
    goal_weight: float
    predicted_weight: float
    predicted_date: date
    daily_deficit: int
    days_remaining: int
    weekly_weight_change: float
    on_track: bool
    bmr: int
    tdee: int
    avg_daily_calories: int
    weight_difference: float

    @classmethod
    def from_domain(cls, p: TrajectoryPrediction) -> "TrajectoryOut":
        return cls(
            current_weight=p.current_weight,
            goal_weight=p.goal_weight,
            predicted_weight=round_half_up(p.predicted_weight, 1),
            predicted_date=p.predicted_date,
            daily_deficit=round_int(p.daily_deficit),
            days_remaining=p.days_remaining,
            weekly_weight_change=round_half_up(p.weekly_weight_change, 1),
            on_track=p.on_track,
            bmr=round_int(p.bmr),
            tdee=round_int(p.tdee),
            avg_daily_calories=round_int(p.avg_daily_calories),
            weight_difference=round_half_up(p.weight_difference, 1),
        )


class SuggestionOut(CamelModel):
    type: str
    message: str
    priority: Literal["high", "medium", "low"]
    icon: str

    @classmethod
    def from_domain(cls, s: Suggestion) -> "SuggestionOut":
        return cls(type=s.type, message=s.message, priority=s.priority, icon=suggestion_icon(s.type))


class SuggestionsOut(CamelModel):
    workout: list[SuggestionOut]
    nutrition: list[SuggestionOut]
    all: list[SuggestionOut]

    @classmethod
    def from_domain(cls, b: SuggestionBundle) -> "SuggestionsOut":
        return cls(
            workout=[SuggestionOut.from_domain(s) for s in b.workout],
            nutrition=[SuggestionOut.from_domain(s) for s in b.nutrition],
            all=[SuggestionOut.from_domain(s) for s in b.all],
        )


class AchievementOut(CamelModel):
    id: int
    type: str
    title: str
    description: str
    icon: str
    points: int
    unlocked_at: datetime

    @classmethod
    def from_domain(cls, a: Achievement) -> "AchievementOut":
        return cls(
            id=a.id,
            type=a.type.value,
            title=a.title,
            description=a.description,
            icon=a.icon,
            points=a.points,
            unlocked_at=a.unlocked_at,
        )


class AchievementStatsOut(CamelModel):
    total_achievements: int
    total_points: int
    current_streak: int
    achievements: list[AchievementOut]

    @classmethod
    def from_domain(cls, s: AchievementStats) -> "AchievementStatsOut":
        return cls(
            total_achievements=s.total_achievements,
            total_points=s.total_points,
            current_streak=s.current_streak,
            achievements=[AchievementOut.from_domain(a) for a in s.achievements],
        )
