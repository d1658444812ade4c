from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from domain.entities import FoodItem, MealTotals


ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "moderately_active": 1.55,
    "very_active": 1.725,
    "extremely_active": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.2

# ~7700 kcal per kg of body fat
KCAL_PER_KG = 7700.0

KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_CARBS = 4.0
KCAL_PER_G_FAT = 9.0

TARGET_MACRO_SPLIT = {"protein": 30.0, "carbs": 40.0, "fat": 30.0}

GRADE_THRESHOLDS = (
    (90, "A+"),
    (80, "A"),
    (75, "B+"),
    (70, "B"),
    (65, "C+"),
    (60, "C"),
    (50, "D"),
)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float, ndigits: int = 0) -> float:
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def round_int(value: float) -> int:
    return int(round_half_up(value))


def bmr_mifflin(gender: str | None, age: int, height_cm: float, weight_kg: float) -> float:
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    gender = (gender or "").lower().strip()
    if gender == "male":
        return base + 5
    if gender == "female":
        return base - 161
    # midpoint of the male/female offsets
    return base - 78


def tdee_from_activity(bmr: float, activity_level: str | None) -> float:
    mult = ACTIVITY_MULTIPLIERS.get((activity_level or "").lower().strip(), DEFAULT_ACTIVITY_MULTIPLIER)
    return bmr * mult


def age_on(birth: date, today: date) -> int:
    """Completed years between ``birth`` and ``today``."""
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


def weight_change_kg(daily_deficit_kcal: float, days: int) -> float:
    return daily_deficit_kcal * days / KCAL_PER_KG


def meal_totals(items: Iterable[FoodItem]) -> MealTotals:
    totals = MealTotals()
    for it in items:
        totals.total_calories += float(it.calories or 0)
        totals.total_protein += float(it.protein or 0)
        totals.total_carbs += float(it.carbs or 0)
        totals.total_fat += float(it.fat or 0)
    return totals


@dataclass
class MacroSplit:
    protein: float
    carbs: float
    fat: float

    def deviation_from(self, target: dict[str, float]) -> float:
        """Mean absolute deviation (percentage points) from a target split."""
        return (
            abs(self.protein - target["protein"])
            + abs(self.carbs - target["carbs"])
            + abs(self.fat - target["fat"])
        ) / 3


def macro_split(protein_g: float, carbs_g: float, fat_g: float) -> MacroSplit | None:
    """Percent of macro calories from each macro; None when there are no macro calories."""
    p = protein_g * KCAL_PER_G_PROTEIN
    c = carbs_g * KCAL_PER_G_CARBS
    f = fat_g * KCAL_PER_G_FAT
    total = p + c + f
    if total <= 0:
        return None
    return MacroSplit(protein=p / total * 100, carbs=c / total * 100, fat=f / total * 100)


def grade_for_score(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def resolve_timezone(name: str | None, fallback: str = "UTC") -> ZoneInfo:
    for candidate in (name, fallback):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            continue
    return ZoneInfo("UTC")


def as_utc(moment: datetime) -> datetime:
    # naive timestamps are stored as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_day(moment: datetime, tz: ZoneInfo) -> date:
    return as_utc(moment).astimezone(tz).date()


def local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, datetime.min.time(), tzinfo=tz)


def workout_streak(days: Iterable[date], today: date) -> int:
    """Consecutive workout days ending today, or yesterday when today is still open."""
    unique = sorted(set(days), reverse=True)
    if not unique:
        return 0
    yesterday = today - timedelta(days=1)
    present = set(unique)
    if today not in present and yesterday not in present:
        return 0

    expected = today if today in present else yesterday
    streak = 0
    for day in unique:
        if day > expected and streak == 0:
            # future-dated entries never extend a streak
            continue
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak
