from __future__ import annotations

from datetime import datetime, date
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    String,
    Text,
    Integer,
    Float,
    DateTime,
    Date,
    ForeignKey,
    UniqueConstraint,
    MetaData,
    Enum as SAEnum,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


metadata_obj = MetaData(naming_convention=NAMING_CONVENTION)

# SQLite only autoincrements INTEGER PRIMARY KEY
PrimaryKey = BigInteger().with_variant(Integer, "sqlite")
JSONDoc = JSON().with_variant(JSONB, "postgresql")


class Base(DeclarativeBase):
    metadata = metadata_obj


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class User(Base, TimestampMixin):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("height_cm IS NULL OR height_cm > 0", name="height_positive"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), default="")
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), default="UTC")
    height_cm: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    starting_weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    current_weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    goal_weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    activity_level: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    daily_calorie_goal: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    last_weight_checkin_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    workouts: Mapped[list["Workout"]] = relationship(back_populates="user", passive_deletes=True)
    meals: Mapped[list["Meal"]] = relationship(back_populates="user", passive_deletes=True)


class Workout(Base, TimestampMixin):
    __tablename__ = "workouts"
    __table_args__ = (
        CheckConstraint("calories_burned >= 0 AND total_duration >= 0", name="workouts_nonneg"),
        Index("ix_workouts_user_date", "user_id", "date"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(128), default="Workout")
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    exercises: Mapped[list] = mapped_column(JSONDoc, default=list)  # [{name, sets, reps, weight}]
    total_duration: Mapped[int] = mapped_column(Integer, default=0)  # minutes
    calories_burned: Mapped[float] = mapped_column(Float, default=0.0)
    tags: Mapped[list] = mapped_column(JSONDoc, default=list)

    user: Mapped[User] = relationship(back_populates="workouts")


class MealTypeEnum(PyEnum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class Meal(Base, TimestampMixin):
    __tablename__ = "meals"
    __table_args__ = (
        CheckConstraint(
            "total_calories >= 0 AND total_protein >= 0 AND total_carbs >= 0 AND total_fat >= 0",
            name="meals_totals_nonneg",
        ),
        Index("ix_meals_user_date", "user_id", "date"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(128), default="Meal")
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    type: Mapped[MealTypeEnum] = mapped_column(SAEnum(MealTypeEnum, name="meal_type"))
    food_items: Mapped[list] = mapped_column(JSONDoc, default=list)  # [{name, amount, calories, protein, carbs, fat}]
    # denormalized sums over food_items, written together with them
    total_calories: Mapped[float] = mapped_column(Float, default=0.0)
    total_protein: Mapped[float] = mapped_column(Float, default=0.0)
    total_carbs: Mapped[float] = mapped_column(Float, default=0.0)
    total_fat: Mapped[float] = mapped_column(Float, default=0.0)
    notes: Mapped[str] = mapped_column(Text, default="")

    user: Mapped[User] = relationship(back_populates="meals")


class Achievement(Base):
    __tablename__ = "achievements"
    __table_args__ = (
        # one unlock per (user, type); concurrent checks rely on this
        UniqueConstraint("user_id", "type", name="uq_achievements_user_id_type"),
        CheckConstraint("points >= 0", name="points_nonneg"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(32))
    title: Mapped[str] = mapped_column(String(128))
    description: Mapped[str] = mapped_column(Text)
    icon: Mapped[str] = mapped_column(String(16))
    points: Mapped[int] = mapped_column(Integer, default=0)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class WeightEntry(Base):
    __tablename__ = "weight_entries"
    __table_args__ = (
        CheckConstraint("weight > 0", name="positive"),
        Index("ix_weight_entries_user_recorded", "user_id", "recorded_at"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    weight: Mapped[float] = mapped_column(Float)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
