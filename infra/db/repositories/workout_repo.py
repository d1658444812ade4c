from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.calculations import as_utc
from domain.dtos import WorkoutDTO
from domain.entities import Exercise, Workout as WorkoutEntity
from domain.ports import WorkoutWriter
from infra.db.models import Workout
from infra.db.repositories.base import storage_errors


def _exercise(raw: dict[str, Any]) -> Exercise:
    return Exercise(
        name=str(raw.get("name", "")),
        sets=int(raw.get("sets") or 0),
        reps=int(raw.get("reps") or 0),
        weight=float(raw.get("weight") or 0.0),
    )


def to_entity(w: Workout) -> WorkoutEntity:
    return WorkoutEntity(
        id=w.id,
        user_id=w.user_id,
        date=as_utc(w.date),
        exercises=[_exercise(e) for e in (w.exercises or [])],
        total_duration=w.total_duration or 0,
        calories_burned=w.calories_burned or 0.0,
        tags=list(w.tags or []),
        name=w.name,
    )


class WorkoutRepo(WorkoutWriter):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @storage_errors
    async def create(self, dto: WorkoutDTO, *, autocommit: bool = True) -> WorkoutEntity:
        res = await self.session.execute(
            insert(Workout)
            .values(
                user_id=dto.user_id,
                name=dto.name,
                date=as_utc(dto.date),
                exercises=[asdict(e) for e in dto.exercises],
                total_duration=dto.total_duration,
                calories_burned=float(dto.calories_burned),
                tags=list(dto.tags),
            )
            .returning(Workout.id)
        )
        workout_id = int(res.scalar_one())
        if autocommit:
            await self.session.commit()
        return WorkoutEntity(
            id=workout_id,
            user_id=dto.user_id,
            date=as_utc(dto.date),
            exercises=[Exercise(**asdict(e)) for e in dto.exercises],
            total_duration=dto.total_duration,
            calories_burned=float(dto.calories_burned),
            tags=list(dto.tags),
            name=dto.name,
        )

    @storage_errors
    async def list_recent(self, user_id: int, *, limit: int) -> list[WorkoutEntity]:
        stmt = (
            select(Workout)
            .where(Workout.user_id == user_id)
            .order_by(Workout.date.desc(), Workout.id.desc())
            .limit(limit)
        )
        res = await self.session.execute(stmt)
        return [to_entity(w) for w in res.scalars().all()]

    @storage_errors
    async def list_since(self, user_id: int, *, since: datetime) -> list[WorkoutEntity]:
        stmt = (
            select(Workout)
            .where(Workout.user_id == user_id, Workout.date >= as_utc(since))
            .order_by(Workout.date.asc())
        )
        res = await self.session.execute(stmt)
        return [to_entity(w) for w in res.scalars().all()]

    @storage_errors
    async def count(self, user_id: int) -> int:
        res = await self.session.execute(select(func.count(Workout.id)).where(Workout.user_id == user_id))
        return int(res.scalar_one())

    @storage_errors
    async def sum_calories_burned(self, user_id: int) -> float:
        res = await self.session.execute(
            select(func.coalesce(func.sum(Workout.calories_burned), 0.0)).where(Workout.user_id == user_id)
        )
        return float(res.scalar_one())
