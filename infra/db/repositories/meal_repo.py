from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.calculations import as_utc
from domain.dtos import MealDTO, MealPatch
from domain.entities import FoodItem, Meal as MealEntity, MealTotals
from domain.errors import NotFoundError
from domain.ports import MealWriter
from infra.db.models import Meal, MealTypeEnum
from infra.db.repositories.base import storage_errors


def _food_item(raw: dict[str, Any]) -> FoodItem:
    return FoodItem(
        name=str(raw.get("name", "")),
        amount=float(raw.get("amount") or 0.0),
        calories=float(raw.get("calories") or 0.0),
        protein=float(raw.get("protein") or 0.0),
        carbs=float(raw.get("carbs") or 0.0),
        fat=float(raw.get("fat") or 0.0),
    )


def to_entity(m: Meal) -> MealEntity:
    return MealEntity(
        id=m.id,
        user_id=m.user_id,
        date=as_utc(m.date),
        type=m.type.value,  # type: ignore[arg-type]
        name=m.name,
        food_items=[_food_item(i) for i in (m.food_items or [])],
        totals=MealTotals(
            total_calories=m.total_calories or 0.0,
            total_protein=m.total_protein or 0.0,
            total_carbs=m.total_carbs or 0.0,
            total_fat=m.total_fat or 0.0,
        ),
        notes=m.notes or "",
    )


def _totals_values(totals: MealTotals) -> dict[str, float]:
    return dict(
        total_calories=totals.total_calories,
        total_protein=totals.total_protein,
        total_carbs=totals.total_carbs,
        total_fat=totals.total_fat,
    )


class MealRepo(MealWriter):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @storage_errors
    async def create(self, dto: MealDTO, totals: MealTotals, *, autocommit: bool = True) -> MealEntity:
        res = await self.session.execute(
            insert(Meal)
            .values(
                user_id=dto.user_id,
                name=dto.name,
                date=as_utc(dto.date),
                type=MealTypeEnum(dto.type),
                food_items=[asdict(i) for i in dto.food_items],
                notes=dto.notes,
                **_totals_values(totals),
            )
            .returning(Meal.id)
        )
        meal_id = int(res.scalar_one())
        if autocommit:
            await self.session.commit()
        return MealEntity(
            id=meal_id,
            user_id=dto.user_id,
            date=as_utc(dto.date),
            type=dto.type,
            name=dto.name,
            food_items=list(dto.food_items),
            totals=totals,
            notes=dto.notes,
        )

    @storage_errors
    async def get(self, meal_id: int, *, user_id: int) -> MealEntity | None:
        res = await self.session.execute(
            select(Meal)
            .where(Meal.id == meal_id, Meal.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        m = res.scalar_one_or_none()
        return to_entity(m) if m else None

    @storage_errors
    async def update(
        self,
        meal_id: int,
        *,
        user_id: int,
        patch: MealPatch,
        totals: MealTotals | None,
        autocommit: bool = True,
    ) -> MealEntity:
        values: dict[str, Any] = {}
        if patch.date is not None:
            values["date"] = as_utc(patch.date)
        if patch.type is not None:
            values["type"] = MealTypeEnum(patch.type)
        if patch.name is not None:
            values["name"] = patch.name
        if patch.notes is not None:
            values["notes"] = patch.notes
        if patch.food_items is not None:
            # items and totals always change together
            if totals is None:
                raise ValueError("totals are required when food items change")
            values["food_items"] = [asdict(i) for i in patch.food_items]
            values.update(_totals_values(totals))
        if values:
            await self.session.execute(
                update(Meal).where(Meal.id == meal_id, Meal.user_id == user_id).values(**values)
            )
        if autocommit:
            await self.session.commit()
        meal = await self.get(meal_id, user_id=user_id)
        if meal is None:
            raise NotFoundError("Meal not found")
        return meal

    @storage_errors
    async def list_recent(self, user_id: int, *, limit: int) -> list[MealEntity]:
        stmt = (
            select(Meal)
            .where(Meal.user_id == user_id)
            .order_by(Meal.date.desc(), Meal.id.desc())
            .limit(limit)
        )
        res = await self.session.execute(stmt)
        return [to_entity(m) for m in res.scalars().all()]

    @storage_errors
    async def list_since(self, user_id: int, *, since: datetime) -> list[MealEntity]:
        stmt = (
            select(Meal)
            .where(Meal.user_id == user_id, Meal.date >= as_utc(since))
            .order_by(Meal.date.asc())
        )
        res = await self.session.execute(stmt)
        return [to_entity(m) for m in res.scalars().all()]

    @storage_errors
    async def count(self, user_id: int) -> int:
        res = await self.session.execute(select(func.count(Meal.id)).where(Meal.user_id == user_id))
        return int(res.scalar_one())
