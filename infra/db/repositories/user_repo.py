from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import select, insert, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities import User as UserEntity
from domain.errors import NotFoundError
from domain.ports import UserWriter
from infra.db.models import User
from infra.db.repositories.base import storage_errors


PROFILE_FIELDS = {
    "name",
    "email",
    "timezone",
    "height_cm",
    "starting_weight",
    "current_weight",
    "goal_weight",
    "activity_level",
    "daily_calorie_goal",
    "date_of_birth",
    "gender",
    "last_weight_checkin_at",
}


def to_entity(u: User) -> UserEntity:
    return UserEntity(
        id=u.id,
        name=u.name or "",
        email=u.email,
        timezone=u.timezone or "UTC",
        height_cm=u.height_cm,
        starting_weight=u.starting_weight,
        current_weight=u.current_weight,
        goal_weight=u.goal_weight,
        activity_level=u.activity_level,
        daily_calorie_goal=u.daily_calorie_goal,
        date_of_birth=u.date_of_birth,
        gender=u.gender,  # type: ignore[arg-type]
        last_weight_checkin_at=u.last_weight_checkin_at,
    )


class UserRepo(UserWriter):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @storage_errors
    async def get(self, user_id: int) -> UserEntity | None:
        res = await self.session.execute(select(User).where(User.id == user_id))
        row = res.scalar_one_or_none()
        return to_entity(row) if row else None

    @storage_errors
    async def create(
        self,
        *,
        name: str = "",
        email: str | None = None,
        timezone: str = "UTC",
        height_cm: float | None = None,
        current_weight: float | None = None,
        goal_weight: float | None = None,
        starting_weight: float | None = None,
        activity_level: str | None = None,
        daily_calorie_goal: float | None = None,
        date_of_birth: date | None = None,
        gender: str | None = None,
    ) -> UserEntity:
        res = await self.session.execute(
            insert(User)
            .values(
                name=name,
                email=email,
                timezone=timezone,
                height_cm=height_cm,
                current_weight=current_weight,
                goal_weight=goal_weight,
                starting_weight=starting_weight,
                activity_level=activity_level,
                daily_calorie_goal=daily_calorie_goal,
                date_of_birth=date_of_birth,
                gender=gender,
            )
            .returning(User.id)
        )
        user_id = int(res.scalar_one())
        await self.session.commit()
        created = await self.get(user_id)
        assert created is not None
        return created

    @storage_errors
    async def update(self, user_id: int, *, autocommit: bool = True, **patch: Any) -> UserEntity:
        values = {k: v for k, v in patch.items() if k in PROFILE_FIELDS}
        if values:
            res = await self.session.execute(
                update(User).where(User.id == user_id).values(**values).returning(User.id)
            )
            if res.first() is None:
                raise NotFoundError("User not found")
        if autocommit:
            await self.session.commit()
        else:
            await self.session.flush()
        # the ORM identity map may hold a stale copy of the row
        res = await self.session.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        row = res.scalar_one_or_none()
        if row is None:
            raise NotFoundError("User not found")
        return to_entity(row)
