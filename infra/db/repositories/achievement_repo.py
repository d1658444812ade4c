from __future__ import annotations

from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.calculations import as_utc, utc_now
from domain.entities import Achievement as AchievementEntity, AchievementType
from domain.errors import AchievementAlreadyUnlocked
from domain.ports import AchievementStore
from infra.api.badges import badge_for
from infra.db.models import Achievement
from infra.db.repositories.base import storage_errors


def to_entity(a: Achievement) -> AchievementEntity:
    return AchievementEntity(
        id=a.id,
        user_id=a.user_id,
        type=AchievementType(a.type),
        title=a.title,
        description=a.description,
        icon=a.icon,
        points=a.points,
        unlocked_at=as_utc(a.unlocked_at),
    )


class AchievementRepo(AchievementStore):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @storage_errors
    async def exists(self, user_id: int, achievement_type: AchievementType) -> bool:
        res = await self.session.execute(
            select(Achievement.id)
            .where(Achievement.user_id == user_id, Achievement.type == AchievementType(achievement_type).value)
            .limit(1)
        )
        return res.first() is not None

    @storage_errors
    async def create(self, user_id: int, achievement_type: AchievementType, *, points: int) -> AchievementEntity:
        kind = AchievementType(achievement_type)
        badge = badge_for(kind)
        unlocked_at = utc_now()
        try:
            res = await self.session.execute(
                insert(Achievement)
                .values(
                    user_id=user_id,
                    type=kind.value,
                    title=badge.title,
                    description=badge.description,
                    icon=badge.icon,
                    points=points,
                    unlocked_at=unlocked_at,
                )
                .returning(Achievement.id)
            )
            achievement_id = int(res.scalar_one())
            await self.session.commit()
        except IntegrityError as exc:
            # lost the race on uq_achievements_user_id_type
            await self.session.rollback()
            raise AchievementAlreadyUnlocked(f"{kind.value} already unlocked for user {user_id}") from exc
        return AchievementEntity(
            id=achievement_id,
            user_id=user_id,
            type=kind,
            title=badge.title,
            description=badge.description,
            icon=badge.icon,
            points=points,
            unlocked_at=unlocked_at,
        )

    @storage_errors
    async def list_by_user(self, user_id: int) -> list[AchievementEntity]:
        stmt = (
            select(Achievement)
            .where(Achievement.user_id == user_id)
            .order_by(Achievement.unlocked_at.desc(), Achievement.id.desc())
        )
        res = await self.session.execute(stmt)
        return [to_entity(a) for a in res.scalars().all()]

    @storage_errors
    async def total_points(self, user_id: int) -> int:
        res = await self.session.execute(
            select(func.coalesce(func.sum(Achievement.points), 0)).where(Achievement.user_id == user_id)
        )
        return int(res.scalar_one())
