from __future__ import annotations

from datetime import datetime

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from domain.calculations import as_utc
from domain.entities import WeightEntry as WeightEntryEntity
from domain.ports import WeightWriter
from infra.db.models import WeightEntry
from infra.db.repositories.base import storage_errors


class WeightRepo(WeightWriter):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @storage_errors
    async def add(
        self, user_id: int, *, weight: float, recorded_at: datetime, autocommit: bool = True
    ) -> WeightEntryEntity:
        res = await self.session.execute(
            insert(WeightEntry)
            .values(user_id=user_id, weight=weight, recorded_at=as_utc(recorded_at))
            .returning(WeightEntry.id)
        )
        entry_id = int(res.scalar_one())
        if autocommit:
            await self.session.commit()
        return WeightEntryEntity(id=entry_id, user_id=user_id, weight=weight, recorded_at=as_utc(recorded_at))
