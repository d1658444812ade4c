from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog

from domain.calculations import utc_now
from domain.entities import User, WeightEntry
from domain.errors import NotFoundError, ValidationError
from domain.ports import AchievementNotifier, UnitOfWork, UserWriter, WeightWriter


log = structlog.get_logger(__name__)


@dataclass
class RecordWeightInput:
    user_id: int
    weight: float
    when: datetime | None = None  # defaults to now


async def record_weight(
    uow: UnitOfWork,
    users: UserWriter,
    weights: WeightWriter,
    inp: RecordWeightInput,
    notifier: AchievementNotifier | None = None,
) -> tuple[WeightEntry, User]:
    """Append a weight check-in and sync the profile in one transaction.

    ``current_weight`` always follows the newest check-in; ``starting_weight``
    is set only by the first one.
    """
    if inp.weight is None or inp.weight <= 0:
        raise ValidationError("Weight must be a positive number")
    user = await users.get(inp.user_id)
    if user is None:
        raise NotFoundError("User not found")

    when = inp.when or utc_now()
    patch: dict = {"current_weight": inp.weight, "last_weight_checkin_at": when}
    if user.starting_weight is None:
        patch["starting_weight"] = inp.weight
    try:
        entry = await weights.add(inp.user_id, weight=inp.weight, recorded_at=when, autocommit=False)
        updated = await users.update(inp.user_id, autocommit=False, **patch)
        await uow.commit()
    except Exception:
        await uow.rollback()
        raise

    log.info("weight_recorded", user_id=inp.user_id, weight=inp.weight)
    # reaching the goal weight can unlock an achievement
    if notifier is not None:
        notifier.notify(inp.user_id)
    return entry, updated
