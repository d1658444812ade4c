from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import structlog

from core.config import settings
from core.container import build_container
from core.logging import bind_user, configure_logging
from domain.errors import DomainError
from infra.api.schemas import (
    APIResponse,
    AchievementStatsOut,
    HealthScoreOut,
    SuggestionsOut,
    TrajectoryOut,
)
from infra.db.session import Database


log = structlog.get_logger(__name__)


async def build_report(db: Database, user_id: int, *, target_date: str | None, check: bool) -> dict[str, Any]:
    async with db.session() as session:
        c = build_container(session)
        data: dict[str, Any] = {}
        if check:
            data["unlocked"] = await c.evaluator.check(user_id)
        data["healthScore"] = HealthScoreOut.from_domain(await c.health.compute(user_id)).dump()
        data["suggestions"] = SuggestionsOut.from_domain(await c.suggestions.all(user_id)).dump()
        data["achievements"] = AchievementStatsOut.from_domain(await c.evaluator.stats(user_id)).dump()
        if target_date:
            try:
                prediction = await c.trajectory.predict(user_id, target_date)
                data["trajectory"] = TrajectoryOut.from_domain(prediction).dump()
            except DomainError as exc:
                # the rest of the report is still useful without a prediction
                data["trajectory"] = {"code": exc.code, "message": str(exc)}
        return data


async def run(args: argparse.Namespace) -> int:
    db = Database(args.database_url)
    try:
        if args.init_db:
            await db.create_all()
        bind_user(args.user_id)
        try:
            data = await build_report(db, args.user_id, target_date=args.target_date, check=args.check_achievements)
            out = APIResponse(data=data)
            code = 0
        except DomainError as exc:
            log.warning("report_failed", code=exc.code, error=str(exc))
            out = APIResponse(ok=False, error={"code": exc.code, "message": str(exc)})
            code = 1
    finally:
        await db.dispose()
    print(json.dumps(out.model_dump(), ensure_ascii=False, indent=2))
    return code


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print health score, suggestions and achievements for a user")
    parser.add_argument("--user-id", type=int, required=True)
    parser.add_argument("--target-date", help="ISO date for a weight trajectory prediction")
    parser.add_argument("--check-achievements", action="store_true", help="Evaluate and unlock achievements first")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables before reading")
    parser.add_argument("--database-url", default=None, help=f"Defaults to DATABASE_URL ({settings.database_url})")
    parser.add_argument("--pretty-logs", action="store_true")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level, json=not args.pretty_logs)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
