from __future__ import annotations

import pytest

from core.logging import configure_logging
from infra.db.session import Database


@pytest.fixture(autouse=True, scope="session")
def _logging():
    configure_logging("WARNING", json=False)


@pytest.fixture
async def db(tmp_path):
    """A fresh SQLite database per test."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'fittrack.db'}", echo=False)
    await database.create_all()
    yield database
    await database.dispose()
