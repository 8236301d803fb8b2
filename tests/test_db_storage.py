"""Tests for the database storage backend.

These tests use an in-memory SQLite database for fast test execution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

# Skip all tests in this module if db dependencies are not installed
pytest.importorskip("advanced_alchemy")
pytest.importorskip("sqlalchemy.ext.asyncio")
pytest.importorskip("aiosqlite")

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from shapeboard_py.core.models import EditorState
from shapeboard_py.storage.db.models import BoardStateModel
from shapeboard_py.storage.db.setup import create_session_factory, create_tables, get_database_url
from shapeboard_py.storage.db.storage import DatabaseStateStorage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine


pytestmark = pytest.mark.db


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create an in-memory SQLite engine shared by all sessions of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_storage(engine: AsyncEngine) -> DatabaseStateStorage:
    """Create a DatabaseStateStorage bound to the test engine."""
    return DatabaseStateStorage.from_engine(engine)


class TestDatabaseStateStorage:
    """Tests for DatabaseStateStorage."""

    async def test_load_missing(self, db_storage: DatabaseStateStorage) -> None:
        assert await db_storage.load("b1") is None
        assert await db_storage.size_in_bytes("b1") == 0

    async def test_save_and_load(self, db_storage: DatabaseStateStorage, board_state: EditorState) -> None:
        """Test that a saved state loads back equal."""
        await db_storage.save("b1", board_state)
        assert await db_storage.load("b1") == board_state
        assert await db_storage.size_in_bytes("b1") > 0

    async def test_save_updates_existing_row(
        self, db_storage: DatabaseStateStorage, engine: AsyncEngine, board_state: EditorState
    ) -> None:
        """Test that saving twice keeps one row per board."""
        await db_storage.save("b1", board_state)
        smaller = EditorState(shapes=board_state.shapes[:1])
        await db_storage.save("b1", smaller)

        assert await db_storage.load("b1") == smaller
        async with create_session_factory(engine)() as session:
            rows = (await session.execute(select(BoardStateModel))).scalars().all()
        assert len(rows) == 1
        assert rows[0].board_id == "b1"

    async def test_corrupt_row_loads_as_none(self, db_storage: DatabaseStateStorage, engine: AsyncEngine) -> None:
        """Test that a corrupt document is discarded instead of raising."""
        async with create_session_factory(engine)() as session, session.begin():
            session.add(BoardStateModel(board_id="b1", document="[1, 2"))
        assert await db_storage.load("b1") is None

    async def test_clear(self, db_storage: DatabaseStateStorage, board_state: EditorState) -> None:
        """Test clearing saved state."""
        await db_storage.save("b1", board_state)
        assert await db_storage.clear("b1")
        assert not await db_storage.clear("b1")
        assert await db_storage.load("b1") is None


class TestDatabaseUrl:
    """Tests for reading the database URL from the environment."""

    def test_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SHAPEBOARD_DATABASE_URL", raising=False)
        assert get_database_url() is None

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("sqlite:///./boards.db", "sqlite+aiosqlite:///./boards.db"),
            ("postgres://u:p@db/boards", "postgresql+asyncpg://u:p@db/boards"),
            ("postgresql://u:p@db/boards", "postgresql+asyncpg://u:p@db/boards"),
            ("sqlite+aiosqlite:///x.db", "sqlite+aiosqlite:///x.db"),
        ],
    )
    def test_async_drivers(self, monkeypatch: pytest.MonkeyPatch, url: str, expected: str) -> None:
        """Test that plain URLs are switched to async drivers."""
        monkeypatch.setenv("SHAPEBOARD_DATABASE_URL", url)
        assert get_database_url() == expected
