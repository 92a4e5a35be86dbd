import asyncio
import os
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from docpipe.config.settings import Settings
from docpipe.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docpipe_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    settings = _test_settings()

    async def probe() -> None:
        await init_pool(settings)
        await close_pool()

    try:
        asyncio.run(probe())
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env and load docpipe/database/schema.sql"
        )
    return settings


@pytest.fixture
def run_with_pool(test_settings: Settings) -> Callable[[Callable[[], Awaitable[Any]]], Any]:
    """Run a coroutine factory inside a fresh event loop with the pool open."""

    def runner(factory: Callable[[], Awaitable[Any]]) -> Any:
        async def wrapped() -> Any:
            await init_pool(test_settings)
            try:
                return await factory()
            finally:
                await close_pool()

        return asyncio.run(wrapped())

    return runner


@pytest.fixture
def owner_id() -> int:
    return 900_000 + uuid.uuid4().int % 100_000


@pytest.fixture
def integration_cleanup(
    run_with_pool: Callable[[Callable[[], Awaitable[Any]]], Any],
) -> Any:
    cleanup: list[tuple[str, object]] = []
    yield cleanup
    if not cleanup:
        return

    async def delete_rows() -> None:
        async with get_connection() as conn:
            for table, key in cleanup:
                if table == "company_documents":
                    await conn.execute(
                        "DELETE FROM company_documents WHERE id = %s::uuid", (key,)
                    )
                elif table == "user_profiles":
                    await conn.execute("DELETE FROM user_profiles WHERE user_id = %s", (key,))
            await conn.commit()

    run_with_pool(delete_rows)
