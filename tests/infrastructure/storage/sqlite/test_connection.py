"""Tests for the SQLite connection pool."""

from pathlib import Path

import pytest

from carestock.infrastructure.storage.sqlite.connection import ConnectionPool


@pytest.fixture
async def pool(tmp_path: Path):
    pool = ConnectionPool(tmp_path / "pool.db", pool_size=2, busy_timeout=1000)
    yield pool
    await pool.close()


class TestConnectionPool:
    async def test_lazy_initialization(self, pool):
        assert not pool.is_initialized
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT 1")
            assert (await cursor.fetchone())[0] == 1
        assert pool.is_initialized

    async def test_transaction_commits(self, pool):
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")
            await conn.execute("INSERT INTO t VALUES (1)")
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 1

    async def test_transaction_rolls_back(self, pool):
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")

        with pytest.raises(RuntimeError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("boom")

        async with pool.snapshot() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 0

    async def test_close_allows_reinitialize(self, pool):
        async with pool.acquire():
            pass
        await pool.close()
        assert not pool.is_initialized
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
