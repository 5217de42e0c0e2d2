"""Tests for database connection module."""

import logging

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from moderation_engine.config.database import DatabaseSettings
from moderation_engine.database.connection import Database


@pytest.fixture
def database():
    """Database with explicit settings."""
    return Database(DatabaseSettings(database_url="postgresql://u:p@h/db"))


@pytest.fixture
def mock_pool(mock_connection):
    """Pool whose acquire() yields the mock connection."""
    pool = MagicMock()
    pool.close = AsyncMock()

    @asynccontextmanager
    async def acquire():
        yield mock_connection

    pool.acquire = acquire
    return pool


class TestDatabase:
    """Test Database connection manager class."""

    @pytest.mark.asyncio
    async def test_connect_creates_pool(self, database, mock_pool):
        """Test connect builds the pool from settings."""
        with patch(
            "asyncpg.create_pool", new=AsyncMock(return_value=mock_pool)
        ) as create_pool:
            await database.connect()

        assert create_pool.await_args.args == ("postgresql://u:p@h/db",)
        assert create_pool.await_args.kwargs["max_size"] == 20
        assert database._pool is mock_pool

    @pytest.mark.asyncio
    async def test_connect_already_initialized(self, database, mock_pool, caplog):
        """Test connecting twice only warns."""
        database._pool = mock_pool

        with caplog.at_level(logging.WARNING):
            await database.connect()

        assert "Database pool already initialized" in caplog.text

    @pytest.mark.asyncio
    async def test_connect_failure(self, database):
        """Test pool creation errors propagate."""
        with patch("asyncpg.create_pool", side_effect=OSError("refused")):
            with pytest.raises(OSError, match="refused"):
                await database.connect()

    @pytest.mark.asyncio
    async def test_disconnect(self, database, mock_pool):
        """Test disconnect closes and forgets the pool."""
        database._pool = mock_pool

        await database.disconnect()

        mock_pool.close.assert_awaited_once()
        assert database._pool is None

    @pytest.mark.asyncio
    async def test_get_connection_requires_pool(self, database):
        """Test a connection cannot be taken before connect()."""
        with pytest.raises(RuntimeError, match="not initialized"):
            async with database.get_connection():
                pass

    @pytest.mark.asyncio
    async def test_get_transaction(self, database, mock_pool, mock_connection):
        """Test the transaction wraps the pooled connection."""
        transaction = MagicMock()
        transaction.__aenter__ = AsyncMock()
        transaction.__aexit__ = AsyncMock(return_value=False)
        mock_connection.transaction = MagicMock(return_value=transaction)
        database._pool = mock_pool

        async with database.get_transaction() as connection:
            assert connection is mock_connection

        transaction.__aenter__.assert_awaited_once()
        transaction.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_health_check(self, database, mock_pool, mock_connection):
        """Test a healthy pool answers SELECT 1."""
        database._pool = mock_pool
        mock_connection.fetchval.return_value = 1

        assert await database.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self, database):
        """Test the health check reports failure instead of raising."""
        assert await database.health_check() is False
