"""Tests for Redis configuration."""

import os

from unittest.mock import patch

from moderation_engine.config.redis import RedisSettings
from moderation_engine.config.redis import get_redis_settings


class TestRedisSettings:
    """Test cases for RedisSettings."""

    def test_default_settings(self):
        """Test default Redis settings."""
        with patch.dict(os.environ, {}, clear=True):
            settings = RedisSettings()

            assert settings.redis_url == "redis://localhost:6379/0"
            assert settings.port == 6379
            assert settings.database == 0
            assert settings.password is None
            assert settings.socket_connect_timeout == 5.0

    def test_custom_settings_from_env(self):
        """Test Redis settings from environment variables."""
        env_vars = {
            "REDIS_REDIS_URL": "redis://cache:6380/2",
            "REDIS_HOST": "cache",
            "REDIS_PORT": "6380",
            "REDIS_DATABASE": "2",
            "REDIS_PASSWORD": "secret",
            "REDIS_SOCKET_CONNECT_TIMEOUT": "10",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            settings = get_redis_settings()

            assert settings.redis_url == "redis://cache:6380/2"
            assert settings.host == "cache"
            assert settings.port == 6380
            assert settings.database == 2
            assert settings.password == "secret"
            assert settings.socket_connect_timeout == 10


def test_get_redis_settings_returns_new_instances():
    """Test that get_redis_settings is not cached."""
    assert get_redis_settings() is not get_redis_settings()
