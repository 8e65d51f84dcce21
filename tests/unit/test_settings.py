"""Unit tests for environment-backed settings."""

from __future__ import annotations

import pytest

from wayback_resolver.config.settings import Settings, get_settings


class TestSettings:
    def test_defaults_point_at_public_wayback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WAYBACK_API_BASE", raising=False)
        settings = Settings(_env_file=None)

        assert settings.api_base == "https://wwwb-api.archive.org"
        assert settings.archive_root == "https://web.archive.org/web"
        assert settings.pending_delay == 3.0
        assert settings.rate_limit_delay == 1.0
        assert settings.save_cookie == ""

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WAYBACK_RETRY_ATTEMPTS", "7")
        monkeypatch.setenv("WAYBACK_SAVE_COOKIE", "logged-in-sig=abc")

        settings = Settings(_env_file=None)

        assert settings.retry_attempts == 7
        assert settings.save_cookie == "logged-in-sig=abc"

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
