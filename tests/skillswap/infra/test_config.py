"""Tests for SkillSwapConfig."""

from __future__ import annotations

from skillswap.infra.config import SkillSwapConfig


class TestSkillSwapConfig:
    def test_default_values(self):
        config = SkillSwapConfig()
        assert config.database_url == ""
        assert config.uses_database() is False
        assert config.dispatch_timeout_seconds == 5.0
        assert config.get_cors_origins() == ["http://localhost:3000"]
        assert config.seed_demo is True
        assert config.log_level == "INFO"

    def test_loads_from_env(self, monkeypatch):
        monkeypatch.setenv("SKILLSWAP_DATABASE_URL", "sqlite:///tmp/test.db")
        monkeypatch.setenv("SKILLSWAP_DISPATCH_TIMEOUT_SECONDS", "1.5")
        monkeypatch.setenv("SKILLSWAP_CORS_ORIGINS", "https://a.example, https://b.example,")
        monkeypatch.setenv("SKILLSWAP_SEED_DEMO", "false")

        config = SkillSwapConfig()
        assert config.uses_database() is True
        assert config.dispatch_timeout_seconds == 1.5
        assert config.get_cors_origins() == ["https://a.example", "https://b.example"]
        assert config.seed_demo is False
