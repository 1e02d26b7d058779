"""
Configuration management using pydantic-settings.

All SkillSwap settings are loaded from environment variables
with the SKILLSWAP_ prefix.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings


class SkillSwapConfig(BaseSettings):
    """
    SkillSwap service configuration.

    Environment variables are prefixed with SKILLSWAP_, e.g.:
    - SKILLSWAP_DATABASE_URL=sqlite:///data/skill_swap.db
    - SKILLSWAP_DISPATCH_TIMEOUT_SECONDS=2.5
    """

    model_config = {"env_prefix": "SKILLSWAP_"}

    # Storage: empty means in-memory store and skill directory
    database_url: str = ""

    # Notification delivery
    dispatch_timeout_seconds: float = 5.0

    # HTTP
    cors_origins: str = "http://localhost:3000"  # Comma-separated

    def get_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def uses_database(self) -> bool:
        return bool(self.database_url)

    # Demo directory (Alice/Bob with Guitar/Spanish)
    seed_demo: bool = True

    log_level: str = "INFO"
