"""
Match Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class ServiceSettings(BaseSettings):
    """
    Match service configuration with validation.

    All settings can be overridden via environment variables.
    """

    # === Security ===
    match_api_secret: Optional[str] = Field(
        default=None,
        min_length=16,
        description="API authentication secret (min 16 chars for security)"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    # === CORS ===
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins"
    )

    # === MongoDB ===
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    mongo_db_name: str = Field(
        default="linkedin_network_analysis",
        description="MongoDB database name"
    )

    # === Logging ===
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="simple", description="Log format: simple or json")

    # === History ===
    history_limit: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Maximum archived searches returned by /api/history"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("match_api_secret")
    @classmethod
    def validate_secret_strength(cls, v: Optional[str]) -> Optional[str]:
        """Reject well-known weak secrets."""
        if v is None:
            return None
        weak_secrets = {"secret", "password", "changeme"}
        if v.lower() in weak_secrets or len(set(v)) < 4:
            raise ValueError("API secret is too weak - use a secure random string")
        return v

    @field_validator("mongodb_uri")
    @classmethod
    def validate_url_format(cls, v: str) -> str:
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(f"Invalid MongoDB URI format: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in {"simple", "json"}:
            raise ValueError("log_format must be 'simple' or 'json'")
        return v_lower

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def auth_required(self) -> bool:
        """Auth is required in production or whenever a secret is configured."""
        return self.is_production or self.match_api_secret is not None

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if not self.match_api_secret:
                issues.append("CRITICAL: MATCH_API_SECRET required in production")
            if not self.cors_origins:
                issues.append("WARNING: CORS_ORIGINS not configured")
            if "localhost" in self.mongodb_uri:
                issues.append("WARNING: Using localhost MongoDB in production")

        return issues

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # MATCH_API_SECRET = match_api_secret


@lru_cache()
def get_settings() -> ServiceSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. Tests call get_settings.cache_clear()
    after changing the environment.
    """
    return ServiceSettings()


def validate_config_on_startup() -> None:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid.
    Logs warnings for non-critical issues.
    """
    from src.common.config import Config

    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    for issue in settings.validate_production_config():
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        logger.warning(issue)

    if not Config.has_llm_credentials():
        # Searches will fail with CONFIGURATION_ERROR until credentials are set
        logger.warning("WARNING: No LLM provider credentials configured")

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  mongodb_uri={'*****' if 'localhost' not in settings.mongodb_uri else settings.mongodb_uri}")
    logger.info(f"  mongo_db_name={settings.mongo_db_name}")
    logger.info(f"  llm_provider={Config.get_llm_provider() or 'none'}")
    logger.info(f"  auth_required={settings.auth_required}")
    logger.debug(Config.summary())
