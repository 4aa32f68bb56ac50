"""
JIT Flags Configuration Management

This module provides configuration for the flag registry itself: which
environment variable carries the overrides and how verbose logging is.
Settings are read from environment variables with a JIT_FLAGS_ prefix and
an optional .env file.
"""

import logging
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_FLAGS_ENV_VAR = "TF_XLA_FLAGS"


class FlagsConfig(BaseSettings):
    """
    Registry configuration with validation and environment variable support.

    All settings can be overridden via environment variables with the
    JIT_FLAGS_ prefix, e.g. JIT_FLAGS_ENV_VAR or JIT_FLAGS_LOG_LEVEL.
    """

    model_config = SettingsConfigDict(
        env_prefix="JIT_FLAGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    flags_env_var: str = Field(DEFAULT_FLAGS_ENV_VAR, alias="JIT_FLAGS_ENV_VAR",
                               description="Environment variable holding flag overrides")
    log_level: str = Field("WARNING", description="Logging level used by the flags CLI")

    @field_validator('flags_env_var')
    @classmethod
    def validate_env_var(cls, v):
        """Validate the environment variable name is usable."""
        v = v.strip()
        if not v:
            raise ValueError('Flags environment variable name must not be empty')
        if '=' in v:
            raise ValueError("Flags environment variable name must not contain '='")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate the log level is a known logging level name."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f'Unknown log level: {v}')
        return level

    @classmethod
    def from_env_file(cls, env_file_path: Optional[Path] = None) -> "FlagsConfig":
        """
        Create configuration from environment file.

        Args:
            env_file_path: Optional path to .env file. Defaults to .env in the
                current directory

        Returns:
            FlagsConfig: Configured instance
        """
        if env_file_path is not None and env_file_path.exists():
            return cls(_env_file=str(env_file_path))
        return cls()


# Global configuration instance
_config: Optional[FlagsConfig] = None


def get_flags_config(env_file_path: Optional[Path] = None) -> FlagsConfig:
    """
    Get or create the global flags configuration instance.

    Args:
        env_file_path: Optional path to environment file

    Returns:
        FlagsConfig: Global configuration instance
    """
    global _config
    if _config is None:
        _config = FlagsConfig.from_env_file(env_file_path)
    return _config


def reset_flags_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
