"""Configuration management for the prop firm account tracker."""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# System Configuration
# =============================================================================


class SystemConfig(BaseSettings):
    """System-level configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", validation_alias="ENVIRONMENT"
    )
    app_name: str = Field(default="Prop Firm Tracker", validation_alias="APP_NAME")
    app_version: str = Field(default="1.0.0", validation_alias="APP_VERSION")

    # Operational settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    # No file handler when unset
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")
    log_format: Literal["json", "console"] = Field(
        default="json", validation_alias="LOG_FORMAT"
    )


# =============================================================================
# Trade History Ingestion Configuration
# =============================================================================


class IngestConfig(BaseSettings):
    """Settings for parsing broker trade-history exports."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Dollar value of one full point move for the single instrument the
    # completed-orders dialect assumes (20 = one NQ contract)
    point_value: float = Field(default=20.0, validation_alias="INGEST_POINT_VALUE")

    # Status value marking an executed row in completed-orders exports
    filled_status: str = Field(default="Filled", validation_alias="INGEST_FILLED_STATUS")

    # Dialect used when no hint is passed and sniffing should be skipped
    default_dialect: Optional[str] = Field(
        default=None, validation_alias="INGEST_DEFAULT_DIALECT"
    )

    @field_validator("point_value")
    @classmethod
    def validate_point_value(cls, v):
        """Validate that the point value is positive."""
        if v <= 0:
            raise ValueError("Point value must be positive")
        return v


# =============================================================================
# Funding Program Configuration
# =============================================================================


class ProgramConfig(BaseSettings):
    """Defaults applied to newly registered accounts."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Program bound to accounts created without an explicit one (None = unbound)
    default_program: Optional[str] = Field(
        default=None, validation_alias="DEFAULT_PROGRAM"
    )

    # Used by accounts that are not bound to a program
    default_profit_target: float = Field(
        default=3000.0, validation_alias="DEFAULT_PROFIT_TARGET"
    )
    starting_balance: float = Field(default=50000.0, validation_alias="STARTING_BALANCE")

    @field_validator("default_profit_target", "starting_balance")
    @classmethod
    def validate_positive(cls, v):
        """Validate that the amount is positive."""
        if v <= 0:
            raise ValueError("Amount must be positive")
        return v


# =============================================================================
# Global Configuration Container
# =============================================================================


class TrackerConfig:
    """
    Container for all tracker configurations.

    Usage:
        from proptrack.core.config import tracker_config

        point_value = tracker_config.ingest.point_value
        if tracker_config.program.default_program:
            ...
    """

    def __init__(self):
        self.system = SystemConfig()
        self.logging = LoggingConfig()
        self.ingest = IngestConfig()
        self.program = ProgramConfig()

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.system.environment == "production"

    def validate_configuration(self) -> dict:
        """
        Validate the complete configuration and return any issues.

        Returns:
            Dictionary with 'valid' boolean and 'issues' list
        """
        # Deferred: both modules read the global instances below
        from proptrack.compliance.programs import PROGRAM_PRESETS

        issues = []

        default_program = self.program.default_program
        if default_program and default_program.upper() not in PROGRAM_PRESETS:
            issues.append(f"Unknown default program '{default_program}'")

        default_dialect = self.ingest.default_dialect
        if default_dialect:
            from proptrack.ingest.dialects import DIALECTS

            if default_dialect.lower() not in {d.name for d in DIALECTS}:
                issues.append(f"Unknown default dialect '{default_dialect}'")

        return {"valid": len(issues) == 0, "issues": issues}


# =============================================================================
# Global Configuration Instances
# =============================================================================

logging_config = LoggingConfig()
ingest_config = IngestConfig()
program_config = ProgramConfig()

tracker_config = TrackerConfig()


__all__ = [
    "TrackerConfig",
    "tracker_config",
    "logging_config",
    "ingest_config",
    "program_config",
    "SystemConfig",
    "LoggingConfig",
    "IngestConfig",
    "ProgramConfig",
]
