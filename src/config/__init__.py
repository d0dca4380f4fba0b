"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== SLA Calendar ==========
    sla_settings_path: Path = Field(
        default=Path("sla_calendar.yaml"),
        description="Path to the YAML file holding the raw SLA calendar settings"
    )
    sla_watch_settings: bool = Field(
        default=False,
        description="Reload the calendar when the settings file changes"
    )

    # ========== SLA Policy ==========
    sla_risk_threshold_hours: float = Field(
        default=8.0,
        description="Hours before a deadline at which a ticket counts as at risk",
        ge=0
    )
    sla_waiting_status: str = Field(
        default="WAITING_REPLY",
        description="Ticket status during which the SLA clock is paused"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# ========== Constants ==========

class TicketStatus(str):
    """Ticket lifecycle statuses."""
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_REPLY = "WAITING_REPLY"
    CLOSED = "CLOSED"
    REJECTED = "REJECTED"


class SLAType(str):
    """Types of SLA clocks."""
    RESPONSE = "response"
    RESOLUTION = "resolution"


class SLAState(str):
    """SLA status states."""
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    BREACHED = "breached"
    MET = "met"
    NO_SLA = "no_sla"


# ========== Lists for validation ==========

VALID_SLA_TYPES = [SLAType.RESPONSE, SLAType.RESOLUTION]
