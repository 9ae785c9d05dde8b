"""
Elderly-Care Market Analytics
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatasetSettings(BaseSettings):
    """Synthetic Dataset Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATASET_")

    seed: int = Field(default=42, description="Seed of the linear-congruential generator")
    record_id_start: int = Field(default=100000, description="First record id")
    output_path: str = Field(
        default="./data/generated/elderly_care_market_data.csv",
        description="CSV export path",
    )


class DashboardSettings(BaseSettings):
    """Dashboard Filter Defaults"""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    default_years: List[int] = Field(default=[2021, 2022], description="Initial year window")
    current_year: int = Field(default=2025, description="Year reinstated when the year filter is emptied")
    min_multi_select: int = Field(default=2, description="Minimum values kept on multi-valued segments")
    default_evaluation: str = Field(default="By Value", description="Initial market evaluation mode")

    @field_validator("default_evaluation")
    @classmethod
    def validate_evaluation(cls, v: str) -> str:
        """Validate evaluation mode"""
        allowed = ["By Value", "By Volume"]
        if v not in allowed:
            raise ValueError(f"Evaluation must be one of: {allowed}")
        return v


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")
    log_file: Optional[str] = Field(default=None, description="Log file path")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # Subsystem configurations
    dataset: DatasetSettings = Field(default_factory=DatasetSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
