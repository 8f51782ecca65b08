"""Configuration management using Pydantic Settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mca_pipeline.domain.models import PriorityConfig, PriorityThresholds


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "mca-pipeline"
    log_level: str = "INFO"

    # Priority scoring thresholds
    priority_urgent_days_threshold: int = Field(default=10, gt=0)
    priority_urgent_amount_threshold: float = Field(default=150_000, gt=0)
    priority_urgent_score_threshold: int = 80
    priority_high_days_threshold: int = Field(default=5, gt=0)
    priority_high_amount_threshold: float = Field(default=75_000, gt=0)
    priority_high_score_threshold: int = 60

    def priority_config(self) -> PriorityConfig:
        """Thresholds to pass into the priority scorer"""
        return PriorityConfig(
            urgent=PriorityThresholds(
                days_threshold=self.priority_urgent_days_threshold,
                amount_threshold=self.priority_urgent_amount_threshold,
                score_threshold=self.priority_urgent_score_threshold,
            ),
            high=PriorityThresholds(
                days_threshold=self.priority_high_days_threshold,
                amount_threshold=self.priority_high_amount_threshold,
                score_threshold=self.priority_high_score_threshold,
            ),
        )


settings = Settings()
