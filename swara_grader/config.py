"""Configuration loading for swara-grader."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .scorer import ScorerConfig


class PitchSettings(BaseModel):
    """Pitch range of the expected voice."""

    fmin: float = 75.0
    fmax: float = 800.0


class GradingSettings(BaseModel):
    """Score weights and gradability floors."""

    pronunciation_weight: float = Field(default=0.6, ge=0.0, le=1.0)
    accent_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    min_gradable_duration_ms: float = 180.0
    min_gradable_confidence: float = 0.7
    match_threshold: int = Field(default=50, ge=0, le=100)


class GraderSettings(BaseSettings):
    """Application configuration, overridable from SWARA_* environment variables."""

    sample_rate: int = 16000
    log_level: str = "INFO"
    aligner: Literal["uniform", "onset"] = "onset"
    pitch: PitchSettings = Field(default_factory=PitchSettings)
    grading: GradingSettings = Field(default_factory=GradingSettings)

    model_config = {
        "env_prefix": "SWARA_",
        "env_file": ".env",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    def to_scorer_config(self) -> ScorerConfig:
        """Build the pipeline configuration these settings describe."""
        config = ScorerConfig(
            aligner_type=self.aligner,
            pronunciation_weight=self.grading.pronunciation_weight,
            accent_weight=self.grading.accent_weight,
        )
        config.pitch.fmin = self.pitch.fmin
        config.pitch.fmax = self.pitch.fmax
        config.tolerance.min_gradable_duration_ms = self.grading.min_gradable_duration_ms
        config.tolerance.min_gradable_confidence = self.grading.min_gradable_confidence
        config.pronunciation.match_threshold = self.grading.match_threshold
        return config


def load_settings() -> GraderSettings:
    """Load configuration from environment."""
    return GraderSettings()
