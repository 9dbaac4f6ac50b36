"""Configuration management for LifeBalance.

Loads settings from environment variables (and an optional .env file) using
Pydantic. Nothing is required: every field has a working default so the
engine runs offline out of the box.

Usage:
    from lifebalance.config import settings

    print(settings.store_path)
    print(settings.baseline_window_days)
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """LifeBalance configuration from environment variables.

    The plan baseline and the ML z-scoring baseline are two independent
    windows and are configured separately.

    Attributes:
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR)
        store_path: SQLite file backing the key-value store
        baseline_window_days: Trailing scored days averaged for the plan baseline
        baseline_min_days: Minimum scored days before a baseline exists
        ml_window_days: Rolling window for per-feature z-scoring
        ml_drop_k: Drop threshold in rolling standard deviations
        ml_min_corpus_days: Minimum stored days before training
        ml_min_rows: Minimum supervised rows before training
        ml_steps: Gradient descent steps
        ml_learning_rate: Gradient descent learning rate
        ml_l2: L2 penalty on weights
        analytics_window_days: Trailing records used by the analytics summary
        consistency_window_days: Trailing records used by the consistency score
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    # System Settings
    log_level: str = Field(default="INFO", description="Logging level")
    store_path: str = Field(default="data/lifebalance.db", description="SQLite store file")

    # Plan baseline
    baseline_window_days: int = Field(
        default=7,
        ge=3,
        description="Trailing scored days averaged into the plan baseline",
    )
    baseline_min_days: int = Field(
        default=3,
        ge=1,
        description="Minimum scored days for a defined baseline",
    )

    # ML risk model
    ml_window_days: int = Field(default=14, ge=2, description="Rolling z-score window (days)")
    ml_drop_k: float = Field(default=0.75, gt=0, description="Drop threshold in sd units")
    ml_min_corpus_days: int = Field(default=21, ge=1, description="Stored days before training")
    ml_min_rows: int = Field(default=10, ge=1, description="Dataset rows before training")
    ml_steps: int = Field(default=900, ge=1, description="Gradient descent steps")
    ml_learning_rate: float = Field(default=0.12, gt=0, description="Learning rate")
    ml_l2: float = Field(default=0.02, ge=0, description="L2 penalty")

    # Analytics
    analytics_window_days: int = Field(default=30, ge=1, description="Analytics window")
    consistency_window_days: int = Field(default=14, ge=1, description="Consistency window")

    # AI Narrator (optional, disabled when unset)
    ai_provider: str | None = Field(
        default=None,
        description="Narrator provider: 'service' or 'openai' (None = disabled)",
    )
    explain_service_url: str = Field(
        default="http://localhost:3333/explain",
        description="Explanation service endpoint for the 'service' provider",
    )
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key for the 'openai' provider",
    )
    ai_model: str | None = Field(
        default=None,
        description="AI model override (default per provider)",
    )
    ai_max_tokens: int = Field(
        default=140,
        ge=64,
        le=1024,
        description="Maximum tokens for narrator responses",
    )

    @field_validator("ai_provider")
    @classmethod
    def validate_ai_provider(cls, v: str | None) -> str | None:
        """Ensure AI provider is valid."""
        if v is None:
            return None
        v_lower = v.lower()
        if v_lower not in {"service", "openai"}:
            raise ValueError(f"ai_provider must be 'service' or 'openai', got '{v}'")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper

    @model_validator(mode="after")
    def validate_baseline_params(self) -> "Settings":
        """Ensure the baseline minimum fits inside its window."""
        if self.baseline_min_days > self.baseline_window_days:
            raise ValueError(
                f"baseline_min_days ({self.baseline_min_days}) cannot exceed "
                f"baseline_window_days ({self.baseline_window_days})"
            )
        return self


# Global settings instance, loaded once at import
settings = Settings()
