"""Configuration system for Taxi Agents.

Pydantic Settings-based configuration with environment variable support
and sensible defaults for the extraction pipeline.

Usage:
    from taxi_agents.config import TaxiConfig

    # Load from environment variables and .env file
    config = TaxiConfig()

    print(config.llm.model)
    print(config.pipeline.max_concurrency)
"""

from typing import Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Generation model settings.

    Environment Variables:
        TAXI_LLM_MODEL: Model name
        TAXI_LLM_TEMPERATURE: Sampling temperature (0.0-1.0)
        TAXI_LLM_MAX_TOKENS: Maximum output tokens
        TAXI_LLM_API_KEY: API key (ANTHROPIC_API_KEY is also accepted)
        TAXI_LLM_REQUEST_TIMEOUT: Timeout for a single API request in seconds
        TAXI_LLM_TIMEOUT: Budget for extracting one document, retries included
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXI_LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model identifier for the LLM",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Sampling temperature for generation",
    )
    max_tokens: int = Field(
        default=2000,
        gt=0,
        le=64000,
        description="Maximum tokens in response",
    )
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TAXI_LLM_API_KEY", "ANTHROPIC_API_KEY"),
        description="API key for the generation provider",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for a single generation request in seconds",
    )
    timeout: float = Field(
        default=240.0,
        gt=0,
        description="Per-document extraction budget in seconds, retries included",
    )

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Ensure model name is not empty."""
        if not v or not v.strip():
            raise ValueError("Model name cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_timeouts(self) -> "LLMConfig":
        """The document budget must allow at least one full request."""
        if self.timeout < self.request_timeout:
            raise ValueError(
                f"timeout ({self.timeout}s) must be at least request_timeout "
                f"({self.request_timeout}s)"
            )
        return self


class PipelineConfig(BaseSettings):
    """Batch pipeline settings.

    Environment Variables:
        TAXI_PIPELINE_DEBUG_MODE: Force DEBUG logging regardless of TAXI_LOG_LEVEL
        TAXI_PIPELINE_MAX_ATTEMPTS: Attempts per generation call, first try included
        TAXI_PIPELINE_RETRY_DELAY: Base backoff delay in seconds
        TAXI_PIPELINE_MAX_CONCURRENCY: Documents extracted at once
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXI_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable verbose debug logging for development",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=5,
        description="Maximum attempts per generation call, first try included",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Base delay between retry attempts in seconds",
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Maximum documents extracted concurrently",
    )


class TaxiConfig(BaseSettings):
    """Root configuration for Taxi Agents.

    Environment Variables:
        TAXI_ENV: Environment name (development, staging, production, test);
            production switches logs to JSON lines
        TAXI_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        config = TaxiConfig(
            llm=LLMConfig(model="claude-3-5-haiku-latest"),
            pipeline=PipelineConfig(max_concurrency=2),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    llm: LLMConfig = Field(default_factory=LLMConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        """Check if debug mode is enabled (via pipeline or log level)."""
        return self.pipeline.debug_mode or self.log_level == "DEBUG"
