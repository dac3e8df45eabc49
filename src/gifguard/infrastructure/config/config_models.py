"""Configuration data models using Pydantic."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..resilience.registry import DEFAULT_BREAKER_SETTINGS


class RetryConfigModel(BaseModel):
    """Retry-with-backoff configuration."""
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Total attempts including the first one"
    )
    base_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Delay in seconds after the first failed attempt"
    )
    max_delay: Optional[float] = Field(
        default=10.0,
        ge=0.0,
        le=600.0,
        description="Cap in seconds for any single delay (null = uncapped)"
    )
    backoff_factor: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Exponential growth factor between delays"
    )
    jitter: float = Field(
        default=0.0,
        ge=0.0,
        le=10.0,
        description="Upper bound in seconds of random time added to each delay"
    )

    @model_validator(mode="after")
    def validate_delays(self):
        """Ensure the cap is not below the first delay."""
        if self.max_delay is not None and self.max_delay < self.base_delay:
            raise ValueError("max_delay must be greater than or equal to base_delay")
        return self


class CircuitBreakerConfigModel(BaseModel):
    """Settings for one circuit breaker."""
    failure_threshold: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Consecutive failures before opening the circuit"
    )
    recovery_timeout: float = Field(
        default=60.0,
        ge=0.0,
        le=3600.0,
        description="Seconds to stay open before a trial call"
    )


def _default_breakers() -> Dict[str, CircuitBreakerConfigModel]:
    return {
        name: CircuitBreakerConfigModel(failure_threshold=threshold, recovery_timeout=timeout)
        for name, (threshold, timeout) in DEFAULT_BREAKER_SETTINGS.items()
    }


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    file: Optional[str] = Field(
        default=None,
        description="JSON log file path (null = console only)"
    )
    console: bool = Field(
        default=True,
        description="Enable console logging"
    )
    rotation: str = Field(
        default="daily",
        description="Log rotation strategy (daily, none)"
    )
    retention_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Number of days to retain logs"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")
        return v

    @field_validator('rotation')
    @classmethod
    def validate_rotation(cls, v):
        """Ensure rotation strategy is valid."""
        valid_strategies = ["daily", "none"]
        v = v.lower()
        if v not in valid_strategies:
            raise ValueError(f"rotation must be one of {valid_strategies}")
        return v


class GifGuardConfig(BaseModel):
    """Complete gifguard configuration."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    retry: RetryConfigModel = Field(default_factory=RetryConfigModel)
    circuit_breakers: Dict[str, CircuitBreakerConfigModel] = Field(
        default_factory=_default_breakers,
        description="Circuit breaker settings per guarded dependency"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        import yaml
        return yaml.dump(self.model_dump(), default_flow_style=False, sort_keys=False)
