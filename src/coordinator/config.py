"""Application configuration using pydantic-settings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class EcsSettings(BaseSettings):
    """Target cluster/service and rollout bounds."""

    cluster: str = Field(default="default", alias="ECS_CLUSTER")
    service: str = Field(default="web", alias="ECS_SERVICE")
    maximum_percent: int = Field(default=200, alias="ECS_MAXIMUM_PERCENT")
    minimum_healthy_percent: int = Field(default=50, alias="ECS_MINIMUM_HEALTHY_PERCENT")
    circuit_breaker_enabled: bool = Field(default=True, alias="ENABLE_CIRCUIT_BREAKER")

    model_config = {
        "env_prefix": "ECS_", "extra": "ignore", "populate_by_name": True, "frozen": True,
    }


class PolicySettings(BaseSettings):
    """Admission and rollback policy."""

    cooldown_seconds: int = Field(default=60, ge=0, alias="DEPLOYMENT_COOLDOWN")
    rollback_enabled: bool = Field(default=True, alias="ENABLE_ROLLBACK")
    watched_repository: str | None = Field(default=None, alias="WATCHED_REPOSITORY")
    stuck_threshold_seconds: int = Field(default=1800, gt=0, alias="STUCK_THRESHOLD_SECONDS")
    stuck_check_interval_seconds: float = Field(
        default=300.0, gt=0, alias="STUCK_CHECK_INTERVAL_SECONDS",
    )

    model_config = {"extra": "ignore", "populate_by_name": True, "frozen": True}


class LockSettings(BaseSettings):
    """Deployment lock configuration."""

    parameter_path: str | None = Field(default=None, alias="DEPLOYMENT_LOCK_PARAM")
    staleness_seconds: int = Field(default=1800, gt=0, alias="LOCK_STALENESS_SECONDS")

    model_config = {"extra": "ignore", "populate_by_name": True, "frozen": True}


class LedgerSettings(BaseSettings):
    """Deployment ledger (DynamoDB) configuration."""

    table_name: str = Field(default="deployments", alias="DEPLOYMENT_TABLE")
    status_index: str = Field(default="status-index", alias="LEDGER_STATUS_INDEX")
    retention_days: int = Field(default=90, gt=0, alias="LEDGER_RETENTION_DAYS")

    model_config = {"extra": "ignore", "populate_by_name": True, "frozen": True}


class AwsSettings(BaseSettings):
    """AWS client configuration."""

    region: str = Field(default="us-east-1", alias="AWS_REGION")
    endpoint_url: str | None = Field(default=None, alias="AWS_ENDPOINT_URL")
    max_attempts: int = Field(default=3, ge=1, alias="AWS_MAX_ATTEMPTS")

    model_config = {"extra": "ignore", "populate_by_name": True, "frozen": True}


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    otlp_endpoint: str = Field(default="http://localhost:4317", alias="OTLP_ENDPOINT")
    service_name: str = Field(default="deployment-coordinator", alias="SERVICE_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")
    tracing_enabled: bool = Field(default=False, alias="TRACING_ENABLED")

    model_config = {
        "env_prefix": "OBS_", "extra": "ignore", "populate_by_name": True, "frozen": True,
    }


class Settings(BaseSettings):
    """Main application settings. Built once at start-up and never mutated."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, alias="ENVIRONMENT")
    namespace: str = Field(default="bellyfed", alias="NAMESPACE")
    debug: bool = Field(default=False, alias="DEBUG")
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    host: str = Field(default="0.0.0.0", alias="HOST")  # noqa: S104
    port: int = Field(default=8000, alias="PORT")

    ecs: EcsSettings = Field(default_factory=EcsSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)
    lock: LockSettings = Field(default_factory=LockSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    aws: AwsSettings = Field(default_factory=AwsSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True, "frozen": True}

    @property
    def uses_aws(self) -> bool:
        """Staging and production talk to AWS; other environments run on in-memory fakes
        unless an explicit endpoint (e.g. LocalStack) is configured."""
        if self.aws.endpoint_url:
            return True
        return self.environment in (Environment.STAGING, Environment.PRODUCTION)

    @property
    def lock_parameter_path(self) -> str:
        """Well-known SSM parameter holding the deployment lock."""
        if self.lock.parameter_path:
            return self.lock.parameter_path
        return f"/{self.namespace}/{self.environment.value}/deployment/lock"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
