"""
Pydantic configuration models for the InsurAI engine.

These models define the structure and validation for engine configuration.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EndpointConfig(BaseModel):
    """Endpoint paths on the dashboard API, relative to the base URL."""

    agents: str = "/agent"
    employees: str = "/auth/employees"
    hr_staff: str = "/hr"
    claims: str = "/admin/claims"
    policies: str = "/admin/policies"
    fraud_claims: str = "/admin/claims/fraud"
    agent_queries: str = Field(
        default="/agent/queries/all/{agent_id}",
        description="Queries assigned to an agent",
    )
    respond_query: str = Field(
        default="/agent/queries/respond/{query_id}",
        description="PUT target confirming a query response",
    )
    availability: str = "/agent/availability"
    agent_availability: str = "/agent/{agent_id}/availability"


class TransportConfig(BaseModel):
    """HTTP transport settings."""

    base_url: str = Field(
        default="http://localhost:8080",
        description="Dashboard API base URL",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout",
    )
    session_file: Optional[Path] = Field(
        default=None,
        description="JSON session store holding the bearer token",
    )
    token_key: str = Field(
        default="token",
        description="Session store key of the bearer credential",
    )
    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths carry the leading slash."""
        return v.rstrip("/")


class LifecycleConfig(BaseModel):
    """Query lifecycle settings."""

    confirm_timeout_seconds: Optional[float] = Field(
        default=30.0,
        gt=0,
        description=(
            "Upper bound on a remote confirmation. A timed out confirmation "
            "is treated as failed and rolled back. None waits indefinitely."
        ),
    )


class SortFilterConfig(BaseModel):
    """Field semantics for sorting and free-text search."""

    numeric_fields: list[str] = Field(default=["amount"])
    date_fields: list[str] = Field(
        default=["claimDate", "createdAt", "updatedAt", "resolvedAt"],
    )
    search_fields: list[str] = Field(
        default=[
            "employeeName",
            "policyName",
            "fraudReason",
            "assignedHrName",
            "title",
        ],
        description="Fields matched by the free-text claim search",
    )


class StatisticsConfig(BaseModel):
    """Dashboard statistics settings."""

    recent_activity_limit: int = Field(
        default=5,
        ge=1,
        description="Number of claims shown in recent activity",
    )
    high_priority_label: str = "High"


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        """Ensure the level is a stdlib logging level."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class EngineConfig(BaseSettings):
    """
    Root engine configuration.

    Values can be loaded from YAML files and overridden via environment
    variables prefixed with INSURAI_ (nested with a double underscore,
    e.g. INSURAI_TRANSPORT__BASE_URL).
    """

    model_config = SettingsConfigDict(
        env_prefix="INSURAI_",
        env_nested_delimiter="__",
    )

    transport: TransportConfig = Field(default_factory=TransportConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    sort_filter: SortFilterConfig = Field(default_factory=SortFilterConfig)
    statistics: StatisticsConfig = Field(default_factory=StatisticsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
