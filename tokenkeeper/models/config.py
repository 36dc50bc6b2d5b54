"""Manager configuration model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tokenkeeper.models.session import DEFAULT_RENEW_THRESHOLD_SECONDS


class ManagerConfig(BaseModel):
    """Settings for the token lifecycle manager and its HTTP leaves."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = "http://localhost:3000"
    status_path: str = "/api/auth/status"
    refresh_path: str = "/api/auth/refresh"
    status_interval_seconds: float = Field(default=30.0, gt=0)
    renewal_interval_seconds: float = Field(default=20 * 60.0, gt=0)
    renew_threshold_seconds: int = Field(default=DEFAULT_RENEW_THRESHOLD_SECONDS, ge=0)
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    public_routes: list[str] = Field(default_factory=lambda: ["/signin"])
    signin_path: str = "/signin"
    unauthorized_statuses: list[int] = Field(default_factory=lambda: [401])
    cookies: dict[str, str] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("status_path", "refresh_path", "signin_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("path must start with '/'")
        return value

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return stripped
