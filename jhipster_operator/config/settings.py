"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class OperatorSettings(BaseSettings):
    """Operator settings for cluster access, watches and the HTTP surface.

    Environment variable names map directly to field names in uppercase.
    Example: `namespace` reads from `NAMESPACE`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        namespace: Kubernetes namespace watched and written by the operator.
        crd_group: API group of the four custom resource definitions.
        crd_version: API version served by the custom resource definitions.
        kubeconfig_path: Optional kubeconfig file; in-cluster config is tried first when unset.
        external_ip: Optional fixed external address used to build application URLs.
        reconcile_interval_seconds: Delay between scheduled reconcile passes.
        watch_timeout_seconds: Server-side timeout for one watch stream.
        watch_backoff_base_seconds: Base delay for watch reconnect backoff.
        watch_backoff_max_seconds: Maximum watch reconnect delay before jitter.
        watch_jitter_min_multiplier: Minimum reconnect jitter multiplier.
        watch_jitter_max_multiplier: Maximum reconnect jitter multiplier.
        log_level: Root logging level name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8080, ge=1, le=65535)
    namespace: str = Field(default="default", min_length=1)
    crd_group: str = Field(default="alpha.k8s.jhipster.tech", min_length=1)
    crd_version: str = Field(default="v1", min_length=1)
    kubeconfig_path: str | None = Field(default=None)
    external_ip: str | None = Field(default=None)
    reconcile_interval_seconds: float = Field(default=10.0, gt=0)
    watch_timeout_seconds: int = Field(default=300, ge=1)
    watch_backoff_base_seconds: float = Field(default=1.0, ge=0)
    watch_backoff_max_seconds: float = Field(default=30.0, gt=0)
    watch_jitter_min_multiplier: float = Field(default=0.5, gt=0)
    watch_jitter_max_multiplier: float = Field(default=1.5, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("namespace", "crd_group", "crd_version")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("kubeconfig_path", "external_ip")
    @classmethod
    def _validate_optional_string(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_value

    @field_validator("watch_backoff_max_seconds")
    @classmethod
    def _validate_backoff_cap_bounds(cls, value: float, info) -> float:
        backoff_base_seconds = float(info.data.get("watch_backoff_base_seconds", 1.0))
        if value < backoff_base_seconds:
            raise ValueError("watch_backoff_max_seconds must be greater than or equal to watch_backoff_base_seconds")
        return value

    @field_validator("watch_jitter_max_multiplier")
    @classmethod
    def _validate_jitter_bounds(cls, value: float, info) -> float:
        jitter_min_multiplier = float(info.data.get("watch_jitter_min_multiplier", 0.5))
        if value < jitter_min_multiplier:
            raise ValueError(
                "watch_jitter_max_multiplier must be greater than or equal to watch_jitter_min_multiplier"
            )
        return value


def config_load_settings() -> OperatorSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        OperatorSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return OperatorSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
