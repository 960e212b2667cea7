"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AtsSettings(BaseSettings):
    """Settings for one ATS test-run orchestration.

    Environment variable names map directly to field names in uppercase.
    Example: `ats_app_id` reads from `ATS_APP_ID`.

    Attributes:
        ats_app_id: ATS application identifier.
        ats_api_token: ATS application API token.
        ats_job_template_id: ATS job template identifier.
        ats_base_url: ATS service base URL.
        ats_rerun_automatically: Whether not-passed test cases are rerun up to twice.
        ats_request_timeout_seconds: HTTP request timeout.
        ats_escape_request_values: Whether request parameter values are XML-escaped.
        ats_poll_initial_wait_seconds: Delay before the first status query.
        ats_poll_max_attempts: Maximum status queries per job.
        ats_poll_first_tier_seconds: Wait after queries in the first tier.
        ats_poll_second_tier_start_index: First zero-based attempt of the second tier.
        ats_poll_second_tier_seconds: Wait after queries in the second tier.
        ats_poll_third_tier_start_index: First zero-based attempt of the third tier.
        ats_poll_third_tier_seconds: Wait after queries in the third tier.
        ats_poll_skip_trailing_sleep: Return as soon as Done is seen instead of sleeping out the tier wait.
        ats_transport_retry_attempts: Delivery attempts per ATS call; 1 disables transport retry.
        ats_transport_backoff_base_seconds: Base delay between delivery attempts.
        ats_transport_backoff_max_seconds: Delivery retry delay cap.
        log_level: Root logging level for the command-line entry point.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    ats_app_id: str = Field(min_length=1)
    ats_api_token: str = Field(min_length=1)
    ats_job_template_id: str = Field(min_length=1)
    ats_base_url: str = Field(min_length=1)
    ats_rerun_automatically: bool = Field(default=False)
    ats_request_timeout_seconds: float = Field(default=30.0, gt=0)
    ats_escape_request_values: bool = Field(default=True)
    ats_poll_initial_wait_seconds: float = Field(default=3.0, ge=0)
    ats_poll_max_attempts: int = Field(default=350, ge=1)
    ats_poll_first_tier_seconds: float = Field(default=15.0, ge=0)
    ats_poll_second_tier_start_index: int = Field(default=41, ge=1)
    ats_poll_second_tier_seconds: float = Field(default=30.0, ge=0)
    ats_poll_third_tier_start_index: int = Field(default=81, ge=1)
    ats_poll_third_tier_seconds: float = Field(default=60.0, ge=0)
    ats_poll_skip_trailing_sleep: bool = Field(default=False)
    ats_transport_retry_attempts: int = Field(default=1, ge=1)
    ats_transport_backoff_base_seconds: float = Field(default=2.0, ge=0)
    ats_transport_backoff_max_seconds: float = Field(default=30.0, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("ats_app_id", "ats_api_token", "ats_job_template_id", "ats_base_url")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("ats_poll_third_tier_start_index")
    @classmethod
    def _validate_tier_order(cls, value: int, info) -> int:
        second_tier_start_index = int(info.data.get("ats_poll_second_tier_start_index", 41))
        if value <= second_tier_start_index:
            raise ValueError(
                "ats_poll_third_tier_start_index must be greater than ats_poll_second_tier_start_index"
            )
        return value

    @field_validator("ats_transport_backoff_max_seconds")
    @classmethod
    def _validate_backoff_cap_bounds(cls, value: float, info) -> float:
        backoff_base_seconds = float(info.data.get("ats_transport_backoff_base_seconds", 2.0))
        if value < backoff_base_seconds:
            raise ValueError(
                "ats_transport_backoff_max_seconds must be greater than or equal to ats_transport_backoff_base_seconds"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return normalized_value


def config_load_settings(**overrides: object) -> AtsSettings:
    """Load and validate settings from environment and dotenv.

    Args:
        overrides: Explicit field values, e.g. from command-line flags; they win over the environment.

    Returns:
        AtsSettings: Validated settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    explicit_values = {name: value for name, value in overrides.items() if value is not None}
    try:
        return AtsSettings(**explicit_values)
    except ValidationError as error:
        raise SettingsLoadError(
            f"ATS configuration validation failed. Update .env, environment variables or flags. Details: {error}"
        ) from error
