"""Tests for settings loading, defaults and startup validation."""

from __future__ import annotations

import pytest

from ats_runner.config import AtsSettings, SettingsLoadError, config_load_settings


def _set_required_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ATS_APP_ID", "app-1")
    monkeypatch.setenv("ATS_API_TOKEN", "tok-1")
    monkeypatch.setenv("ATS_JOB_TEMPLATE_ID", "tpl-1")
    monkeypatch.setenv("ATS_BASE_URL", "https://ats.example.test")


def test_config_settings_load_from_environment_with_documented_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Load required values from environment and keep poll defaults.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate loaded values and defaults.

    Raises:
        AssertionError: Raised when defaults drift.
    """

    _set_required_environment(monkeypatch)

    settings = config_load_settings()

    assert settings.ats_app_id == "app-1"
    assert settings.ats_rerun_automatically is False
    assert settings.ats_poll_initial_wait_seconds == 3.0
    assert settings.ats_poll_max_attempts == 350
    assert (settings.ats_poll_first_tier_seconds, settings.ats_poll_second_tier_seconds) == (15.0, 30.0)
    assert (settings.ats_poll_second_tier_start_index, settings.ats_poll_third_tier_start_index) == (41, 81)
    assert settings.ats_poll_third_tier_seconds == 60.0
    assert settings.ats_poll_skip_trailing_sleep is False
    assert settings.ats_transport_retry_attempts == 1


def test_config_settings_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prefer explicit overrides and ignore None overrides."""

    _set_required_environment(monkeypatch)

    settings = config_load_settings(ats_job_template_id="tpl-override", ats_app_id=None, ats_rerun_automatically=True)

    assert settings.ats_job_template_id == "tpl-override"
    assert settings.ats_app_id == "app-1"
    assert settings.ats_rerun_automatically is True


def test_config_settings_reads_dotenv_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Read values from `.env` in the working directory."""

    (tmp_path / ".env").write_text(
        "ATS_APP_ID=app-env\nATS_API_TOKEN=tok-env\nATS_JOB_TEMPLATE_ID=tpl-env\nATS_BASE_URL=https://env.test\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    settings = config_load_settings()

    assert settings.ats_app_id == "app-env"
    assert settings.ats_base_url == "https://env.test"


@pytest.mark.parametrize("missing_variable", ["ATS_APP_ID", "ATS_API_TOKEN", "ATS_JOB_TEMPLATE_ID", "ATS_BASE_URL"])
def test_config_settings_missing_required_value_raises_load_error(
    monkeypatch: pytest.MonkeyPatch,
    missing_variable: str,
) -> None:
    """Raise SettingsLoadError when a required identifier is missing.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        missing_variable: Variable removed from the environment.
    """

    _set_required_environment(monkeypatch)
    monkeypatch.delenv(missing_variable)

    with pytest.raises(SettingsLoadError, match="validation failed"):
        config_load_settings()


def test_config_settings_blank_identifier_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reject whitespace-only identifiers."""

    _set_required_environment(monkeypatch)
    monkeypatch.setenv("ATS_API_TOKEN", "   ")

    with pytest.raises(SettingsLoadError):
        config_load_settings()


@pytest.mark.parametrize(
    ("variable_name", "value"),
    [
        ("ATS_POLL_THIRD_TIER_START_INDEX", "41"),
        ("ATS_POLL_MAX_ATTEMPTS", "0"),
        ("ATS_TRANSPORT_BACKOFF_MAX_SECONDS", "1"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_config_settings_invalid_bounds_are_rejected(
    monkeypatch: pytest.MonkeyPatch,
    variable_name: str,
    value: str,
) -> None:
    """Reject out-of-range poll, retry and logging settings.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        variable_name: Environment variable under test.
        value: Invalid value.
    """

    _set_required_environment(monkeypatch)
    monkeypatch.setenv(variable_name, value)

    with pytest.raises(SettingsLoadError):
        config_load_settings()


def test_config_settings_log_level_is_normalized() -> None:
    """Upper-case configured log level."""

    settings = AtsSettings(
        ats_app_id="a",
        ats_api_token="t",
        ats_job_template_id="j",
        ats_base_url="https://ats.example.test",
        log_level="debug",
    )

    assert settings.log_level == "DEBUG"
