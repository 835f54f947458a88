"""Shared pytest fixtures and configuration."""

import json

import pytest

from telemetry_settings import constants
from telemetry_settings.settings import TelemetrySettings


@pytest.fixture
def work_dir(tmp_path, monkeypatch):
    """Run the test from an empty working directory."""
    directory = tmp_path / "work"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the Linux settings lookup at a temporary XDG config home."""
    directory = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(directory))
    monkeypatch.delenv("WSL_DISTRO_NAME", raising=False)
    monkeypatch.delenv("ID_TOKEN", raising=False)
    return directory


@pytest.fixture
def settings_path(config_home):
    """Managed settings file inside the temporary config home."""
    return config_home / constants.SETTINGS_SUBDIR / constants.SETTINGS_FILENAME


@pytest.fixture
def sample_env_file():
    """Contents of a typical .env file."""
    return (
        "# Claude Code telemetry\n"
        "CLAUDE_CODE_ENABLE_TELEMETRY=1\n"
        "OTEL_EXPORTER_OTLP_ENDPOINT=https://collector.example.com:4317\n"
        "OTEL_EXPORTER_OTLP_PROTOCOL=grpc\n"
        "OTEL_LOGS_EXPORTER=otlp\n"
        "OTEL_LOG_USER_PROMPTS=0\n"
        "OTEL_METRICS_EXPORTER=otlp\n"
        'OTEL_RESOURCE_ATTRIBUTES="department=engineering,team.id=platform"\n'
        "OTEL_SERVICE_NAME=claude-code-team\n"
    )


@pytest.fixture
def default_settings():
    """Settings built from the hardcoded defaults."""
    return TelemetrySettings.from_env(constants.DEFAULT_VALUES)


@pytest.fixture
def existing_settings_file(settings_path):
    """Write a pre-existing settings document with foreign keys."""
    settings_path.parent.mkdir(parents=True)
    settings_path.write_text(
        json.dumps(
            {
                "other": True,
                "permissions": {"deny": ["Bash(curl:*)"]},
                "env": {"FOO": "bar", "OTEL_SERVICE_NAME": "old-name"},
            },
            indent=2,
        )
    )
    return settings_path
