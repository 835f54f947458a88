from pydantic import BaseModel, ConfigDict, Field

from telemetry_settings import constants


class TelemetrySettings(BaseModel):
    """Resolved telemetry settings written to the managed settings file.

    Settings are immutable per run. Field aliases are the environment
    variable names Claude Code reads.
    """

    model_config = ConfigDict(frozen=True)

    enable_telemetry: str = Field(alias=constants.ENABLE_TELEMETRY)
    otlp_endpoint: str = Field(alias=constants.OTLP_ENDPOINT)
    otlp_protocol: str = Field(alias=constants.OTLP_PROTOCOL)
    logs_exporter: str = Field(alias=constants.LOGS_EXPORTER)
    log_user_prompts: str = Field(alias=constants.LOG_USER_PROMPTS)
    metrics_exporter: str = Field(alias=constants.METRICS_EXPORTER)
    resource_attributes: str = Field(alias=constants.RESOURCE_ATTRIBUTES)
    service_name: str = Field(alias=constants.SERVICE_NAME)

    @classmethod
    def from_env(cls, values: dict[str, str]) -> "TelemetrySettings":
        """Build settings from a mapping keyed by environment variable name.

        Keys outside the telemetry set are ignored.
        """
        return cls.model_validate(
            {key: values[key] for key in constants.TELEMETRY_KEYS if key in values}
        )

    def as_env(self) -> dict[str, str]:
        """Return the settings keyed by environment variable name."""
        return self.model_dump(by_alias=True)
