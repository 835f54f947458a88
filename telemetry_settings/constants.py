# Settings keys written under the "env" object of the managed settings file
ENABLE_TELEMETRY = "CLAUDE_CODE_ENABLE_TELEMETRY"
OTLP_ENDPOINT = "OTEL_EXPORTER_OTLP_ENDPOINT"
OTLP_PROTOCOL = "OTEL_EXPORTER_OTLP_PROTOCOL"
LOGS_EXPORTER = "OTEL_LOGS_EXPORTER"
LOG_USER_PROMPTS = "OTEL_LOG_USER_PROMPTS"
METRICS_EXPORTER = "OTEL_METRICS_EXPORTER"
RESOURCE_ATTRIBUTES = "OTEL_RESOURCE_ATTRIBUTES"
SERVICE_NAME = "OTEL_SERVICE_NAME"

# Order matters for reporting
TELEMETRY_KEYS = (
    ENABLE_TELEMETRY,
    OTLP_ENDPOINT,
    OTLP_PROTOCOL,
    LOGS_EXPORTER,
    LOG_USER_PROMPTS,
    METRICS_EXPORTER,
    RESOURCE_ATTRIBUTES,
    SERVICE_NAME,
)

DEFAULT_VALUES = {
    ENABLE_TELEMETRY: "1",
    OTLP_ENDPOINT: "http://localhost:4317",
    OTLP_PROTOCOL: "grpc",
    LOGS_EXPORTER: "otlp",
    LOG_USER_PROMPTS: "0",
    METRICS_EXPORTER: "otlp",
    RESOURCE_ATTRIBUTES: "",
    SERVICE_NAME: "claude-code",
}

BINARY_FLAG_VALUES = ("0", "1")
PROTOCOL_VALUES = ("grpc", "http")

# Override files searched in the working directory, in order of preference
PRIMARY_ENV_FILE = ".env"
FALLBACK_ENV_FILE = ".env.example"

SETTINGS_SUBDIR = "claude-code"
SETTINGS_FILENAME = "managed-settings.json"

# Resource attribute carrying the identity from an OIDC ID token
USER_ID_ATTRIBUTE = "user.id"
