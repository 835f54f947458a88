"""Install OpenTelemetry export settings into Claude Code managed settings."""
