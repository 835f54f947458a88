#!/usr/bin/env python3
"""Main entrypoint for the Claude Code telemetry settings installer."""

import argparse
import json
import logging
import sys
from os import environ
from pathlib import Path
from typing import cast

from rich.console import Console
from rich.logging import RichHandler

from telemetry_settings import constants
from telemetry_settings.env_loader import load_configuration
from telemetry_settings.exceptions import (
    IdentityError,
    InvalidOverrideError,
    MalformedSettingsError,
    SettingsFileError,
    SourceFileParseError,
    UnsupportedPlatformError,
)
from telemetry_settings.identity import IdTokenIdentityProvider
from telemetry_settings.merger import merge_settings
from telemetry_settings.overrides import (
    apply_overrides,
    collect_flag_overrides,
    override_type,
)
from telemetry_settings.platform_resolver import detect_platform, resolve_settings_path
from telemetry_settings.reporter import report
from telemetry_settings.settings import TelemetrySettings


class Args(argparse.Namespace):
    endpoint: str | None
    service_name: str | None
    enable_telemetry: str | None
    protocol: str | None
    log_prompts: str | None
    resource_attributes: str | None
    id_token: str | None
    env_dir: Path | None
    print_config_and_exit: bool
    log_level: str
    rich_logs: bool


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s:%(filename)s:%(lineno)d] %(levelname)s: %(message)s"


def parse_args(argv: list[str] | None = None) -> Args:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="telemetry-settings",
        description=(
            "Merge OpenTelemetry environment variables from .env (or .env.example) "
            "and command line flags into Claude Code's managed-settings.json"
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--endpoint",
        type=override_type(constants.OTLP_ENDPOINT),
        help=f"OTLP collector endpoint ({constants.OTLP_ENDPOINT})",
    )

    parser.add_argument(
        "--service-name",
        type=override_type(constants.SERVICE_NAME),
        help=f"Service name reported to the collector ({constants.SERVICE_NAME})",
    )

    parser.add_argument(
        "--enable-telemetry",
        choices=constants.BINARY_FLAG_VALUES,
        help=f"Enable telemetry export ({constants.ENABLE_TELEMETRY})",
    )

    parser.add_argument(
        "--protocol",
        choices=constants.PROTOCOL_VALUES,
        help=f"OTLP export protocol ({constants.OTLP_PROTOCOL})",
    )

    parser.add_argument(
        "--log-prompts",
        choices=constants.BINARY_FLAG_VALUES,
        help=f"Include user prompts in exported logs ({constants.LOG_USER_PROMPTS})",
    )

    parser.add_argument(
        "--resource-attributes",
        type=override_type(constants.RESOURCE_ATTRIBUTES),
        help=f"Comma separated key=value pairs ({constants.RESOURCE_ATTRIBUTES})",
    )

    parser.add_argument(
        "--id-token",
        help="OIDC ID token identifying the user; its username is prepended to the "
        "resource attributes. Also accepted in the ID_TOKEN envvar.",
    )

    parser.add_argument(
        "--env-dir",
        type=Path,
        help="Directory containing .env / .env.example (defaults to the current directory)",
    )

    parser.add_argument(
        "--print-config-and-exit",
        action="store_true",
        help="Print the resolved configuration as JSON and exit without writing settings",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set the logging level",
    )

    parser.add_argument(
        "--rich-logs",
        action="store_true",
        help="Enable rich colored logging output",
    )

    return cast(Args, parser.parse_args(argv))


def configure_logging(log_level: str, use_rich: bool = False) -> None:
    """Configure logging with optional rich formatting.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_rich: Whether to use rich colored logging
    """
    if use_rich:
        logging.basicConfig(
            level=getattr(logging, log_level),
            format="%(message)s",
            datefmt="[%X]",
            handlers=[
                RichHandler(
                    console=Console(stderr=True),
                    show_path=True,
                    show_time=True,
                    show_level=True,
                    markup=False,
                    rich_tracebacks=True,
                )
            ],
        )
    else:
        logging.basicConfig(level=getattr(logging, log_level), format=LOG_FORMAT)


def resolve_settings(args: Args) -> TelemetrySettings:
    """Resolve settings from defaults, the override file and the flags."""
    loaded = load_configuration(args.env_dir or Path.cwd())

    user_id: str | None = None
    id_token = args.id_token or environ.get("ID_TOKEN")
    if id_token:
        user_id = IdTokenIdentityProvider(id_token).get_user_id()

    values = apply_overrides(loaded.values, collect_flag_overrides(args), user_id)
    return TelemetrySettings.from_env(values)


def main(argv: list[str] | None = None) -> int:
    """Main function."""
    args = parse_args(argv)

    configure_logging(args.log_level, args.rich_logs)

    logger.info("Claude Code telemetry settings installer")

    try:
        settings = resolve_settings(args)

        if args.print_config_and_exit:
            logger.info("Printing resolved configuration")
            print(json.dumps(settings.as_env(), indent=2, sort_keys=True))
            return 0

        platform_name = detect_platform()
        logger.info("Detected OS: %s", platform_name)

        settings_path = resolve_settings_path(platform_name)
        logger.info("Settings file: %s", settings_path)

        result = merge_settings(settings_path, settings)

        report(result, settings, platform_name)

    except MalformedSettingsError as e:
        logger.error("Existing settings file cannot be merged: %s", e)
        logger.info(
            "Fix or remove %s and run again; the file was not modified", e.path
        )
        return 1
    except SourceFileParseError as e:
        logger.error("Invalid configuration file: %s", e)
        logger.info("Use plain KEY=value lines; shell syntax is not evaluated")
        return 1
    except InvalidOverrideError as e:
        logger.error("Invalid override: %s", e)
        return 1
    except IdentityError as e:
        logger.error("Could not determine user identity: %s", e)
        logger.info("Provide a valid OIDC ID token with --id-token or ID_TOKEN")
        return 1
    except UnsupportedPlatformError as e:
        logger.error("%s", e)
        logger.info("Supported platforms: Linux, macOS, Windows (Git Bash/WSL)")
        return 1
    except SettingsFileError as e:
        logger.error("Failed to update settings: %s", e)
        return 1
    except OSError as e:
        logger.error("Filesystem error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Installer stopped by user")
        return 130
    except Exception as e:
        logger.error("Error running installer: %s", e, exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
