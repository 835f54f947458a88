"""Command-line overrides applied on top of the loaded configuration."""

import argparse
import logging
from typing import Callable

from telemetry_settings import constants
from telemetry_settings.exceptions import InvalidOverrideError

logger = logging.getLogger(__name__)


def _one_of(*allowed: str) -> Callable[[str], None]:
    def check(value: str) -> None:
        if value not in allowed:
            raise InvalidOverrideError(
                f"must be one of {', '.join(allowed)} (got {value!r})"
            )

    return check


def _non_empty(value: str) -> None:
    if not value:
        raise InvalidOverrideError("must not be empty")


VALIDATORS: dict[str, Callable[[str], None]] = {
    constants.ENABLE_TELEMETRY: _one_of(*constants.BINARY_FLAG_VALUES),
    constants.OTLP_ENDPOINT: _non_empty,
    constants.OTLP_PROTOCOL: _one_of(*constants.PROTOCOL_VALUES),
    constants.LOG_USER_PROMPTS: _one_of(*constants.BINARY_FLAG_VALUES),
    constants.RESOURCE_ATTRIBUTES: _non_empty,
    constants.SERVICE_NAME: _non_empty,
}

# argparse destination -> settings key
FLAG_KEYS = {
    "enable_telemetry": constants.ENABLE_TELEMETRY,
    "endpoint": constants.OTLP_ENDPOINT,
    "protocol": constants.OTLP_PROTOCOL,
    "log_prompts": constants.LOG_USER_PROMPTS,
    "resource_attributes": constants.RESOURCE_ATTRIBUTES,
    "service_name": constants.SERVICE_NAME,
}


def validate_override(key: str, value: str) -> str:
    """Validate an override value for ``key``.

    Returns:
        The value, unchanged.

    Raises:
        InvalidOverrideError: If ``key`` is not overridable or the value
            breaks the key's rule.
    """
    try:
        validator = VALIDATORS[key]
    except KeyError:
        raise InvalidOverrideError(f"{key} cannot be overridden")
    validator(value)
    return value


def override_type(key: str) -> Callable[[str], str]:
    """Build an argparse ``type`` callable enforcing the rule for ``key``."""

    def convert(value: str) -> str:
        try:
            return validate_override(key, value)
        except InvalidOverrideError as e:
            raise argparse.ArgumentTypeError(str(e))

    return convert


def collect_flag_overrides(args: argparse.Namespace) -> dict[str, str]:
    """Return the overrides supplied on the command line, keyed by setting."""
    overrides = {}
    for dest, key in FLAG_KEYS.items():
        value = getattr(args, dest, None)
        if value is not None:
            overrides[key] = value
    return overrides


def prepend_identity(resource_attributes: str, user_id: str) -> str:
    """Prepend the user identity to an OTel resource attribute string.

    Args:
        resource_attributes: Comma separated ``key=value`` pairs, may be empty.
        user_id: Identity to record.

    Returns:
        The attribute string with ``user.id=<user_id>`` first.
    """
    identity = f"{constants.USER_ID_ATTRIBUTE}={user_id}"
    if not resource_attributes:
        return identity
    return f"{identity},{resource_attributes}"


def apply_overrides(
    values: dict[str, str],
    overrides: dict[str, str],
    user_id: str | None = None,
) -> dict[str, str]:
    """Apply overrides on top of loaded values.

    Args:
        values: Values from the loader.
        overrides: Values from command-line flags, keyed by setting.
        user_id: Identity from an external identity provider. It has the same
            precedence as flags and is prepended to the resource attributes.

    Returns:
        A new mapping; ``values`` is left untouched.

    Raises:
        InvalidOverrideError: If an override fails validation.
    """
    resolved = dict(values)
    for key, value in overrides.items():
        validate_override(key, value)
        logger.info("Overriding %s from command line: %s", key, value)
        resolved[key] = value

    if user_id:
        resolved[constants.RESOURCE_ATTRIBUTES] = prepend_identity(
            resolved[constants.RESOURCE_ATTRIBUTES], user_id
        )
        logger.info(
            "Added %s to %s",
            constants.USER_ID_ATTRIBUTE,
            constants.RESOURCE_ATTRIBUTES,
        )

    return resolved
