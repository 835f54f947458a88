"""Configuration source loading.

Values are seeded from hardcoded defaults and then overwritten by the first
override file found in the working directory (``.env``, else
``.env.example``). Files are parsed strictly: nothing in them is evaluated,
so a hostile file cannot run commands.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv.parser import parse_stream

from telemetry_settings import constants
from telemetry_settings.exceptions import SourceFileParseError

logger = logging.getLogger(__name__)

# $VAR, ${VAR}, $(cmd) or `cmd`; a lone or escaped "$" is literal
SHELL_EXPANSION = re.compile(r"(?<!\\)\$[A-Za-z_{(]|`")


@dataclass(frozen=True)
class LoadedConfiguration:
    """Values produced by the loader and the file they came from."""

    values: dict[str, str]
    source: Path | None


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a ``KEY=value`` file.

    Args:
        path: File to parse.

    Returns:
        Mapping of every key defined in the file, later lines winning.

    Raises:
        SourceFileParseError: If any line is malformed or carries shell
            expansion. No partial result is returned.
    """
    values: dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as f:
        for binding in parse_stream(f):
            line = binding.original.line
            if binding.error:
                raise SourceFileParseError(
                    path, f"cannot parse {binding.original.string.strip()!r}", line
                )
            if binding.key is None:
                # blank line or comment
                continue
            if binding.value is None:
                raise SourceFileParseError(
                    path, f"missing '=' after key {binding.key!r}", line
                )
            if SHELL_EXPANSION.search(binding.value):
                raise SourceFileParseError(
                    path,
                    f"shell expansion is not supported in {binding.key!r}",
                    line,
                )
            values[binding.key] = binding.value
    return values


def find_env_file(directory: Path) -> Path | None:
    """Return the override file to use from ``directory``, if any."""
    for name in (constants.PRIMARY_ENV_FILE, constants.FALLBACK_ENV_FILE):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_configuration(directory: Path) -> LoadedConfiguration:
    """Load defaults and apply the override file found in ``directory``.

    Args:
        directory: Directory searched for ``.env`` and ``.env.example``.

    Returns:
        LoadedConfiguration with one value for every telemetry key.

    Raises:
        SourceFileParseError: If the chosen override file is malformed.
    """
    values = dict(constants.DEFAULT_VALUES)

    env_file = find_env_file(directory)
    if env_file is None:
        logger.info(
            "Neither %s nor %s found in %s, using default values",
            constants.PRIMARY_ENV_FILE,
            constants.FALLBACK_ENV_FILE,
            directory,
        )
        return LoadedConfiguration(values=values, source=None)

    if env_file.name == constants.FALLBACK_ENV_FILE:
        logger.info(
            "Using %s as %s file not found",
            env_file,
            constants.PRIMARY_ENV_FILE,
        )
    else:
        logger.info("Loading environment variables from %s", env_file)

    try:
        file_values = parse_env_file(env_file)
    except UnicodeDecodeError as e:
        raise SourceFileParseError(env_file, f"not valid UTF-8 ({e.reason})") from e

    for key, value in file_values.items():
        if key in values:
            values[key] = value
        else:
            logger.debug("Ignoring unknown key '%s' from %s", key, env_file)

    return LoadedConfiguration(values=values, source=env_file)
