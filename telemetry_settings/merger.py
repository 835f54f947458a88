"""Merge resolved telemetry settings into the managed settings document.

The merge only touches the telemetry keys under ``env``; every other key in
the document is preserved. The file is replaced atomically so readers never
see a partially written document and a failed run leaves the previous file
as it was.
"""

import copy
import json
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from telemetry_settings.exceptions import MalformedSettingsError, SettingsFileError
from telemetry_settings.settings import TelemetrySettings

logger = logging.getLogger(__name__)

ENV_SECTION = "env"


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a settings merge."""

    path: Path
    document: dict[str, Any]
    created: bool


def merge_env(
    document: dict[str, Any], env: dict[str, str], path: Path | None = None
) -> dict[str, Any]:
    """Return a copy of ``document`` with ``env`` entries set.

    Args:
        document: Parsed settings document.
        env: Entries to set under the ``env`` object.
        path: Source of ``document``, used in error messages.

    Raises:
        MalformedSettingsError: If the document or its ``env`` value is not
            a JSON object.
    """
    source = path or Path("<settings>")
    if not isinstance(document, dict):
        raise MalformedSettingsError(
            source, f"expected a JSON object, got {type(document).__name__}"
        )

    merged = copy.deepcopy(document)
    section = merged.setdefault(ENV_SECTION, {})
    if not isinstance(section, dict):
        raise MalformedSettingsError(
            source,
            f"expected '{ENV_SECTION}' to be a JSON object, got {type(section).__name__}",
        )
    section.update(env)
    return merged


def read_settings(path: Path) -> dict[str, Any] | None:
    """Read an existing settings document.

    Returns:
        The parsed document, or None when the file does not exist.

    Raises:
        MalformedSettingsError: If the file is not valid JSON.
        SettingsFileError: If the file exists but cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise MalformedSettingsError(path, f"not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise SettingsFileError(path, f"cannot read settings file: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedSettingsError(path, f"invalid JSON ({e.msg})", e.lineno) from e


def target_mode(path: Path) -> int:
    """Return the permission bits the written file should carry.

    An existing file keeps its mode; a new one gets the default file mode
    under the current umask.
    """
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def atomic_write_json(path: Path, document: dict[str, Any]) -> None:
    """Write ``document`` to ``path`` through a temporary file and rename.

    The temporary file lives next to the target so the final
    ``os.replace`` stays on one filesystem. It is removed if any step fails.
    """
    payload = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    mode = target_mode(path)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            prefix=path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        # NamedTemporaryFile creates 0600
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink(missing_ok=True)


def merge_settings(path: Path, settings: TelemetrySettings) -> MergeResult:
    """Create or update the managed settings file at ``path``.

    Args:
        path: Managed settings file.
        settings: Resolved telemetry settings.

    Returns:
        MergeResult with the written document.

    Raises:
        MalformedSettingsError: If an existing file cannot be merged into.
        SettingsFileError: On any filesystem failure.
    """
    env = settings.as_env()

    if not path.parent.is_dir():
        logger.info("Creating settings directory: %s", path.parent)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SettingsFileError(
            path.parent, f"cannot create settings directory: {e}"
        ) from e

    existing = read_settings(path)
    if existing is None:
        logger.info(
            "Creating new %s with telemetry environment variables", path.name
        )
        document = {ENV_SECTION: env}
    else:
        logger.info(
            "Found existing %s, merging with telemetry environment variables",
            path.name,
        )
        document = merge_env(existing, env, path)

    try:
        atomic_write_json(path, document)
    except OSError as e:
        raise SettingsFileError(path, f"cannot write settings file: {e}") from e

    logger.info("Successfully updated %s", path)
    return MergeResult(path=path, document=document, created=existing is None)
