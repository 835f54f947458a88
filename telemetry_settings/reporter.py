"""Operator-facing summary of a completed merge."""

import json
import sys
from pathlib import Path
from typing import TextIO

from telemetry_settings.merger import MergeResult
from telemetry_settings.platform_resolver import PlatformName
from telemetry_settings.settings import TelemetrySettings

SEPARATOR = "=" * 38

ADVISORIES: dict[str, tuple[str, ...]] = {
    "wsl": (
        "Note: On WSL, make sure you're running this installer in your Linux environment,",
        "not from Windows PowerShell or Command Prompt.",
    ),
    "windows": (
        "Note: On Windows, the settings path is taken from APPDATA of the shell you ran",
        "this installer from. Run it from the same environment Claude Code runs in.",
    ),
}


def render_document(path: Path) -> str:
    """Re-read the settings file and return it pretty printed."""
    document = json.loads(path.read_text(encoding="utf-8"))
    return json.dumps(document, indent=2, ensure_ascii=False)


def report(
    result: MergeResult,
    settings: TelemetrySettings,
    platform_name: PlatformName,
    stream: TextIO | None = None,
) -> None:
    """Print the written document and the resolved settings.

    Args:
        result: Outcome of the merge.
        settings: Resolved settings that were merged.
        platform_name: Detected platform, selects the advisory note.
        stream: Output stream, defaults to stdout.
    """
    out = stream or sys.stdout

    def emit(line: str = "") -> None:
        print(line, file=out)

    emit()
    emit(f"Current {result.path.name} content:")
    emit(SEPARATOR)
    emit(render_document(result.path))
    emit(SEPARATOR)
    emit()
    emit("Successfully merged telemetry environment variables into Claude Code managed settings!")
    emit()
    emit("The following environment variables are now available to Claude Code:")
    for key, value in settings.as_env().items():
        emit(f"  - {key}={value}")
    emit()
    emit("You may need to restart Claude Code for the changes to take effect.")

    advisory = ADVISORIES.get(platform_name)
    if advisory:
        emit()
        for line in advisory:
            emit(line)
