"""Operating system detection and settings directory lookup."""

import logging
import os
import platform
from pathlib import Path
from typing import Literal, Mapping

from telemetry_settings import constants
from telemetry_settings.exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)

PlatformName = Literal["linux", "wsl", "macos", "windows", "unknown"]

WINDOWS_SYSTEM_PREFIXES = ("WINDOWS", "CYGWIN", "MINGW", "MSYS")


def detect_platform(
    system: str | None = None,
    release: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> PlatformName:
    """Detect the platform family.

    Args:
        system: Kernel name, defaults to ``platform.system()``.
        release: Kernel release, defaults to ``platform.release()``.
        environ: Environment, defaults to ``os.environ``.

    Returns:
        One of ``linux``, ``wsl``, ``macos``, ``windows`` or ``unknown``.
    """
    system = platform.system() if system is None else system
    release = platform.release() if release is None else release
    environ = os.environ if environ is None else environ

    if system.startswith("Linux"):
        if environ.get("WSL_DISTRO_NAME") or "microsoft" in release.lower():
            return "wsl"
        return "linux"
    if system.startswith("Darwin"):
        return "macos"
    if system.upper().startswith(WINDOWS_SYSTEM_PREFIXES):
        return "windows"
    return "unknown"


def resolve_settings_dir(
    platform_name: PlatformName,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Return the Claude Code settings directory for a platform.

    Raises:
        UnsupportedPlatformError: For unknown platforms, or on Windows when
            ``APPDATA`` is not set.
    """
    environ = os.environ if environ is None else environ
    home = Path.home() if home is None else home

    if platform_name in ("linux", "wsl"):
        config_home = environ.get("XDG_CONFIG_HOME") or str(home / ".config")
        return Path(config_home) / constants.SETTINGS_SUBDIR
    if platform_name == "macos":
        return home / "Library" / "Application Support" / constants.SETTINGS_SUBDIR
    if platform_name == "windows":
        appdata = environ.get("APPDATA")
        if not appdata:
            raise UnsupportedPlatformError(
                "APPDATA is not set, cannot locate the settings directory"
            )
        return Path(appdata) / constants.SETTINGS_SUBDIR
    raise UnsupportedPlatformError(f"Unsupported operating system: {platform_name}")


def resolve_settings_path(
    platform_name: PlatformName,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Return the managed settings file path for a platform."""
    return resolve_settings_dir(platform_name, environ, home) / constants.SETTINGS_FILENAME
