"""Host operating-system detection and toolchain layout per platform."""

from __future__ import annotations

import sys
from pathlib import PurePosixPath

from graalnative.errors import UnsupportedPlatformError
from graalnative.models import OperatingSystem

_ALIASES: dict[str, OperatingSystem] = {
    "darwin": "macos",
    "mac": "macos",
    "macos": "macos",
    "mac os x": "macos",
    "osx": "macos",
    "linux": "linux",
    "linux2": "linux",
    "win32": "windows",
    "windows": "windows",
    "cygwin": "windows",
}

# Location of the native-image launcher inside an extracted GraalVM CE archive.
BINARY_SUBPATHS: dict[OperatingSystem, PurePosixPath] = {
    "macos": PurePosixPath("Contents", "Home", "bin", "native-image"),
    "linux": PurePosixPath("bin", "native-image"),
}


def normalize_operating_system(identifier: str) -> OperatingSystem:
    """Map a ``sys.platform`` or ``platform.system()`` style name to a known OS."""
    return _ALIASES.get(identifier.strip().lower(), "unknown")


def host_platform() -> str:
    """Return the raw identifier of the running host, e.g. ``linux`` or ``darwin``."""
    return sys.platform


def binary_subpath(identifier: str) -> PurePosixPath:
    """Return the launcher path relative to the toolchain home for *identifier*."""
    subpath = BINARY_SUBPATHS.get(normalize_operating_system(identifier))
    if subpath is None:
        raise UnsupportedPlatformError(
            f"No GraalVM support for {identifier}",
            hint="native-image toolchains are resolved for macOS and Linux hosts only.",
            context={"operation": "resolve_toolchain", "os": identifier},
        )
    return subpath


__all__ = [
    "BINARY_SUBPATHS",
    "binary_subpath",
    "host_platform",
    "normalize_operating_system",
]
