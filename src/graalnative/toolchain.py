"""Cached GraalVM CE toolchain lookup.

Toolchains are downloaded and extracted by a separate step into
``<cache_root>/<version>/graalvm-ce-<version>``; this module only computes
where the ``native-image`` launcher lives inside that layout.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from graalnative.errors import ConfigurationError
from graalnative.platforms import binary_subpath

CACHE_DIR_ENV = "GRAAL_NATIVE_CACHE_DIR"
DEFAULT_CACHE_DIR = Path.home() / ".gradle" / "caches" / "com.palantir.graal"


def cache_root_from_env(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CACHE_DIR


def toolchain_home(cache_root: str | Path, version: str) -> Path:
    _validate_version(version)
    return Path(cache_root) / version / f"graalvm-ce-{version}"


def native_image_executable(cache_root: str | Path, version: str, operating_system: str) -> Path:
    """Return the absolute launcher path; the file is not required to exist."""
    home = toolchain_home(cache_root, version)
    return (home / binary_subpath(operating_system)).absolute()


def _validate_version(version: str) -> None:
    if not version or "/" in version or "\\" in version or version in {".", ".."}:
        raise ConfigurationError(
            f"Invalid GraalVM version: {version!r}",
            hint="Set graal.version to a release identifier such as '19.3.0'.",
            context={"operation": "resolve_toolchain", "version": version},
        )


__all__ = [
    "CACHE_DIR_ENV",
    "DEFAULT_CACHE_DIR",
    "cache_root_from_env",
    "native_image_executable",
    "toolchain_home",
]
