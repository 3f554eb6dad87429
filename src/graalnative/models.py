"""Core typed dataclasses for native-image configuration and results."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import cbor2

OperatingSystem = Literal["macos", "linux", "windows", "unknown"]


@dataclass(frozen=True, slots=True)
class NativeImageConfig:
    main_class: str | None = None
    output_name: str | None = None
    graal_version: str | None = None


@dataclass(frozen=True, slots=True)
class ProcessResult:
    executable: str
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> tuple[str, ...]:
        return (self.executable, *self.args)


@dataclass(frozen=True, slots=True)
class InvocationRecord:
    """What a single native-image run was given and how it ended."""

    executable: str
    args: tuple[str, ...]
    output_dir: Path
    classpath: tuple[Path, ...]
    operating_system: OperatingSystem
    graal_version: str
    returncode: int | None = None
    schema_version: int = 1

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def _payload(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "executable": self.executable,
            "args": list(self.args),
            "output_dir": str(self.output_dir),
            "classpath": [str(entry) for entry in self.classpath],
            "operating_system": self.operating_system,
            "graal_version": self.graal_version,
            "returncode": self.returncode,
        }


__all__ = [
    "InvocationRecord",
    "NativeImageConfig",
    "OperatingSystem",
    "ProcessResult",
]
