"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest


@dataclass(slots=True)
class FakeCompleted:
    returncode: int
    stdout: str = ""
    stderr: str = ""


@dataclass(slots=True)
class FakeRunner:
    """Stands in for the native-image process and records every command."""

    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    calls: list[list[str]] = field(default_factory=list)

    def __call__(self, command: Sequence[str]) -> FakeCompleted:
        self.calls.append(list(command))
        return FakeCompleted(returncode=self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner(stdout="native-image ok\n")
