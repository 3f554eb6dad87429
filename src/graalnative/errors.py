"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graalnative.models import ProcessResult


class ErrorCode(StrEnum):
    """Stable error identifiers used across API surfaces."""

    CONFIGURATION = "E_CONFIGURATION"
    ENVIRONMENT = "E_ENVIRONMENT"
    UNSUPPORTED_PLATFORM = "E_UNSUPPORTED_PLATFORM"
    EXTERNAL_PROCESS = "E_EXTERNAL_PROCESS"


class GraalNativeError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ConfigurationError(GraalNativeError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONFIGURATION, hint=hint, context=context)


class BuildEnvironmentError(GraalNativeError):
    """The host filesystem cannot provide what the build needs."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.ENVIRONMENT, hint=hint, context=context)


class UnsupportedPlatformError(GraalNativeError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.UNSUPPORTED_PLATFORM,
            hint=hint,
            context=context,
        )


class ExternalProcessFailure(GraalNativeError):
    """The compiler could not be started or exited non-zero.

    ``result`` holds the unmodified process result when the process ran.
    """

    result: ProcessResult | None

    def __init__(
        self,
        message: str,
        *,
        result: ProcessResult | None = None,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.EXTERNAL_PROCESS, hint=hint, context=context)
        self.result = result

    @property
    def returncode(self) -> int | None:
        return None if self.result is None else self.result.returncode


__all__ = [
    "BuildEnvironmentError",
    "ConfigurationError",
    "ErrorCode",
    "ExternalProcessFailure",
    "GraalNativeError",
    "UnsupportedPlatformError",
]
