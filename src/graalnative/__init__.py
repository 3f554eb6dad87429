"""Public package entrypoint for running GraalVM native-image builds."""

from .classpath import classpath_argument, collect_classpath
from .errors import (
    BuildEnvironmentError,
    ConfigurationError,
    ErrorCode,
    ExternalProcessFailure,
    GraalNativeError,
    UnsupportedPlatformError,
)
from .invoker import invoke, native_image_arguments, output_directory
from .models import InvocationRecord, NativeImageConfig, ProcessResult
from .observability import LogRecord, StructuredLogger
from .project import GraalExtension, GraalPlugin, NativeImageTask, Project, Property
from .toolchain import native_image_executable, toolchain_home

__all__ = [
    "BuildEnvironmentError",
    "ConfigurationError",
    "ErrorCode",
    "ExternalProcessFailure",
    "GraalExtension",
    "GraalNativeError",
    "GraalPlugin",
    "InvocationRecord",
    "LogRecord",
    "NativeImageConfig",
    "NativeImageTask",
    "ProcessResult",
    "Project",
    "Property",
    "StructuredLogger",
    "UnsupportedPlatformError",
    "classpath_argument",
    "collect_classpath",
    "invoke",
    "native_image_arguments",
    "native_image_executable",
    "output_directory",
    "toolchain_home",
]
