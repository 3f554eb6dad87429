"""Run GraalVM's native-image compiler against a project's classpath.

The invocation is split in two: :func:`prepare` validates configuration and
resolves every path (creating only the output directory), and :func:`execute`
spawns the compiler once. :func:`invoke` does both.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

from graalnative.classpath import classpath_argument, collect_classpath
from graalnative.errors import BuildEnvironmentError, ConfigurationError, ExternalProcessFailure
from graalnative.models import InvocationRecord, NativeImageConfig, ProcessResult
from graalnative.observability import StructuredLogger
from graalnative.platforms import host_platform, normalize_operating_system
from graalnative.toolchain import cache_root_from_env, native_image_executable

OUTPUT_SUBDIR = Path("build", "graal")

Runner = Callable[[Sequence[str]], Any]


def output_directory(project_root: str | Path) -> Path:
    """Return ``<project_root>/build/graal``, creating it when missing."""
    output_dir = (Path(project_root) / OUTPUT_SUBDIR).absolute()
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildEnvironmentError(
            f"Output directory does not exist and cannot be created: {output_dir}",
            hint="Check that the project directory is writable.",
            context={"operation": "prepare", "path": str(output_dir), "reason": str(exc)},
        ) from exc
    return output_dir


def native_image_arguments(
    *,
    main_class: str,
    classpath: str,
    output_dir: Path,
    output_name: str | None = None,
) -> list[str]:
    args = ["-cp", classpath, f"-H:Path={output_dir}"]
    if output_name:
        args.append(f"-H:Name={output_name}")
    args.append(main_class)
    return args


def prepare(
    config: NativeImageConfig,
    *,
    classpath_sources: Iterable[Iterable[str | Path]],
    project_root: str | Path,
    cache_root: str | Path | None = None,
    operating_system: str | None = None,
    logger: StructuredLogger | None = None,
    task: str | None = None,
) -> InvocationRecord:
    main_class, graal_version = _require_config(config)
    if cache_root is None:
        cache_root = cache_root_from_env()
    if operating_system is None:
        operating_system = host_platform()

    executable = native_image_executable(cache_root, graal_version, operating_system)
    output_dir = output_directory(project_root)
    classpath = collect_classpath(*classpath_sources)
    args = native_image_arguments(
        main_class=main_class,
        classpath=classpath_argument(classpath),
        output_dir=output_dir,
        output_name=config.output_name,
    )
    if logger is not None:
        logger.log(
            operation="native_image",
            task=task,
            phase="resolve",
            message="Resolved native-image toolchain and output directory.",
            extra={
                "executable": str(executable),
                "output_dir": str(output_dir),
                "classpath_entries": len(classpath),
            },
        )
    return InvocationRecord(
        executable=str(executable),
        args=tuple(args),
        output_dir=output_dir,
        classpath=classpath,
        operating_system=normalize_operating_system(operating_system),
        graal_version=graal_version,
    )


def execute(
    record: InvocationRecord,
    *,
    runner: Runner | None = None,
    check: bool = True,
    logger: StructuredLogger | None = None,
    task: str | None = None,
) -> ProcessResult:
    """Spawn the compiler described by *record* and wait for it to exit."""
    command = [record.executable, *record.args]
    run = runner or _run_subprocess
    if logger is not None:
        logger.log(
            operation="native_image",
            task=task,
            phase="invoke",
            message="Running native-image.",
            extra={"command": command},
        )
    try:
        completed = run(command)
    except OSError as exc:
        if logger is not None:
            logger.log(
                operation="native_image",
                task=task,
                phase="failed",
                level="error",
                message="native-image could not be started.",
            )
        raise ExternalProcessFailure(
            "native-image could not be started.",
            hint="Make sure the GraalVM toolchain has been downloaded for this version.",
            context={
                "operation": "execute",
                "executable": record.executable,
                "returncode": "not-started",
                "reason": str(exc),
            },
        ) from exc

    result = ProcessResult(
        executable=record.executable,
        args=record.args,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if logger is not None:
        logger.log(
            operation="native_image",
            task=task,
            phase="complete" if result.ok else "failed",
            level="info" if result.ok else "error",
            message=f"native-image exited with {result.returncode}.",
            extra={"returncode": result.returncode},
        )
    if check and not result.ok:
        raise ExternalProcessFailure(
            "native-image failed.",
            result=result,
            hint="Check native-image output for details.",
            context={
                "operation": "execute",
                "returncode": str(result.returncode),
                "command": " ".join(result.command),
            },
        )
    return result


def invoke(
    config: NativeImageConfig,
    *,
    classpath_sources: Iterable[Iterable[str | Path]],
    project_root: str | Path,
    cache_root: str | Path | None = None,
    operating_system: str | None = None,
    runner: Runner | None = None,
    check: bool = True,
    logger: StructuredLogger | None = None,
) -> ProcessResult:
    record = prepare(
        config,
        classpath_sources=classpath_sources,
        project_root=project_root,
        cache_root=cache_root,
        operating_system=operating_system,
        logger=logger,
    )
    return execute(record, runner=runner, check=check, logger=logger)


def completed_record(record: InvocationRecord, result: ProcessResult) -> InvocationRecord:
    return replace(record, returncode=result.returncode)


def _require_config(config: NativeImageConfig) -> tuple[str, str]:
    if not config.main_class:
        raise ConfigurationError(
            "nativeImage requires graal.mainClass to be defined.",
            hint="Set graal.mainClass to the fully qualified name of the entry point.",
            context={"operation": "validate", "field": "mainClass"},
        )
    if not config.graal_version:
        raise ConfigurationError(
            "nativeImage requires graal.version to be defined.",
            hint="Set graal.version to the GraalVM CE release to compile with.",
            context={"operation": "validate", "field": "version"},
        )
    return config.main_class, config.graal_version


def _run_subprocess(command: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        list(command),
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
    )


__all__ = [
    "OUTPUT_SUBDIR",
    "Runner",
    "completed_record",
    "execute",
    "invoke",
    "native_image_arguments",
    "output_directory",
    "prepare",
]
