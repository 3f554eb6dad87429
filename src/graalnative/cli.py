"""Command-line entry point for running native-image outside a build tool."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import cast

from graalnative.errors import ExternalProcessFailure, GraalNativeError
from graalnative.project import GraalPlugin, NativeImageTask, Project, graal_extension

EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="graal-native")
    commands = parser.add_subparsers(dest="command", required=True)

    native = commands.add_parser(
        "native-image",
        help="Runs GraalVM's native-image command with configured options and parameters.",
    )
    native.add_argument("--main-class")
    native.add_argument("--graal-version")
    native.add_argument("--output-name")
    native.add_argument("--project-dir", type=Path, default=Path("."))
    native.add_argument("--cache-dir", type=Path)
    native.add_argument(
        "--classpath",
        action="append",
        default=[],
        help="Runtime classpath entry; repeatable.",
    )
    native.add_argument(
        "--jar",
        action="append",
        default=[],
        help="Build artifact output; repeatable.",
    )
    native.add_argument("--record", type=Path, help="Write the invocation record as JSON.")
    native.add_argument("--log", type=Path, help="Write structured logs as JSON lines.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    runtime_classpath = tuple(args.classpath)
    jar_outputs = tuple(args.jar)
    project = Project(
        project_dir=args.project_dir,
        runtime_classpath=lambda: runtime_classpath,
        jar_outputs=lambda: jar_outputs,
    ).apply(GraalPlugin())

    extension = graal_extension(project)
    extension.main_class.set(args.main_class)
    extension.output_name.set(args.output_name)
    extension.version.set(args.graal_version)
    if args.cache_dir is not None:
        extension.cache_dir.set(args.cache_dir)

    task = cast(NativeImageTask, project.task("nativeImage"))
    try:
        result = task.run()
    except ExternalProcessFailure as exc:
        if exc.result is not None:
            _emit(exc.result.stdout, exc.result.stderr)
        print(f"error: {exc}", file=sys.stderr)
        return _exit_status(exc.returncode)
    except GraalNativeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    finally:
        if args.log is not None:
            project.logger.to_json_lines(args.log)
        if args.record is not None and task.last_record is not None:
            task.last_record.to_json(args.record)

    _emit(result.stdout, result.stderr)
    return 0


def _exit_status(returncode: int | None) -> int:
    if returncode is None:
        return 1
    if returncode < 0:
        # Killed by signal N; shells report 128 + N.
        return 128 + abs(returncode)
    return returncode or 1


def _emit(stdout: str, stderr: str) -> None:
    if stdout:
        sys.stdout.write(stdout)
    if stderr:
        sys.stderr.write(stderr)


if __name__ == "__main__":
    raise SystemExit(main())
