import subprocess
import sys
from pathlib import Path

import pytest
from conftest import FakeRunner

from graalnative.errors import (
    BuildEnvironmentError,
    ConfigurationError,
    ExternalProcessFailure,
    UnsupportedPlatformError,
)
from graalnative.invoker import (
    completed_record,
    execute,
    invoke,
    native_image_arguments,
    output_directory,
    prepare,
)
from graalnative.models import NativeImageConfig
from graalnative.observability import StructuredLogger

CONFIG = NativeImageConfig(
    main_class="com.example.Main",
    output_name="myapp",
    graal_version="19.3.0",
)


def test_argument_vector_matches_exact_order() -> None:
    args = native_image_arguments(
        main_class="com.example.Main",
        classpath="/proj/libs/a.jar",
        output_dir=Path("/proj/build/graal"),
        output_name="myapp",
    )
    assert args == [
        "-cp",
        "/proj/libs/a.jar",
        "-H:Path=/proj/build/graal",
        "-H:Name=myapp",
        "com.example.Main",
    ]


def test_omitting_output_name_drops_only_name_flag() -> None:
    args = native_image_arguments(
        main_class="com.example.Main",
        classpath="/proj/libs/a.jar",
        output_dir=Path("/proj/build/graal"),
    )
    assert args == ["-cp", "/proj/libs/a.jar", "-H:Path=/proj/build/graal", "com.example.Main"]


def test_output_directory_is_created_and_reusable(tmp_path: Path) -> None:
    first = output_directory(tmp_path)
    second = output_directory(tmp_path)

    assert first == second == (tmp_path / "build" / "graal").absolute()
    assert first.is_dir()


def test_output_directory_fails_when_creation_is_impossible(tmp_path: Path) -> None:
    project_root = tmp_path / "not-a-directory"
    project_root.write_text("file in the way\n", encoding="utf-8")

    with pytest.raises(BuildEnvironmentError) as excinfo:
        output_directory(project_root)

    assert "cannot be created" in str(excinfo.value)
    assert excinfo.value.code == "E_ENVIRONMENT"


def test_invoke_runs_resolved_executable_with_assembled_arguments(
    tmp_path: Path, fake_runner: FakeRunner
) -> None:
    jar = tmp_path / "build" / "libs" / "app.jar"
    dependency = tmp_path / "libs" / "a.jar"

    result = invoke(
        CONFIG,
        classpath_sources=([dependency, jar], [jar]),
        project_root=tmp_path,
        cache_root="/cache",
        operating_system="linux",
        runner=fake_runner,
    )

    output_dir = (tmp_path / "build" / "graal").absolute()
    assert fake_runner.calls == [
        [
            "/cache/19.3.0/graalvm-ce-19.3.0/bin/native-image",
            "-cp",
            f"{dependency}:{jar}",
            f"-H:Path={output_dir}",
            "-H:Name=myapp",
            "com.example.Main",
        ]
    ]
    assert result.ok
    assert result.stdout == "native-image ok\n"
    assert output_dir.is_dir()


def test_missing_main_class_fails_without_side_effects(
    tmp_path: Path, fake_runner: FakeRunner
) -> None:
    config = NativeImageConfig(graal_version="19.3.0")

    with pytest.raises(ConfigurationError) as excinfo:
        invoke(
            config,
            classpath_sources=(),
            project_root=tmp_path,
            cache_root="/cache",
            operating_system="linux",
            runner=fake_runner,
        )

    assert "graal.mainClass" in str(excinfo.value)
    assert not (tmp_path / "build").exists()
    assert fake_runner.calls == []


def test_missing_version_fails_before_spawn(tmp_path: Path, fake_runner: FakeRunner) -> None:
    config = NativeImageConfig(main_class="com.example.Main", graal_version="")

    with pytest.raises(ConfigurationError, match="graal.version"):
        invoke(
            config,
            classpath_sources=(),
            project_root=tmp_path,
            cache_root="/cache",
            operating_system="linux",
            runner=fake_runner,
        )

    assert not (tmp_path / "build").exists()
    assert fake_runner.calls == []


def test_unsupported_platform_spawns_nothing(tmp_path: Path, fake_runner: FakeRunner) -> None:
    with pytest.raises(UnsupportedPlatformError, match="win32"):
        invoke(
            CONFIG,
            classpath_sources=(),
            project_root=tmp_path,
            cache_root="/cache",
            operating_system="win32",
            runner=fake_runner,
        )

    assert fake_runner.calls == []
    assert not (tmp_path / "build").exists()


def test_non_zero_exit_is_propagated_unmodified(tmp_path: Path) -> None:
    runner = FakeRunner(returncode=137, stdout="partial", stderr="Error: Image build request failed")

    with pytest.raises(ExternalProcessFailure) as excinfo:
        invoke(
            CONFIG,
            classpath_sources=(["/proj/libs/a.jar"],),
            project_root=tmp_path,
            cache_root="/cache",
            operating_system="linux",
            runner=runner,
        )

    failure = excinfo.value
    assert failure.returncode == 137
    assert failure.result is not None
    assert failure.result.stdout == "partial"
    assert failure.result.stderr == "Error: Image build request failed"
    assert len(runner.calls) == 1


def test_non_zero_exit_returned_when_not_checking(tmp_path: Path) -> None:
    runner = FakeRunner(returncode=1, stderr="boom")

    result = invoke(
        CONFIG,
        classpath_sources=(),
        project_root=tmp_path,
        cache_root="/cache",
        operating_system="linux",
        runner=runner,
        check=False,
    )

    assert result.returncode == 1
    assert result.stderr == "boom"


def test_missing_binary_surfaces_as_launch_failure(tmp_path: Path) -> None:
    record = prepare(
        CONFIG,
        classpath_sources=(),
        project_root=tmp_path,
        cache_root=tmp_path / "cache",
        operating_system="linux",
    )

    with pytest.raises(ExternalProcessFailure) as excinfo:
        execute(record)

    assert excinfo.value.result is None
    assert excinfo.value.context["returncode"] == "not-started"
    assert isinstance(excinfo.value.__cause__, OSError)


def test_default_runner_uses_subprocess_without_env_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: dict[str, object] = {}

    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        seen["command"] = command
        seen.update(kwargs)
        return subprocess.CompletedProcess(command, 0, stdout="done", stderr="")

    monkeypatch.setattr("graalnative.invoker.subprocess.run", fake_run)

    result = invoke(
        CONFIG,
        classpath_sources=(),
        project_root=tmp_path,
        cache_root="/cache",
        operating_system="darwin",
    )

    assert result.stdout == "done"
    assert seen["command"] == [
        "/cache/19.3.0/graalvm-ce-19.3.0/Contents/Home/bin/native-image",
        *result.args,
    ]
    assert "env" not in seen
    assert "timeout" not in seen
    assert seen["check"] is False
    assert seen["errors"] == "replace"


def test_prepare_record_and_logging(tmp_path: Path, fake_runner: FakeRunner) -> None:
    logger = StructuredLogger()
    record = prepare(
        CONFIG,
        classpath_sources=(["/proj/libs/a.jar"],),
        project_root=tmp_path,
        cache_root="/cache",
        operating_system="Linux",
        logger=logger,
        task="nativeImage",
    )
    result = execute(record, runner=fake_runner, logger=logger, task="nativeImage")
    finished = completed_record(record, result)

    assert record.operating_system == "linux"
    assert record.graal_version == "19.3.0"
    assert record.classpath == (Path("/proj/libs/a.jar"),)
    assert record.returncode is None
    assert finished.returncode == 0
    assert [entry.phase for entry in logger.records] == ["resolve", "invoke", "complete"]
    assert all(entry.task == "nativeImage" for entry in logger.records)


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="Uses the Linux toolchain layout.")
def test_undecodable_compiler_output_keeps_exit_code(tmp_path: Path) -> None:
    cache_root = tmp_path / "cache"
    launcher = cache_root / "19.3.0" / "graalvm-ce-19.3.0" / "bin" / "native-image"
    launcher.parent.mkdir(parents=True)
    launcher.write_text("#!/bin/sh\nprintf '\\377\\376 build log\\n'\nexit 3\n", encoding="utf-8")
    launcher.chmod(0o755)

    with pytest.raises(ExternalProcessFailure) as excinfo:
        invoke(
            CONFIG,
            classpath_sources=(),
            project_root=tmp_path / "proj",
            cache_root=cache_root,
            operating_system="linux",
        )

    failure = excinfo.value
    assert failure.returncode == 3
    assert failure.result is not None
    assert failure.result.stdout.endswith(" build log\n")
    assert "\ufffd" in failure.result.stdout


def test_prepare_defaults_to_host_platform(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("graalnative.platforms.sys.platform", "darwin")
    record = prepare(CONFIG, classpath_sources=(), project_root=tmp_path, cache_root="/cache")
    assert record.operating_system == "macos"
    assert record.executable.endswith("/Contents/Home/bin/native-image")

    monkeypatch.setattr("graalnative.platforms.sys.platform", "freebsd13")
    with pytest.raises(UnsupportedPlatformError, match="freebsd13"):
        prepare(CONFIG, classpath_sources=(), project_root=tmp_path, cache_root="/cache")
