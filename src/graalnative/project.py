"""Build-tool integration: project model, ``graal`` extension, and tasks.

The invoker works on plain values; this module is the adapter that resolves
those values from lazily configured properties at the moment a task runs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, Protocol, Self, TypeVar, runtime_checkable

from .errors import ConfigurationError, ExternalProcessFailure
from .invoker import Runner, completed_record, execute, prepare
from .models import InvocationRecord, NativeImageConfig, ProcessResult
from .observability import StructuredLogger
from .toolchain import cache_root_from_env

T = TypeVar("T")

PathProvider = Callable[[], Iterable[str | Path]]

TASK_GROUP = "Graal"


class Property(Generic[T]):
    """An optional value that is resolved only when read.

    ``set`` accepts either a value or a zero-argument callable producing one;
    callables are evaluated on every read so late configuration is observed.
    """

    __slots__ = ("_name", "_source")

    def __init__(self, name: str, value: T | Callable[[], T | None] | None = None) -> None:
        self._name = name
        self._source: T | Callable[[], T | None] | None = value

    @property
    def name(self) -> str:
        return self._name

    def set(self, value: T | Callable[[], T | None] | None) -> None:
        self._source = value

    def get_or_none(self) -> T | None:
        source = self._source
        if callable(source):
            return source()
        return source

    def is_present(self) -> bool:
        return self.get_or_none() is not None

    def get(self) -> T:
        value = self.get_or_none()
        if value is None:
            raise ConfigurationError(
                f"No value has been specified for property '{self._name}'.",
                context={"operation": "resolve_property", "property": self._name},
            )
        return value

    def __repr__(self) -> str:
        return f"Property({self._name!r})"


@runtime_checkable
class Task(Protocol):
    name: str
    group: str
    description: str

    def run(self) -> object:
        """Execute the task action."""


@runtime_checkable
class Plugin(Protocol):
    def apply(self, project: Project) -> None:
        """Register extensions and tasks on *project*."""


@dataclass(slots=True)
class Project:
    """The parts of a build project native-image compilation reads."""

    project_dir: Path = field(default_factory=lambda: Path("."))
    runtime_classpath: PathProvider = field(default=lambda: ())
    jar_outputs: PathProvider = field(default=lambda: ())
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    extensions: dict[str, object] = field(default_factory=dict)
    _tasks: dict[str, Task] = field(init=False, default_factory=dict, repr=False)

    def apply(self, plugin: Plugin) -> Self:
        plugin.apply(self)
        return self

    def register(self, task: Task) -> Self:
        if task.name in self._tasks:
            raise ConfigurationError(
                f"Task '{task.name}' is already registered.",
                context={"operation": "register_task", "task": task.name},
            )
        self._tasks[task.name] = task
        return self

    def task(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise ConfigurationError(
                f"Task '{name}' not found in project.",
                hint=f"Available tasks: {', '.join(sorted(self._tasks)) or 'none'}.",
                context={"operation": "lookup_task", "task": name},
            ) from None

    @property
    def tasks(self) -> tuple[str, ...]:
        return tuple(sorted(self._tasks))

    def run(self, name: str) -> object:
        return self.task(name).run()


@dataclass(slots=True)
class GraalExtension:
    """The ``graal { ... }`` configuration block."""

    main_class: Property[str] = field(default_factory=lambda: Property("graal.mainClass"))
    output_name: Property[str] = field(default_factory=lambda: Property("graal.outputName"))
    version: Property[str] = field(default_factory=lambda: Property("graal.version"))
    cache_dir: Property[Path] = field(
        default_factory=lambda: Property("graal.cacheDir", cache_root_from_env)
    )


@dataclass(slots=True)
class NativeImageTask:
    """Runs GraalVM's native-image command with configured options and parameters."""

    project: Project
    name: str = "nativeImage"
    group: str = TASK_GROUP
    description: str = "Runs GraalVM's native-image command with configured options and parameters."
    operating_system: str | None = None
    runner: Runner | None = None
    main_class: Property[str] = field(default_factory=lambda: Property("graal.mainClass"))
    output_name: Property[str] = field(default_factory=lambda: Property("graal.outputName"))
    graal_version: Property[str] = field(default_factory=lambda: Property("graal.version"))
    cache_dir: Property[Path] = field(
        default_factory=lambda: Property("graal.cacheDir", cache_root_from_env)
    )
    last_record: InvocationRecord | None = field(init=False, default=None)

    def configure(
        self,
        main_class: Property[str],
        output_name: Property[str],
        graal_version: Property[str],
        cache_dir: Property[Path] | None = None,
    ) -> Self:
        self.main_class = main_class
        self.output_name = output_name
        self.graal_version = graal_version
        if cache_dir is not None:
            self.cache_dir = cache_dir
        return self

    def run(self) -> ProcessResult:
        config = NativeImageConfig(
            main_class=self.main_class.get_or_none(),
            output_name=self.output_name.get_or_none(),
            graal_version=self.graal_version.get_or_none(),
        )
        logger = self.project.logger
        logger.log(
            operation="native_image",
            task=self.name,
            phase="validate",
            message="Reading graal configuration.",
            extra={
                "main_class": config.main_class,
                "output_name": config.output_name,
                "version": config.graal_version,
            },
        )
        record = prepare(
            config,
            classpath_sources=(
                self.project.runtime_classpath(),
                self.project.jar_outputs(),
            ),
            project_root=self.project.project_dir,
            cache_root=self.cache_dir.get_or_none(),
            operating_system=self.operating_system,
            logger=logger,
            task=self.name,
        )
        self.last_record = record
        try:
            result = execute(record, runner=self.runner, logger=logger, task=self.name)
        except ExternalProcessFailure as exc:
            if exc.result is not None:
                self.last_record = completed_record(record, exc.result)
            raise
        self.last_record = completed_record(record, result)
        return result


@dataclass(slots=True)
class GraalPlugin:
    """Adds the ``graal`` extension and the ``nativeImage`` task."""

    runner: Runner | None = None
    operating_system: str | None = None

    def apply(self, project: Project) -> None:
        extension = GraalExtension()
        project.extensions["graal"] = extension
        task = NativeImageTask(
            project=project,
            runner=self.runner,
            operating_system=self.operating_system,
        ).configure(
            extension.main_class,
            extension.output_name,
            extension.version,
            extension.cache_dir,
        )
        project.register(task)


def graal_extension(project: Project) -> GraalExtension:
    extension = project.extensions.get("graal")
    if not isinstance(extension, GraalExtension):
        raise ConfigurationError(
            "The graal extension is not available on this project.",
            hint="Apply GraalPlugin to the project first.",
            context={"operation": "lookup_extension"},
        )
    return extension
