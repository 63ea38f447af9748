"""Run context: read descriptors, build include graphs, write build files."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path

from makedep.cache import FileCache
from makedep.compiler import (
    emit_makefile_rules,
    render_descriptor_head,
    render_gitignore,
    render_linguas,
    render_testlist,
    render_top_variables,
)
from makedep.config import ToolchainConfig
from makedep.errors import MakedepError, ResourceError
from makedep.graph import IncludeGraphBuilder
from makedep.observability import StructuredLogger
from makedep.output import write_atomic
from makedep.resolver import IncludeResolver
from makedep.unit import DEFAULT_OUTPUT_NAME, BuildUnit
from makedep.variables import VariableStore

GITIGNORE = ".gitignore"
TESTLIST = "testlist.c"
LINGUAS = "LINGUAS"
TRANSLATIONS_DIR = "po"


@dataclass(slots=True)
class RunResult:
    units: list[BuildUnit] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)


@dataclass(slots=True)
class Generator:
    """One generator run over a tree rooted at *root*.

    Owns the scanned-file cache, the toolchain configuration and the
    translation list shared by every unit of the run.
    """

    root: Path = field(default_factory=Path.cwd)
    cmdline: VariableStore = field(default_factory=VariableStore)
    output_name: str = DEFAULT_OUTPUT_NAME
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    config: ToolchainConfig = field(default_factory=ToolchainConfig)
    linguas: list[str] = field(default_factory=list)
    top: BuildUnit | None = None
    cache: FileCache = field(init=False)

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.cache = FileCache(self.root, logger=self.logger)

    # ── Phases ──────────────────────────────────────────────────────

    def parse_unit(self, path: str | None) -> BuildUnit:
        unit = BuildUnit.create(path, cmdline=self.cmdline, top=self.top)
        descriptor = unit.descriptor_path(self.output_name, self.config)
        unit.read_descriptor(self.root, descriptor)
        self.logger.log(
            operation="parse_descriptor",
            unit=unit.name,
            phase="discover",
            file=descriptor,
            message=f"Read descriptor {descriptor}.",
        )
        return unit

    def load_unit(self, unit: BuildUnit) -> None:
        unit.configure(self.config)
        resolver = IncludeResolver(unit, self.config, self.cache)
        IncludeGraphBuilder(unit, resolver, logger=self.logger).build(self.linguas)

    def write_unit(self, unit: BuildUnit) -> list[Path]:
        """Write the unit's build file and side files.

        The build file is removed again if any part of the unit fails.
        """
        output_path = self.root / unit.base_dir_path(self.output_name)
        try:
            return self._write_unit(unit, output_path)
        except BaseException as exc:
            output_path.unlink(missing_ok=True)
            if isinstance(exc, MakedepError):
                self.logger.log(
                    operation="write_unit",
                    unit=unit.name,
                    phase="emit",
                    file=str(output_path),
                    level="error",
                    message=exc.message,
                    extra={"code": exc.code},
                )
            raise

    def _write_unit(self, unit: BuildUnit, output_path: Path) -> list[Path]:
        if unit.base_dir is not None:
            self._create_dir(unit.base_dir)

        top = self.top
        if top is None:
            raise RuntimeError("read_top() must run before units are written")
        descriptor = unit.descriptor_path(self.output_name, self.config)
        try:
            descriptor_text = (self.root / descriptor).read_text(
                encoding="utf-8", errors="surrogateescape"
            )
        except OSError as exc:
            raise ResourceError.from_os_error("open", exc, filename=descriptor) from exc

        emission = emit_makefile_rules(
            unit, config=self.config, top=top, linguas=self.linguas, output_name=self.output_name
        )
        text = (
            render_top_variables(unit, top.variables.local)
            + render_descriptor_head(descriptor_text)
            + emission.text
        )
        write_atomic(output_path, text)
        written = [output_path]
        self._log_written(unit, output_path, changed=True)

        ignore_files = [GITIGNORE, DEFAULT_OUTPUT_NAME]
        if unit.testdll:
            path = self.root / unit.base_dir_path(TESTLIST)
            changed = write_atomic(path, render_testlist(unit), only_if_changed=True)
            self._log_written(unit, path, changed=changed)
            written.append(path)
            ignore_files.append(TESTLIST)
        if unit.base_dir == TRANSLATIONS_DIR:
            path = self.root / unit.base_dir_path(LINGUAS)
            changed = write_atomic(path, render_linguas(unit), only_if_changed=True)
            self._log_written(unit, path, changed=changed)
            written.append(path)
            ignore_files.append(LINGUAS)
        ignore_files.extend(emission.targets)
        if not unit.src_dir:
            path = self.root / unit.base_dir_path(GITIGNORE)
            write_atomic(path, render_gitignore(ignore_files))
            self._log_written(unit, path, changed=True)
            written.append(path)

        self._create_target_dirs(unit, emission.targets)
        return written

    def _create_dir(self, directory: str) -> None:
        path = self.root / directory
        try:
            path.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as exc:
            raise ResourceError.from_os_error(f"mkdir {directory}", exc) from exc

    def _create_target_dirs(self, unit: BuildUnit, targets: Sequence[str]) -> None:
        directories: list[str] = []
        for target in targets:
            if "/" not in target:
                continue
            directory = unit.base_dir_path(target).rsplit("/", 1)[0]
            if directory and directory not in directories:
                directories.append(directory)
        for directory in directories:
            self._create_dir(directory)

    def _log_written(self, unit: BuildUnit, path: Path, *, changed: bool) -> None:
        self.logger.log(
            operation="write_file",
            unit=unit.name,
            phase="emit",
            file=str(path.relative_to(self.root)) if path.is_relative_to(self.root) else str(path),
            message=f"Wrote {path.name}." if changed else f"{path.name} is up to date.",
            level="info" if changed else "debug",
        )

    # ── Entry points ────────────────────────────────────────────────

    def read_top(self) -> BuildUnit:
        """Read the root descriptor and derive the run-wide toolchain settings."""
        self.top = self.parse_unit(None)
        self.config = ToolchainConfig.from_scope(self.top.variables)
        return self.top

    def run_tree(self) -> RunResult:
        """Regenerate the root unit and every directory listed in ``SUBDIRS``."""
        top = self.read_top()
        self.config = replace(
            self.config, disabled_dirs=tuple(top.variables.get_array("DISABLED_SUBDIRS"))
        )
        top.subdirs = top.variables.get_array("SUBDIRS")
        top.submakes = [self.parse_unit(path) for path in top.subdirs]
        self.logger.log(
            operation="discover_units",
            unit=top.name,
            phase="discover",
            message=f"Found {len(top.submakes)} sub-units.",
        )

        self.load_unit(top)
        for unit in top.submakes:
            self.load_unit(unit)

        result = RunResult(units=[*top.submakes, top])
        for unit in top.submakes:
            result.written.extend(self.write_unit(unit))
        result.written.extend(self.write_unit(top))
        return result

    def run_directories(self, directories: Sequence[str]) -> RunResult:
        """Regenerate only the named directories, each on its own."""
        self.read_top()
        result = RunResult()
        for directory in directories:
            unit = self.parse_unit(directory)
            self.load_unit(unit)
            result.units.append(unit)
            result.written.extend(self.write_unit(unit))
        return result

    def run(self, directories: Sequence[str] = ()) -> RunResult:
        if directories:
            return self.run_directories(directories)
        return self.run_tree()


__all__ = ["Generator", "RunResult"]
