"""Build units: one directory's descriptor, its attributes and its include graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from makedep.config import ToolchainConfig
from makedep.errors import ResourceError
from makedep.models import IncludeNode, SourceEntry
from makedep.paths import concat_paths, relative_path
from makedep.scanners.lines import iter_lines
from makedep.variables import VariableScope, VariableStore

SEPARATOR = "### Dependencies"
DEFAULT_OUTPUT_NAME = "Makefile"

# Declared sources are loaded in this order.
SOURCE_VARIABLES: tuple[str, ...] = (
    "C_SRCS",
    "OBJC_SRCS",
    "RC_SRCS",
    "MC_SRCS",
    "IDL_SRCS",
    "BISON_SRCS",
    "LEX_SRCS",
    "HEADER_SRCS",
    "XTEMPLATE_SRCS",
    "SVG_SRCS",
    "FONT_SRCS",
    "IN_SRCS",
    "PO_SRCS",
    "MANPAGES",
)


@dataclass(eq=False, slots=True)
class BuildUnit:
    """One directory-scoped set of build targets.

    ``base_dir`` is ``None`` for the root unit. Paths handed out by the
    ``*_dir_path`` helpers are relative to the unit's own build directory,
    which is where the generated build file lives.
    """

    variables: VariableScope
    base_dir: str | None = None
    top_obj_dir: str | None = None
    top_src_dir: str | None = None
    src_dir: str | None = None
    obj_dir: str | None = None

    parent_dir: str | None = None
    parent_spec: str | None = None
    module: str | None = None
    testdll: str | None = None
    resource: str | None = None
    sharedlib: str | None = None
    staticlib: str | None = None
    staticimplib: str | None = None
    importlib: str | None = None

    programs: list[str] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)
    appmode: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    delayimports: list[str] = field(default_factory=list)
    extradllflags: list[str] = field(default_factory=list)
    install_lib: list[str] = field(default_factory=list)
    install_dev: list[str] = field(default_factory=list)
    include_paths: list[str] = field(default_factory=list)
    define_args: list[str] = field(default_factory=list)

    subdirs: list[str] = field(default_factory=list)
    submakes: list[BuildUnit] = field(default_factory=list)

    disabled: bool = False
    use_msvcrt: bool = False
    is_win16: bool = False

    sources: list[SourceEntry] = field(default_factory=list)
    includes: list[IncludeNode] = field(default_factory=list)
    _sources_by_name: dict[str, SourceEntry] = field(default_factory=dict)
    _includes_by_name: dict[str, IncludeNode] = field(default_factory=dict)

    @classmethod
    def create(cls, path: str | None, *, cmdline: VariableStore, top: BuildUnit | None = None) -> BuildUnit:
        scope = VariableScope(
            local=VariableStore(),
            cmdline=cmdline,
            top=top.variables.local if top is not None else None,
        )
        unit = cls(variables=scope)
        if path is not None:
            unit.top_obj_dir = relative_path(path, "")
            unit.base_dir = None if path == "." else path
        return unit

    @property
    def name(self) -> str:
        return self.base_dir or "."

    # ── Path helpers ────────────────────────────────────────────────

    def base_dir_path(self, path: str) -> str:
        return concat_paths(self.base_dir, path)

    def obj_dir_path(self, path: str) -> str:
        return concat_paths(self.obj_dir, path)

    def src_dir_path(self, path: str) -> str:
        if self.src_dir:
            return concat_paths(self.src_dir, path)
        return self.obj_dir_path(path)

    def top_obj_dir_path(self, path: str) -> str:
        return concat_paths(self.top_obj_dir, path)

    def top_src_dir_path(self, path: str) -> str:
        if self.top_src_dir:
            return concat_paths(self.top_src_dir, path)
        return self.top_obj_dir_path(path)

    def tools_dir_path(self, config: ToolchainConfig, path: str) -> str:
        if config.tools_dir:
            return self.top_obj_dir_path(f"{config.tools_dir}/tools/{path}")
        return self.top_obj_dir_path(f"tools/{path}")

    def tools_path(self, config: ToolchainConfig, name: str) -> str:
        return f"{self.tools_dir_path(config, name)}/{name}{config.tools_ext}"

    def descriptor_path(self, output_name: str, config: ToolchainConfig | None = None) -> str:
        """Return the descriptor this unit is read from, relative to the run root.

        The root unit reads the build file it is about to rewrite; every other
        unit reads ``<dir>/<output_name>.in`` from the source tree.
        """
        if self.base_dir is None:
            return output_name
        root_src_dir = config.src_dir if config is not None else None
        return concat_paths(root_src_dir, self.base_dir_path(f"{output_name}.in"))

    # ── Descriptor ──────────────────────────────────────────────────

    def read_descriptor(self, root: Path, descriptor: str) -> None:
        """Record every assignment found before the dependency separator."""
        try:
            text = (root / descriptor).read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as exc:
            raise ResourceError.from_os_error("open", exc, filename=descriptor) from exc

        for _lineno, line in iter_lines(text):
            if line.startswith(SEPARATOR):
                break
            if line.startswith("\t"):
                continue
            line = line.lstrip()
            if line.startswith("#"):
                continue
            self.variables.local.parse_assignment(line)

    def configure(self, config: ToolchainConfig) -> None:
        """Resolve directories and read the unit's declared attributes."""
        scope = self.variables
        if config.src_dir:
            self.top_src_dir = concat_paths(self.top_obj_dir, config.src_dir)
            self.src_dir = concat_paths(self.top_src_dir, self.base_dir)
        scope.local.set("top_builddir", self.top_obj_dir_path(""))
        scope.local.set("top_srcdir", self.top_src_dir_path(""))
        scope.local.set("srcdir", self.src_dir_path(""))

        self.parent_dir = scope.expand_var("PARENTSRC")
        self.parent_spec = scope.expand_var("PARENTSPEC")
        self.module = scope.expand_var("MODULE")
        self.testdll = scope.expand_var("TESTDLL")
        self.resource = scope.expand_var("RESOURCE")
        self.sharedlib = scope.expand_var("SHAREDLIB")
        self.staticlib = scope.expand_var("STATICLIB")
        self.importlib = scope.expand_var("IMPORTLIB")

        self.programs = scope.get_array("PROGRAMS")
        self.scripts = scope.get_array("SCRIPTS")
        self.appmode = scope.get_array("APPMODE")
        self.imports = scope.get_array("IMPORTS")
        self.delayimports = scope.get_array("DELAYIMPORTS")
        self.extradllflags = scope.get_array("EXTRADLLFLAGS")
        self.install_lib = scope.get_array("INSTALL_LIB")
        self.install_dev = scope.get_array("INSTALL_DEV")

        if self.module and self.module.endswith(".a"):
            self.staticlib = self.module

        self.disabled = self.base_dir is not None and self.base_dir in config.disabled_dirs
        self.is_win16 = "-m16" in self.extradllflags
        self.use_msvcrt = "-mno-cygwin" in self.appmode or any(
            name.startswith("msvcr") or name == "ucrtbase" for name in self.imports
        )

        if self.module and not self.install_lib and not self.install_dev:
            if self.importlib:
                self.install_dev.append(self.importlib)
            if self.staticlib:
                self.install_dev.append(self.staticlib)
            else:
                self.install_lib.append(self.module)

        self.include_paths = []
        self.define_args = ["-D__WINESRC__"]
        for value in scope.get_array("EXTRAINCL"):
            if value.startswith("-I"):
                if value[2:] not in self.include_paths:
                    self.include_paths.append(value[2:])
            elif value not in self.define_args:
                self.define_args.append(value)
        self.define_args.extend(scope.get_array("EXTRADEFS"))

    # ── Graph storage ───────────────────────────────────────────────

    def find_source(self, name: str) -> SourceEntry | None:
        return self._sources_by_name.get(name)

    def find_include(self, name: str) -> IncludeNode | None:
        return self._includes_by_name.get(name)

    def register_source(self, entry: SourceEntry) -> None:
        self.sources.append(entry)
        self._sources_by_name[entry.name] = entry

    def register_include(self, node: IncludeNode) -> None:
        self.includes.append(node)
        self._includes_by_name[node.name] = node


__all__ = ["BuildUnit", "DEFAULT_OUTPUT_NAME", "SEPARATOR", "SOURCE_VARIABLES"]
