"""Per-unit include graph construction and prerequisite flattening."""

from __future__ import annotations

from collections.abc import Iterable

from makedep.generated import GeneratedSourceDeriver
from makedep.models import (
    Dependency,
    FileFlag,
    IncludeKind,
    IncludeNode,
    PhysicalFile,
    SourceEntry,
)
from makedep.observability import StructuredLogger
from makedep.paths import replace_extension
from makedep.resolver import IncludeResolver
from makedep.unit import SOURCE_VARIABLES, BuildUnit

# Kind mapping for ordinary files; cpp_quote records only matter to
# headers generated from interface files.
_INCLUDE_KINDS: dict[IncludeKind, IncludeKind] = {
    IncludeKind.NORMAL: IncludeKind.NORMAL,
    IncludeKind.IMPORT: IncludeKind.NORMAL,
    IncludeKind.IMPORTLIB: IncludeKind.IMPORTLIB,
    IncludeKind.SYSTEM: IncludeKind.SYSTEM,
}

# Every header generated from an interface file includes these.
IDL_HEADER_BASELINE: tuple[str, ...] = ("rpc.h", "rpcndr.h")


class IncludeGraphBuilder:
    """Expand one unit's declared sources into its full include graph.

    Nodes are deduplicated by name within the unit, which is also what stops
    the expansion on include cycles.
    """

    def __init__(
        self,
        unit: BuildUnit,
        resolver: IncludeResolver,
        *,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.unit = unit
        self.resolver = resolver
        self.logger = logger

    def add_include(
        self, parent: IncludeNode, name: str, line: int, kind: IncludeKind
    ) -> IncludeNode:
        node = self.unit.find_include(name)
        if node is None:
            node = IncludeNode(name=name, kind=kind, included_by=parent, included_line=line)
            self.unit.register_include(node)
        parent.files.append(node)
        return node

    def add_all_includes(self, parent: IncludeNode, file: PhysicalFile) -> None:
        parent.files = []
        for dep in file.deps:
            kind = _INCLUDE_KINDS.get(dep.kind)
            if kind is not None:
                self.add_include(parent, dep.name, dep.line, kind)

    def add_source(self, name: str) -> SourceEntry:
        entry = self.unit.find_source(name)
        if entry is not None:
            return entry
        entry = SourceEntry(name=name)
        self.unit.register_source(entry)
        self.parse_node(entry, source=True)
        return entry

    def add_generated_source(
        self, name: str, filename: str | None = None, deps: Iterable[str] = ()
    ) -> SourceEntry:
        """Register a source produced by the build; a known name is returned as is."""
        entry = self.unit.find_source(name)
        if entry is not None:
            return entry
        physical = PhysicalFile(name=name, flags=FileFlag.GENERATED)
        entry = SourceEntry(
            name=name, file=physical, filename=self.unit.obj_dir_path(filename or name)
        )
        self.unit.register_source(entry)
        deps = tuple(deps)
        if deps:
            for dep in deps:
                physical.add_dependency(dep, IncludeKind.NORMAL)
            self.add_all_includes(entry, physical)
        return entry

    def parse_node(self, node: IncludeNode, *, source: bool = False) -> None:
        if source:
            resolution = self.resolver.resolve_source(node)
        else:
            resolution = self.resolver.resolve_include(node)
            if resolution is None:
                return

        node.file = resolution.file
        node.filename = resolution.filename
        node.sourcename = resolution.sourcename
        node.files = []

        if node.sourcename is not None:
            if node.sourcename.endswith(".idl"):
                self._add_idl_header_includes(node, resolution.file.deps)
                return
            if node.sourcename.endswith(".y"):
                return  # a generated .tab.h includes nothing

        self.add_all_includes(node, resolution.file)

    def _add_idl_header_includes(self, node: IncludeNode, deps: list[Dependency]) -> None:
        if node.name.endswith(".tlb"):
            return
        for name in IDL_HEADER_BASELINE:
            self.add_include(node, name, 0, IncludeKind.NORMAL)
        for dep in deps:
            if dep.kind is IncludeKind.IMPORT:
                name = dep.name
                if name.endswith(".idl"):
                    name = replace_extension(name, ".idl", ".h")
                self.add_include(node, name, dep.line, IncludeKind.NORMAL)
            elif dep.kind is IncludeKind.CPP_QUOTE:
                self.add_include(node, dep.name, dep.line, IncludeKind.NORMAL)
            elif dep.kind is IncludeKind.CPP_QUOTE_SYSTEM:
                self.add_include(node, dep.name, dep.line, IncludeKind.SYSTEM)

    def expand_includes(self) -> None:
        """Resolve every discovered include, including those found along the way."""
        index = 0
        while index < len(self.unit.includes):
            self.parse_node(self.unit.includes[index])
            index += 1

    def build(self, linguas: list[str]) -> None:
        """Load the unit's declared sources, derive generated ones, then expand."""
        unit = self.unit
        for variable in SOURCE_VARIABLES:
            for name in unit.variables.get_array(variable):
                self.add_source(name)

        GeneratedSourceDeriver(self).derive(linguas)

        for name in unit.variables.get_array("EXTRA_OBJS"):
            if name.endswith(".o"):
                self.add_generated_source(name, replace_extension(name, ".o", ".c"))
            else:
                self.add_generated_source(name)

        self.expand_includes()
        if self.logger is not None:
            self.logger.log(
                operation="load_sources",
                unit=unit.name,
                phase="graph",
                message=(
                    f"Loaded {len(unit.sources)} sources and {len(unit.includes)} includes."
                ),
            )


def flatten_dependencies(source: SourceEntry) -> list[str]:
    """Return the paths of every node reachable from *source*, each listed once.

    Library imports are only prerequisites of typelib outputs.
    """
    if not source.filename:
        return []
    wants_typelibs = bool(source.flags & (FileFlag.IDL_TYPELIB | FileFlag.IDL_REGTYPELIB))
    visited: set[IncludeNode] = {source}
    deps: list[str] = []
    stack: list[IncludeNode] = list(reversed(source.files))
    while stack:
        node = stack.pop()
        if not node.filename or node in visited:
            continue
        if node.kind is IncludeKind.IMPORTLIB and not wants_typelibs:
            continue
        visited.add(node)
        deps.append(node.filename)
        stack.extend(reversed(node.files))
    return deps


__all__ = ["IDL_HEADER_BASELINE", "IncludeGraphBuilder", "flatten_dependencies"]
