"""Include resolution: map a referenced name to a scanned file and a rule path.

Generated-file heuristics run before plain lookups: a header that will be
produced from an interface or grammar file resolves to that generator
source, not to a stale copy of the header.
"""

from __future__ import annotations

from dataclasses import dataclass

from makedep.cache import FileCache
from makedep.config import ToolchainConfig
from makedep.errors import ResolutionError, ResourceError
from makedep.models import IncludeKind, IncludeNode, PhysicalFile
from makedep.paths import concat_paths, replace_extension, replace_filename
from makedep.unit import BuildUnit


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of a successful lookup.

    ``filename`` is the path rules should use; ``sourcename`` is set when the
    node is generated and names the generator input.
    """

    file: PhysicalFile
    filename: str
    sourcename: str | None = None


# (suffix of the requested name, suffix of the generator source)
LOCAL_GENERATORS: tuple[tuple[str, str], ...] = (
    (".tab.h", ".y"),
    (".h", ".idl"),
    (".tlb", ".idl"),
)

GLOBAL_GENERATORS: tuple[tuple[str, str, str], ...] = (
    # (required name suffix, suffix replaced, generator suffix)
    (".h", ".h", ".idl"),
    (".h", ".h", ".h.in"),
    ("tmpl.h", ".h", ".x"),
    (".tlb", ".tlb", ".idl"),
)


class IncludeResolver:
    """Ordered search strategies for one build unit."""

    def __init__(self, unit: BuildUnit, config: ToolchainConfig, cache: FileCache) -> None:
        self.unit = unit
        self.config = config
        self.cache = cache

    # ── Individual lookups ──────────────────────────────────────────

    def open_local(self, path: str) -> tuple[PhysicalFile, str] | None:
        """Look in the unit's source directory, then in its parent source directory."""
        unit = self.unit
        found = self.cache.load(self.config.root_dir_path(unit.base_dir_path(path)))
        if found is None and unit.parent_dir:
            path = f"{unit.parent_dir}/{path}"
            found = self.cache.load(self.config.root_dir_path(unit.base_dir_path(path)))
        if found is None:
            return None
        return found, unit.src_dir_path(path)

    def open_global(self, path: str) -> tuple[PhysicalFile, str] | None:
        found = self.cache.load(self.config.root_dir_path(path))
        if found is None:
            return None
        return found, self.unit.top_src_dir_path(path)

    def open_global_header(self, path: str) -> tuple[PhysicalFile, str] | None:
        return self.open_global(f"include/{path}")

    def open_include_path(self, directory: str, name: str) -> tuple[PhysicalFile, str] | None:
        path = concat_paths(directory, name)
        found = self.cache.load(self.unit.base_dir_path(path))
        if found is None:
            return None
        return found, self.unit.src_dir_path(path)

    def open_same_dir(self, parent: IncludeNode, name: str) -> tuple[PhysicalFile, str] | None:
        if parent.file is None:
            return None
        found = self.cache.load(replace_filename(parent.file.name, name))
        if found is None:
            return None
        return found, replace_filename(parent.filename, name)

    # ── Entry points ────────────────────────────────────────────────

    def resolve_source(self, node: IncludeNode) -> Resolution:
        """Open a declared source; only the unit's own directories are searched."""
        found = self.open_local(node.name)
        if found is None:
            raise ResourceError(
                f"open {node.name}: No such file or directory",
                context={"operation": "open", "unit": self.unit.name},
            )
        return Resolution(file=found[0], filename=found[1])

    def resolve_include(self, node: IncludeNode) -> Resolution | None:
        """Run every strategy in order; ``None`` is a tolerated system-header miss."""
        unit = self.unit
        name = node.name

        for suffix, generator in LOCAL_GENERATORS:
            if not name.endswith(suffix):
                continue
            found = self.open_local(replace_extension(name, suffix, generator))
            if found is not None:
                return Resolution(
                    file=found[0], filename=unit.obj_dir_path(name), sourcename=found[1]
                )

        found = self.open_local(name)
        if found is not None:
            return Resolution(file=found[0], filename=found[1])

        for required, suffix, generator in GLOBAL_GENERATORS:
            if not name.endswith(required):
                continue
            found = self.open_global_header(replace_extension(name, suffix, generator))
            if found is not None:
                return Resolution(
                    file=found[0],
                    filename=unit.top_obj_dir_path(f"include/{name}"),
                    sourcename=found[1],
                )

        found = self.open_global_header(name)
        if found is not None:
            return Resolution(file=found[0], filename=found[1])

        if unit.use_msvcrt:
            found = self.open_global_header(f"msvcrt/{name}")
            if found is not None:
                return Resolution(file=found[0], filename=found[1])

        found = self._search_include_paths(name)
        if found is not None:
            return Resolution(file=found[0], filename=found[1])

        if node.kind is IncludeKind.SYSTEM:
            return None

        if node.included_by is not None:
            found = self.open_same_dir(node.included_by, name)
            if found is not None:
                return Resolution(file=found[0], filename=found[1])

        raise self._missing(node)

    def _search_include_paths(self, name: str) -> tuple[PhysicalFile, str] | None:
        unit = self.unit
        prefix = unit.top_src_dir or unit.top_obj_dir
        for directory in unit.include_paths:
            if prefix:
                if directory == prefix or directory.startswith(prefix + "/"):
                    found = self.open_global(
                        concat_paths(directory[len(prefix) :].lstrip("/"), name)
                    )
                    if found is not None:
                        return found
                # Out-of-tree builds only honour paths inside the source tree.
                if unit.top_src_dir:
                    continue
            if not directory.startswith("/"):
                found = self.open_include_path(directory, name)
                if found is not None:
                    return found
        return None

    def _missing(self, node: IncludeNode) -> ResolutionError:
        parent = node.included_by
        notes: list[tuple[str, int, str]] = []
        current = parent
        while current is not None and current.included_by is not None:
            grandparent = current.included_by
            where = grandparent.sourcename or (
                grandparent.file.name if grandparent.file is not None else grandparent.name
            )
            notes.append((where, current.included_line, current.name))
            current = grandparent
        return ResolutionError(
            f"{node.name}: No such file or directory",
            filename=parent.file.name if parent is not None and parent.file is not None else None,
            line=node.included_line,
            notes=notes,
            context={"unit": self.unit.name, "include": node.name},
        )


__all__ = ["GLOBAL_GENERATORS", "IncludeResolver", "LOCAL_GENERATORS", "Resolution"]
