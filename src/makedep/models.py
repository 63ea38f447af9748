"""Core typed dataclasses for scanned files and per-unit include graphs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag, StrEnum

from makedep.errors import DirectiveError

CONFIG_HEADER = "config.h"
PORT_HEADER = "wine/port.h"


class IncludeKind(Enum):
    NORMAL = "normal"  # #include "foo.h"
    SYSTEM = "system"  # #include <foo.h>
    IMPORT = "import"  # idl import "foo.idl"
    IMPORTLIB = "importlib"  # idl importlib("foo.tlb")
    CPP_QUOTE = "cpp_quote"  # idl cpp_quote("#include \"foo.h\"")
    CPP_QUOTE_SYSTEM = "cpp_quote_system"  # idl cpp_quote("#include <foo.h>")


class FileFlag(IntFlag):
    NONE = 0
    GENERATED = 0x000001
    INSTALL = 0x000002
    IDL_PROXY = 0x000100
    IDL_CLIENT = 0x000200
    IDL_SERVER = 0x000400
    IDL_IDENT = 0x000800
    IDL_REGISTER = 0x001000
    IDL_TYPELIB = 0x002000
    IDL_REGTYPELIB = 0x004000
    IDL_HEADER = 0x008000
    RC_PO = 0x010000
    C_IMPLIB = 0x020000
    SFD_FONTS = 0x040000


IDL_OUTPUT_FLAGS = (
    FileFlag.IDL_PROXY
    | FileFlag.IDL_CLIENT
    | FileFlag.IDL_SERVER
    | FileFlag.IDL_IDENT
    | FileFlag.IDL_REGISTER
    | FileFlag.IDL_TYPELIB
    | FileFlag.IDL_REGTYPELIB
    | FileFlag.IDL_HEADER
)

# Emission order of the outputs an interface file can request.
IDL_OUTPUTS: tuple[tuple[FileFlag, str], ...] = (
    (FileFlag.IDL_TYPELIB, ".tlb"),
    (FileFlag.IDL_REGTYPELIB, "_t.res"),
    (FileFlag.IDL_CLIENT, "_c.c"),
    (FileFlag.IDL_IDENT, "_i.c"),
    (FileFlag.IDL_PROXY, "_p.c"),
    (FileFlag.IDL_SERVER, "_s.c"),
    (FileFlag.IDL_REGISTER, "_r.res"),
    (FileFlag.IDL_HEADER, ".h"),
)


@dataclass(frozen=True, slots=True)
class Dependency:
    line: int
    kind: IncludeKind
    name: str


@dataclass(frozen=True, slots=True)
class ManPageInfo:
    """Section number taken from a man page template's ``.TH`` line."""

    section: str


@dataclass(frozen=True, slots=True)
class FontRequest:
    """One ``#pragma makedep font`` request: output name plus converter args."""

    name: str
    args: str = ""

    @classmethod
    def parse(cls, text: str) -> FontRequest:
        parts = text.strip().split(None, 1)
        if not parts:
            return cls(name="")
        return cls(name=parts[0], args=parts[1] if len(parts) > 1 else "")


@dataclass(slots=True)
class FontTargets:
    requests: list[FontRequest] = field(default_factory=list)


FileMetadata = ManPageInfo | FontTargets


@dataclass(eq=False, slots=True)
class PhysicalFile:
    """Content-derived facts for one file, parsed exactly once per run."""

    name: str
    deps: list[Dependency] = field(default_factory=list)
    flags: FileFlag = FileFlag.NONE
    metadata: FileMetadata | None = None

    def add_dependency(self, name: str, kind: IncludeKind, line: int = 0) -> None:
        """Append a dependency record, enforcing the tree's include rules."""
        if name.startswith("../"):
            self._fail("#include directive with relative path not allowed", line)

        if name == CONFIG_HEADER:
            if self.name.endswith(".h"):
                self._fail(f"{CONFIG_HEADER} must not be included by a header file", line)
            if self.deps:
                self._fail(f"{CONFIG_HEADER} must be included before anything else", line)
        elif name == PORT_HEADER:
            if self.name.endswith(".h"):
                self._fail(f"{PORT_HEADER} must not be included by a header file", line)
            if not self.deps:
                self._fail(f"{CONFIG_HEADER} must be included before {PORT_HEADER}", line)
            if len(self.deps) > 1:
                self._fail(
                    f"{PORT_HEADER} must be included before everything except {CONFIG_HEADER}",
                    line,
                )
            if self.deps[0].name != CONFIG_HEADER:
                self._fail(f"{CONFIG_HEADER} must be included before {PORT_HEADER}", line)

        self.deps.append(Dependency(line=line, kind=kind, name=name))

    @property
    def generated(self) -> bool:
        return FileFlag.GENERATED in self.flags

    @property
    def fonts(self) -> list[FontRequest]:
        if isinstance(self.metadata, FontTargets):
            return self.metadata.requests
        return []

    @property
    def man_section(self) -> str | None:
        if isinstance(self.metadata, ManPageInfo):
            return self.metadata.section
        return None

    def _fail(self, message: str, line: int) -> None:
        raise DirectiveError(message, filename=self.name, line=line)


@dataclass(eq=False, slots=True)
class IncludeNode:
    """A node of one build unit's include graph."""

    name: str
    kind: IncludeKind = IncludeKind.NORMAL
    included_by: IncludeNode | None = None
    included_line: int = 0
    file: PhysicalFile | None = None
    filename: str | None = None
    sourcename: str | None = None
    files: list[IncludeNode] = field(default_factory=list)

    def chain(self) -> list[IncludeNode]:
        """Return the ancestors of this node, nearest first."""
        ancestors: list[IncludeNode] = []
        node = self.included_by
        while node is not None:
            ancestors.append(node)
            node = node.included_by
        return ancestors


@dataclass(eq=False, slots=True)
class SourceEntry(IncludeNode):
    """An explicitly declared or synthesized source of a build unit.

    ``sourcename`` names the file the entry is really generated from, when it
    differs from the entry's own name.
    """

    @property
    def flags(self) -> FileFlag:
        return self.file.flags if self.file is not None else FileFlag.NONE

    @property
    def generated(self) -> bool:
        return FileFlag.GENERATED in self.flags

    @property
    def stem(self) -> str:
        pos = self.name.rfind(".")
        return self.name[:pos] if pos != -1 and "/" not in self.name[pos:] else self.name

    @property
    def extension(self) -> str | None:
        pos = self.name.rfind(".")
        if pos == -1 or "/" in self.name[pos:]:
            return None
        return self.name[pos + 1 :]


class InstallKind(StrEnum):
    """Install action for one (artifact, destination) pair."""

    DATA = "d"
    DATA_SRC = "D"
    PROGRAM = "p"
    SCRIPT = "s"
    SCRIPT_SRC = "S"
    TOOL_SCRIPT = "t"
    SYMLINK = "y"


class InstallClass(StrEnum):
    LIB = "install-lib"
    DEV = "install-dev"


@dataclass(frozen=True, slots=True)
class InstallRule:
    file: str
    dest: str
    kind: InstallKind


__all__ = [
    "CONFIG_HEADER",
    "Dependency",
    "FileFlag",
    "FileMetadata",
    "FontRequest",
    "FontTargets",
    "IDL_OUTPUTS",
    "IDL_OUTPUT_FLAGS",
    "IncludeKind",
    "IncludeNode",
    "InstallClass",
    "InstallKind",
    "InstallRule",
    "ManPageInfo",
    "PORT_HEADER",
    "PhysicalFile",
    "SourceEntry",
]
