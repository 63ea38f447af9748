"""Toolchain settings read once from the root build descriptor."""

from __future__ import annotations

from dataclasses import dataclass

from makedep.paths import concat_paths
from makedep.variables import VariableScope

DEFAULT_MAN_EXT = "3w"
DEFAULT_LN_S = "ln -s"


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """Run-wide flags and tool locations.

    Values come from the root descriptor expanded through the variable scope,
    so command-line overrides apply. ``src_dir`` is the root source directory
    for out-of-tree builds and ``None`` for in-tree builds. ``disabled_dirs``
    is only filled in when the whole tree is processed.
    """

    target_flags: tuple[str, ...] = ()
    msvcrt_flags: tuple[str, ...] = ()
    dll_flags: tuple[str, ...] = ()
    extra_cflags: tuple[str, ...] = ()
    cpp_flags: tuple[str, ...] = ()
    unwind_flags: tuple[str, ...] = ()
    libs: tuple[str, ...] = ()
    src_dir: str | None = None
    tools_dir: str | None = None
    tools_ext: str = ""
    exe_ext: str = ""
    man_ext: str = DEFAULT_MAN_EXT
    crosstarget: str | None = None
    fontforge: str | None = None
    convert: str | None = None
    rsvg: str | None = None
    icotool: str | None = None
    dlltool: str | None = None
    msgfmt: str | None = None
    ln_s: str = DEFAULT_LN_S
    disabled_dirs: tuple[str, ...] = ()

    @classmethod
    def from_scope(cls, scope: VariableScope) -> ToolchainConfig:
        src_dir = scope.expand_var("srcdir")
        tools_dir = scope.expand_var("TOOLSDIR")
        return cls(
            target_flags=tuple(scope.get_array("TARGETFLAGS")),
            msvcrt_flags=tuple(scope.get_array("MSVCRTFLAGS")),
            dll_flags=tuple(scope.get_array("DLLFLAGS")),
            extra_cflags=tuple(scope.get_array("EXTRACFLAGS")),
            cpp_flags=tuple(scope.get_array("CPPFLAGS")),
            unwind_flags=tuple(scope.get_array("UNWINDFLAGS")),
            libs=tuple(scope.get_array("LIBS")),
            src_dir=None if src_dir == "." else src_dir,
            tools_dir=None if tools_dir == "." else tools_dir,
            tools_ext=scope.expand_var("TOOLSEXT") or "",
            exe_ext=scope.expand_var("EXEEXT") or "",
            man_ext=scope.expand_var("api_manext") or DEFAULT_MAN_EXT,
            crosstarget=scope.expand_var("CROSSTARGET"),
            fontforge=scope.expand_var("FONTFORGE"),
            convert=scope.expand_var("CONVERT"),
            rsvg=scope.expand_var("RSVG"),
            icotool=scope.expand_var("ICOTOOL"),
            dlltool=scope.expand_var("DLLTOOL"),
            msgfmt=scope.expand_var("MSGFMT"),
            ln_s=scope.expand_var("LN_S") or DEFAULT_LN_S,
        )

    @property
    def dll_ext(self) -> str:
        """Shared-object extension; empty when building native PE binaries."""
        return "" if self.exe_ext == ".exe" else ".so"

    def root_dir_path(self, path: str) -> str:
        return concat_paths(self.src_dir, path)


__all__ = ["DEFAULT_MAN_EXT", "ToolchainConfig"]
