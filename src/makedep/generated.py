"""Synthesize the sources implied by per-file directives and unit attributes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from makedep.models import FileFlag, SourceEntry
from makedep.paths import replace_extension

if TYPE_CHECKING:
    from makedep.graph import IncludeGraphBuilder

DLLDATA_OBJECT = "dlldata.o"
DLLDATA_SOURCE = "dlldata.c"
TESTLIST_OBJECT = "testlist.o"
TESTLIST_SOURCE = "testlist.c"


class GeneratedSourceDeriver:
    """Add generated sources to a unit whose declared sources are loaded."""

    def __init__(self, builder: IncludeGraphBuilder) -> None:
        self.builder = builder
        self.unit = builder.unit

    def derive(self, linguas: list[str]) -> None:
        """Run over the declared sources once, in order.

        *linguas* is the run-wide list of translation languages and is
        extended in place.
        """
        for source in list(self.unit.sources):
            self._derive_idl(source)
            self._derive_from_name(source)
            if FileFlag.C_IMPLIB in source.flags:
                self._derive_static_implib()
            if source.name.endswith(".po") and not self.unit.disabled:
                language = replace_extension(source.name, ".po", "")
                if language not in linguas:
                    linguas.append(language)

        if self.unit.testdll:
            self.builder.add_generated_source(
                TESTLIST_OBJECT, TESTLIST_SOURCE, deps=("wine/test.h",)
            )

    def _derive_idl(self, source: SourceEntry) -> None:
        flags = source.flags
        add = self.builder.add_generated_source
        name = source.name

        def output(ext: str) -> str:
            return replace_extension(name, ".idl", ext)

        header = output(".h")
        if FileFlag.IDL_CLIENT in flags:
            add(output("_c.c"), deps=(header,))
        if FileFlag.IDL_SERVER in flags:
            add(output("_s.c"), deps=("wine/exception.h", header))
        if FileFlag.IDL_IDENT in flags:
            add(output("_i.c"), deps=("rpc.h", "rpcndr.h", "guiddef.h"))
        if FileFlag.IDL_PROXY in flags:
            add(DLLDATA_OBJECT, DLLDATA_SOURCE, deps=("objbase.h", "rpcproxy.h"))
            add(output("_p.c"), deps=("objbase.h", "rpcproxy.h", "wine/exception.h", header))
        if FileFlag.IDL_TYPELIB in flags:
            add(output(".tlb"))
        if FileFlag.IDL_REGTYPELIB in flags:
            add(output("_t.res"))
        if FileFlag.IDL_REGISTER in flags:
            add(output("_r.res"))
        if FileFlag.IDL_HEADER in flags:
            add(header)
        if not flags and name.endswith(".idl"):
            add(header)

    def _derive_from_name(self, source: SourceEntry) -> None:
        name = source.name
        add = self.builder.add_generated_source
        if name.endswith(".x"):
            add(replace_extension(name, ".x", ".h"))
        elif name.endswith(".y"):
            self._transfer_includes(source, add(replace_extension(name, ".y", ".tab.c")))
        elif name.endswith(".l"):
            self._transfer_includes(source, add(replace_extension(name, ".l", ".yy.c")))

    @staticmethod
    def _transfer_includes(source: SourceEntry, generated: SourceEntry) -> None:
        # The grammar's includes become the generated C file's includes.
        generated.files = source.files
        source.files = []

    def _derive_static_implib(self) -> None:
        unit = self.unit
        if not unit.staticimplib and unit.importlib and self.builder.resolver.config.dll_ext:
            unit.staticimplib = f"lib{unit.importlib}.a"


__all__ = [
    "DLLDATA_OBJECT",
    "DLLDATA_SOURCE",
    "GeneratedSourceDeriver",
    "TESTLIST_OBJECT",
    "TESTLIST_SOURCE",
]
