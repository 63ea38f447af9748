"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from makedep.cache import FileCache
from makedep.config import ToolchainConfig
from makedep.graph import IncludeGraphBuilder
from makedep.resolver import IncludeResolver
from makedep.unit import BuildUnit
from makedep.variables import VariableStore

TreeWriter = Callable[[Mapping[str, str]], Path]
UnitLoader = Callable[..., BuildUnit]


@pytest.fixture
def write_tree(tmp_path: Path) -> TreeWriter:
    """Write ``{relative path: text}`` under a temporary root and return the root."""

    def write(files: Mapping[str, str]) -> Path:
        for name, text in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return tmp_path

    return write


@pytest.fixture
def load_unit() -> UnitLoader:
    """Read, configure and graph one unit the way a generator run does."""

    def load(
        root: Path,
        path: str,
        *,
        config: ToolchainConfig | None = None,
        linguas: list[str] | None = None,
    ) -> BuildUnit:
        config = config or ToolchainConfig()
        unit = BuildUnit.create(path, cmdline=VariableStore())
        unit.read_descriptor(root, unit.descriptor_path("Makefile", config))
        unit.configure(config)
        resolver = IncludeResolver(unit, config, FileCache(root))
        IncludeGraphBuilder(unit, resolver).build(linguas if linguas is not None else [])
        return unit

    return load


@pytest.fixture
def wine_tree(write_tree: TreeWriter) -> Path:
    """A small in-tree source layout: one DLL, its tests and a translation unit."""
    return write_tree(
        {
            "Makefile": (
                "SUBDIRS = dlls/foo dlls/foo/tests po\n"
                "CC = gcc\n"
                "CFLAGS = -g -O2\n"
            ),
            "include/config.h": "#define HAVE_FOO 1\n",
            "include/windef.h": "/* windef */\n",
            "include/rpc.h": "/* rpc */\n",
            "include/rpcndr.h": "/* rpcndr */\n",
            "include/unknwn.idl": 'import "wtypes.idl";\n',
            "include/wtypes.idl": "/* wtypes */\n",
            "include/wine/test.h": '#include "windef.h"\n',
            "dlls/foo/Makefile.in": (
                "MODULE = foo.dll\n"
                "IMPORTLIB = foo\n"
                "IMPORTS = kernel32\n"
                "\n"
                "C_SRCS = \\\n"
                "\tmain.c \\\n"
                "\tutil.c\n"
                "\n"
                "RC_SRCS = version.rc\n"
                "IDL_SRCS = foo.idl\n"
            ),
            "dlls/foo/main.c": (
                '#include "config.h"\n'
                "#include <stdarg.h>\n"
                '#include "foo_private.h"\n'
                '#include "foo.h"\n'
            ),
            "dlls/foo/util.c": '#include "foo_private.h"\n',
            "dlls/foo/foo_private.h": '#include "windef.h"\n',
            "dlls/foo/foo.idl": 'import "unknwn.idl";\n',
            "dlls/foo/version.rc": "/* @makedep: foo.ico */\n",
            "dlls/foo/foo.ico": "",
            "dlls/foo/tests/Makefile.in": (
                "TESTDLL = foo.dll\n"
                "IMPORTS = foo\n"
                "\n"
                "C_SRCS = main.c\n"
            ),
            "dlls/foo/tests/main.c": '#include "wine/test.h"\n',
            "po/Makefile.in": "PO_SRCS = fr.po de.po\n",
            "po/fr.po": 'msgid ""\n',
            "po/de.po": 'msgid ""\n',
        }
    )
