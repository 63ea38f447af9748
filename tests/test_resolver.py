from pathlib import Path

import pytest

from makedep.cache import FileCache
from makedep.config import ToolchainConfig
from makedep.errors import ResolutionError, ResourceError
from makedep.models import IncludeKind, IncludeNode
from makedep.resolver import IncludeResolver
from makedep.unit import BuildUnit
from makedep.variables import VariableStore


def _resolver(root: Path, path: str = "dlls/foo", **variables: str) -> IncludeResolver:
    config = ToolchainConfig()
    unit = BuildUnit.create(path, cmdline=VariableStore())
    for name, value in variables.items():
        unit.variables.local.set(name, value)
    unit.configure(config)
    return IncludeResolver(unit, config, FileCache(root))


def test_local_header_generated_from_interface_file(write_tree) -> None:
    root = write_tree({"dlls/foo/foo.idl": "", "dlls/foo/foo.h": "/* stale */\n"})
    resolution = _resolver(root).resolve_include(IncludeNode(name="foo.h"))
    assert resolution is not None
    assert resolution.filename == "foo.h"
    assert resolution.sourcename == "foo.idl"
    assert resolution.file.name == "dlls/foo/foo.idl"


def test_grammar_header_resolves_to_grammar(write_tree) -> None:
    root = write_tree({"dlls/foo/parser.y": "%%\n"})
    resolution = _resolver(root).resolve_include(IncludeNode(name="parser.tab.h"))
    assert resolution is not None
    assert resolution.sourcename == "parser.y"


def test_global_headers_and_generated_global_headers(write_tree) -> None:
    root = write_tree({"include/windef.h": "", "include/objidl.idl": ""})
    resolver = _resolver(root)

    plain = resolver.resolve_include(IncludeNode(name="windef.h"))
    assert plain is not None
    assert plain.filename == "../../include/windef.h"
    assert plain.sourcename is None

    generated = resolver.resolve_include(IncludeNode(name="objidl.h"))
    assert generated is not None
    assert generated.filename == "../../include/objidl.h"
    assert generated.sourcename == "../../include/objidl.idl"


def test_parent_source_directory_is_searched(write_tree) -> None:
    root = write_tree({"dlls/foo/shared.h": "", "dlls/foo_ext/Makefile.in": ""})
    resolver = _resolver(root, "dlls/foo_ext", PARENTSRC="../foo")
    resolution = resolver.resolve_include(IncludeNode(name="shared.h"))
    assert resolution is not None
    assert resolution.filename == "../foo/shared.h"


def test_extra_include_paths(write_tree) -> None:
    root = write_tree({"dlls/foo/private/extra.h": ""})
    resolver = _resolver(root, EXTRAINCL="-Iprivate -DFOO")
    assert resolver.unit.include_paths == ["private"]
    assert resolver.unit.define_args == ["-D__WINESRC__", "-DFOO"]
    resolution = resolver.resolve_include(IncludeNode(name="extra.h"))
    assert resolution is not None
    assert resolution.filename == "private/extra.h"


def test_msvcrt_headers_only_for_msvcrt_units(write_tree) -> None:
    root = write_tree({"include/msvcrt/stdio.h": ""})
    node = IncludeNode(name="stdio.h", kind=IncludeKind.SYSTEM)
    assert _resolver(root).resolve_include(node) is None
    resolution = _resolver(root, IMPORTS="msvcrt").resolve_include(node)
    assert resolution is not None
    assert resolution.filename == "../../include/msvcrt/stdio.h"


def test_same_directory_fallback_for_quoted_includes(write_tree) -> None:
    root = write_tree({"dlls/foo/sub/a.h": "", "dlls/foo/sub/b.h": ""})
    resolver = _resolver(root)
    parent = IncludeNode(name="sub/a.h")
    found = resolver.resolve_include(parent)
    assert found is not None
    parent.file, parent.filename = found.file, found.filename

    resolution = resolver.resolve_include(IncludeNode(name="b.h", included_by=parent))
    assert resolution is not None
    assert resolution.filename == "sub/b.h"


def test_missing_quoted_include_raises_with_chain(write_tree, load_unit) -> None:
    root = write_tree(
        {
            "dlls/foo/Makefile.in": "C_SRCS = main.c\n",
            "dlls/foo/main.c": '#include "a.h"\n',
            "dlls/foo/a.h": '/* a */\n\n#include "missing.h"\n',
        }
    )
    with pytest.raises(ResolutionError) as excinfo:
        load_unit(root, "dlls/foo")

    err = excinfo.value
    assert err.filename == "dlls/foo/a.h"
    assert err.line == 3
    assert err.notes == (("dlls/foo/main.c", 1, "a.h"),)
    assert err.report() == (
        "dlls/foo/a.h:3: error: missing.h: No such file or directory\n"
        "dlls/foo/main.c:1: note: a.h was first included here\n"
    )


def test_missing_declared_source_is_a_resource_error(write_tree) -> None:
    root = write_tree({"dlls/foo/Makefile.in": ""})
    with pytest.raises(ResourceError, match="open nope.c: No such file or directory"):
        _resolver(root).resolve_source(IncludeNode(name="nope.c"))
