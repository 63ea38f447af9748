import pytest

from makedep.compiler import (
    MAX_COLUMN,
    MakefileWriter,
    SourceCategory,
    UnitEmission,
    emit_makefile_rules,
    get_include_install_path,
    get_shared_lib_names,
)
from makedep.config import ToolchainConfig
from makedep.errors import SourceError
from makedep.unit import BuildUnit
from makedep.variables import VariableStore


def _emit(
    unit: BuildUnit,
    config: ToolchainConfig | None = None,
    linguas: list[str] | None = None,
) -> UnitEmission:
    top = BuildUnit.create(None, cmdline=VariableStore())
    top.submakes = [unit]
    return emit_makefile_rules(
        unit, config=config or ToolchainConfig(), top=top, linguas=linguas or []
    )


def test_writer_wraps_before_max_column() -> None:
    out = MakefileWriter()
    out.write("foo:")
    out.filenames(["a" * 40, "b" * 40, "c" * 40])
    out.write("\n")
    assert out.getvalue() == f"foo: {'a' * 40} {'b' * 40} \\\n  {'c' * 40}\n"
    assert out.column == 0


def test_writer_column_restarts_after_interior_newline() -> None:
    out = MakefileWriter()
    out.write(f"\tcommand {'x' * 80}; \\\n  ")
    assert out.column == 2
    out.filename("y" * 40)
    assert out.getvalue().count("\\\n") == 1
    assert out.column == 2 + 1 + 40


def test_shared_library_names() -> None:
    assert get_shared_lib_names("libfoo.so.1.2") == ["libfoo.so.1.2", "libfoo.so.1", "libfoo.so"]
    assert get_shared_lib_names("libfoo.1.2.dylib") == [
        "libfoo.1.2.dylib",
        "libfoo.1.dylib",
        "libfoo.dylib",
    ]
    assert get_shared_lib_names("libfoo.so") == ["libfoo.so"]


def test_include_install_paths() -> None:
    assert get_include_install_path("wine/test.h") == "test.h"
    assert get_include_install_path("msvcrt/stdio.h") == "msvcrt/stdio.h"
    assert get_include_install_path("windef.h") == "windows/windef.h"


def test_source_categories() -> None:
    assert SourceCategory.for_name("main.c") == (SourceCategory.COMPILE, "main", "c")
    assert SourceCategory.for_name("parser.tab.c") == (SourceCategory.COMPILE, "parser.tab", "c")
    assert SourceCategory.for_name("wine.man.in") == (SourceCategory.TEMPLATE, "wine.man", "in")
    assert SourceCategory.for_name("fr.po")[0] is SourceCategory.TRANSLATION
    with pytest.raises(SourceError, match="unsupported file type notes.txt"):
        SourceCategory.for_name("notes.txt")
    with pytest.raises(SourceError):
        SourceCategory.for_name("README")


def test_module_compile_link_and_install_rules(write_tree, load_unit) -> None:
    root = write_tree(
        {
            "dlls/foo/Makefile.in": "MODULE = foo.dll\nC_SRCS = main.c\n",
            "dlls/foo/main.c": '#include "foo.h"\n',
            "dlls/foo/foo.h": "",
        }
    )
    unit = load_unit(root, "dlls/foo")
    emission = _emit(unit)
    text = emission.text

    assert (
        "main.o: main.c\n"
        "\t$(CC) -c -o $@ main.c -I. -I../../include -D__WINESRC__ $(CFLAGS)\n"
        "main.o: foo.h\n"
    ) in text
    assert "foo.dll.so foo.dll.fake: foo.spec main.o" in text
    assert "install install-lib:: foo.dll.so foo.dll.fake\n" in text
    assert (
        '\tSTRIPPROG="$(STRIP)" ../../tools/install-sh $(INSTALL_PROGRAM_FLAGS) '
        "foo.dll.so $(DESTDIR)$(dlldir)/foo.dll.so\n"
    ) in text
    assert "uninstall::\n" in text
    assert "clean::\n\trm -f main.o foo.dll.so foo.dll.fake\n" in text
    assert emission.targets == ["main.o", "foo.dll.so", "foo.dll.fake"]
    assert text.rstrip("\n").splitlines()[-1].startswith(".PHONY: all")


def test_interface_rules(write_tree, load_unit) -> None:
    root = write_tree(
        {
            "include/foo/Makefile.in": "IDL_SRCS = foo.idl\n",
            "include/foo/foo.idl": "",
            "include/rpc.h": "",
            "include/rpcndr.h": "",
        }
    )
    unit = load_unit(root, "include/foo")
    text = _emit(unit).text

    assert (
        "foo.h: ../../tools/widl/widl\n"
        "\t../../tools/widl/widl -o $@ -I. -I../../include -D__WINESRC__ foo.idl\n"
        "foo.h: foo.idl\n"
    ) in text
    assert "all: foo.h\n" in text
    assert "install install-dev:: foo.h\n" in text
    assert (
        "\t../../tools/install-sh -m 644 $(INSTALL_DATA_FLAGS) foo.idl "
        "$(DESTDIR)$(includedir)/windows/foo.idl\n"
    ) in text


def test_shared_library_symlinks(write_tree, load_unit) -> None:
    root = write_tree(
        {
            "libs/wine/Makefile.in": "SHAREDLIB = libwine.so.1.0\nC_SRCS = loader.c\n",
            "libs/wine/loader.c": "",
        }
    )
    text = _emit(load_unit(root, "libs/wine")).text
    assert "libwine.so.1.0: loader.o\n\t$(CC) -o $@ loader.o -lwine_port $(LDFLAGS)\n" in text
    assert (
        "libwine.so.1: libwine.so.1.0\n"
        "\trm -f libwine.so.1 && ln -s libwine.so.1.0 libwine.so.1\n"
        "libwine.so: libwine.so.1\n"
        "\trm -f libwine.so && ln -s libwine.so.1 libwine.so\n"
    ) in text


def test_program_rules(write_tree, load_unit) -> None:
    root = write_tree(
        {
            "tools/tool/Makefile.in": "PROGRAMS = tool\nC_SRCS = tool.c\ntool_LDFLAGS = -lm\n",
            "tools/tool/tool.c": "",
        }
    )
    emission = _emit(load_unit(root, "tools/tool"))
    assert "tool: tool.o\n\t$(CC) -o $@ tool.o -lm -lwine_port $(LDFLAGS)\n" in emission.text
    assert emission.targets == ["tool.o", "tool"]


def test_test_module_rules(wine_tree, load_unit) -> None:
    unit = load_unit(wine_tree, "dlls/foo/tests")
    text = _emit(unit).text
    assert (
        "main.ok:\n"
        "\t../../../tools/runtest $(RUNTESTFLAGS) -T ../../.. -M foo.dll"
        " -p foo_test.exe.so main && touch $@\n"
    ) in text
    assert "check test: main.ok\n" in text
    assert "testclean::\n\trm -f main.ok\n" in text
    assert "all: ../../../programs/winetest/foo_test.res\n" in text


def test_translation_rules(wine_tree, load_unit) -> None:
    unit = load_unit(wine_tree, "po")
    emission = _emit(unit, linguas=["fr", "de"])
    assert "fr.mo: fr.po\n\tmsgfmt -o $@ fr.po\n" in emission.text
    assert emission.targets == ["fr.mo", "de.mo"]


def test_long_file_lists_are_wrapped(write_tree, load_unit) -> None:
    names = [f"source_file_number_{index:02d}.c" for index in range(12)]
    files = {f"dlls/big/{name}": "" for name in names}
    files["dlls/big/Makefile.in"] = "C_SRCS = " + " ".join(names) + "\n"
    text = _emit(load_unit(write_tree(files), "dlls/big")).text

    assert " \\\n  source_file_number_" in text
    assert max(len(line) for line in text.splitlines()) <= MAX_COLUMN + 2


def test_unsupported_source_type_fails(write_tree, load_unit) -> None:
    root = write_tree({"dlls/foo/Makefile.in": "C_SRCS = notes.txt\n", "dlls/foo/notes.txt": ""})
    unit = load_unit(root, "dlls/foo")
    with pytest.raises(SourceError, match="unsupported file type notes.txt"):
        _emit(unit)
