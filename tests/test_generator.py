from pathlib import Path

import pytest

from makedep import output
from makedep.errors import SourceError
from makedep.generator import Generator
from makedep.variables import VariableStore


def _read(root: Path, name: str) -> str:
    return (root / name).read_text(encoding="utf-8")


def test_tree_run_writes_every_build_file(wine_tree: Path) -> None:
    result = Generator(root=wine_tree).run()

    assert [unit.name for unit in result.units] == ["dlls/foo", "dlls/foo/tests", "po", "."]
    written = {path.relative_to(wine_tree).as_posix() for path in result.written}
    assert {
        "Makefile",
        ".gitignore",
        "dlls/foo/Makefile",
        "dlls/foo/.gitignore",
        "dlls/foo/tests/Makefile",
        "dlls/foo/tests/testlist.c",
        "po/Makefile",
        "po/LINGUAS",
    } <= written


def test_sub_unit_build_file_layout(wine_tree: Path) -> None:
    Generator(root=wine_tree).run()
    text = _read(wine_tree, "dlls/foo/Makefile")

    assert text.startswith(
        "# Automatically generated by make depend; DO NOT EDIT!!\n"
        "\n"
        "all:\n"
        "\n"
        "CC = gcc\n"
        "CFLAGS = -g -O2\n"
        "top_builddir = ../..\n"
        "top_srcdir = ../..\n"
        "srcdir = .\n"
        "\n"
        "MODULE = foo.dll\n"
    )
    head, separator, rules = text.partition("### Dependencies")
    assert separator
    assert "\tutil.c\n\nRC_SRCS = version.rc\n" in head
    assert "main.o: main.c\n" in rules
    assert "version.res: version.rc\n" in rules
    assert "libfoo.def: ../../tools/winebuild/winebuild foo.spec\n" in rules
    assert "install install-dev::" in rules


def test_side_files(wine_tree: Path) -> None:
    Generator(root=wine_tree).run()

    gitignore = _read(wine_tree, "dlls/foo/.gitignore").splitlines()
    assert gitignore[:3] == [
        "# Automatically generated by make depend; DO NOT EDIT!!",
        "/.gitignore",
        "/Makefile",
    ]
    assert {"/main.o", "/util.o", "/version.res", "/foo.dll.so", "/libfoo.def"} <= set(gitignore)

    testlist = _read(wine_tree, "dlls/foo/tests/testlist.c")
    assert '    { "main", func_main },' in testlist
    assert "/testlist.c" in _read(wine_tree, "dlls/foo/tests/.gitignore").splitlines()

    assert _read(wine_tree, "po/LINGUAS") == (
        "# Automatically generated by make depend; DO NOT EDIT!!\nfr\nde\n"
    )


def test_root_build_file_gets_subdir_rules(wine_tree: Path) -> None:
    Generator(root=wine_tree).run()
    text = _read(wine_tree, "Makefile")

    assert text.startswith("SUBDIRS = dlls/foo dlls/foo/tests po\nCC = gcc\n")
    assert "\n### Dependencies (everything below this line is auto-generated; DO NOT EDIT!!)\n" in text
    assert "Makefile: dlls/foo/Makefile.in dlls/foo/tests/Makefile.in po/Makefile.in\n" in text
    assert "distclean::\n" in text
    assert "dlls/foo/tests/testlist.c" in text


def test_second_run_is_stable(wine_tree: Path) -> None:
    Generator(root=wine_tree).run()
    names = ["Makefile", "dlls/foo/Makefile", "dlls/foo/tests/Makefile", "po/Makefile"]
    first = {name: _read(wine_tree, name) for name in names}

    generator = Generator(root=wine_tree)
    generator.run()

    assert {name: _read(wine_tree, name) for name in names} == first
    messages = [record["message"] for record in generator.logger.records_for_operation("write_file")]
    assert "testlist.c is up to date." in messages
    assert "LINGUAS is up to date." in messages


def test_command_line_overrides_reach_build_files(wine_tree: Path) -> None:
    cmdline = VariableStore()
    cmdline.set("CC", "clang")
    Generator(root=wine_tree, cmdline=cmdline).run()
    assert "\nCC = clang\n" in _read(wine_tree, "dlls/foo/Makefile")


def test_named_directories_only_regenerate_those_units(wine_tree: Path) -> None:
    root_before = _read(wine_tree, "Makefile")
    result = Generator(root=wine_tree).run(["dlls/foo"])

    assert [unit.name for unit in result.units] == ["dlls/foo"]
    assert (wine_tree / "dlls/foo/Makefile").is_file()
    assert not (wine_tree / "dlls/foo/tests/Makefile").exists()
    assert _read(wine_tree, "Makefile") == root_before


def test_failed_unit_removes_its_build_file(write_tree) -> None:
    root = write_tree(
        {
            "Makefile": "SUBDIRS = dlls/foo\n",
            "dlls/foo/Makefile.in": "C_SRCS = notes.txt\n",
            "dlls/foo/notes.txt": "",
            "dlls/foo/Makefile": "stale\n",
        }
    )
    generator = Generator(root=root)
    with pytest.raises(SourceError):
        generator.run()

    assert not (root / "dlls/foo/Makefile").exists()
    records = generator.logger.records_for_unit("dlls/foo")
    [record] = [record for record in records if record["level"] == "error"]
    assert record["operation"] == "write_unit"
    assert record["extra"] == {"code": "E_SOURCE"}


def test_out_of_tree_build_reads_sources_from_srcdir(write_tree) -> None:
    root = write_tree(
        {
            "build/Makefile": "srcdir = ../wine\nSUBDIRS = dlls/foo\n",
            "wine/dlls/foo/Makefile.in": "C_SRCS = main.c\n",
            "wine/dlls/foo/main.c": '#include "foo.h"\n',
            "wine/dlls/foo/foo.h": "",
        }
    )
    Generator(root=root / "build").run()

    text = _read(root, "build/dlls/foo/Makefile")
    assert "main.o: ../../../wine/dlls/foo/main.c\n" in text
    assert "main.o: ../../../wine/dlls/foo/foo.h\n" in text
    for flag in ("-I.", "-I../../../wine/dlls/foo", "-I../../include", "-I../../../wine/include"):
        assert f" {flag}" in text
    assert not (root / "build/dlls/foo/.gitignore").exists()


def test_interrupted_run_leaves_no_partial_files(
    wine_tree: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    Generator(root=wine_tree).run()
    assert (wine_tree / "dlls/foo/Makefile").is_file()

    def interrupt(*args: object) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(output.os, "replace", interrupt)
    with pytest.raises(KeyboardInterrupt):
        Generator(root=wine_tree).run()

    assert not (wine_tree / "dlls/foo/Makefile").exists()
    assert [path for path in wine_tree.rglob("*") if ".tmp" in path.name] == []
    assert (wine_tree / "dlls/foo/tests/Makefile").is_file()
