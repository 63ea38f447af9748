import json
import signal
from pathlib import Path

import cbor2
import pytest

from makedep import cli, output

INSTALL_SIGNAL_HANDLERS = cli._install_signal_handlers


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MAKEFLAGS", raising=False)
    monkeypatch.setattr(cli, "_install_signal_handlers", lambda: None)


def test_relative_path_option(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["-R", "dlls/foo", "dlls/bar"]) == 0
    assert cli.main(["-R", "dlls/foo", "dlls/foo"]) == 0
    assert capsys.readouterr().out == "../bar\n.\n"


def test_relative_path_option_needs_two_directories(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["-R", "dlls/foo"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("makedep: error: Option -R needs two directories\n")
    assert "Usage: makedep [options] [directories]" in err


def test_unknown_option(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--bogus"]) == 1
    assert capsys.readouterr().err.startswith("makedep: error: Unknown option '--bogus'\n")


def test_run_regenerates_tree_from_working_directory(
    wine_tree: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(wine_tree)
    assert cli.main(["CC=clang"]) == 0
    assert "\nCC = clang\n" in (wine_tree / "dlls/foo/Makefile").read_text(encoding="utf-8")
    assert (wine_tree / "po/LINGUAS").is_file()


def test_makeflags_assignments_are_overrides(
    wine_tree: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(wine_tree)
    monkeypatch.setenv("MAKEFLAGS", "-j4 CFLAGS=-O0\\ -g")
    assert cli.main([]) == 0
    assert "\nCFLAGS = -O0 -g\n" in (wine_tree / "dlls/foo/Makefile").read_text(encoding="utf-8")


def test_alternate_output_name(write_tree, monkeypatch: pytest.MonkeyPatch) -> None:
    root = write_tree(
        {
            "GNUmakefile": "SUBDIRS = tools\n",
            "tools/GNUmakefile.in": "C_SRCS = tool.c\n",
            "tools/tool.c": "",
        }
    )
    monkeypatch.chdir(root)
    assert cli.main(["-fGNUmakefile"]) == 0
    assert (root / "tools/GNUmakefile").is_file()
    assert not (root / "tools/Makefile").exists()
    assert "tools/GNUmakefile.in" in (root / "GNUmakefile").read_text(encoding="utf-8")


def test_graph_and_log_exports(wine_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(wine_tree)
    assert cli.main(["--graph", "graph.json", "--log", "logs/run.jsonl"]) == 0

    graph = json.loads((wine_tree / "graph.json").read_text(encoding="utf-8"))
    assert graph["schema_version"] == 1
    [main] = [entry for entry in graph["units"]["dlls/foo"] if entry["name"] == "main.c"]
    assert main["dependencies"][:2] == ["../../include/config.h", "foo_private.h"]

    records = [
        json.loads(line)
        for line in (wine_tree / "logs/run.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    assert any(record["operation"] == "write_file" for record in records)

    assert cli.main(["--graph", "graph.cbor"]) == 0
    decoded = cbor2.loads((wine_tree / "graph.cbor").read_bytes())
    assert decoded == graph


def test_errors_exit_nonzero_with_location(
    write_tree, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = write_tree(
        {
            "Makefile": "SUBDIRS = dlls/foo\n",
            "dlls/foo/Makefile.in": "C_SRCS = main.c\n",
            "dlls/foo/main.c": '#include <stdio.h>\n#include "missing.h"\n',
        }
    )
    monkeypatch.chdir(root)
    assert cli.main(["--log", "run.jsonl"]) == 1
    assert capsys.readouterr().err == (
        "dlls/foo/main.c:2: error: missing.h: No such file or directory\n"
    )
    assert not (root / "dlls/foo/Makefile").exists()
    assert (root / "run.jsonl").is_file()


def test_signal_handlers_cover_termination_signals(monkeypatch: pytest.MonkeyPatch) -> None:
    installed: dict[int, object] = {}

    def record(signum: int, handler: object) -> None:
        installed[signum] = handler

    monkeypatch.setattr(signal, "signal", record)
    INSTALL_SIGNAL_HANDLERS()
    assert set(installed) == {signal.SIGINT, signal.SIGTERM, signal.SIGHUP}
    assert set(installed.values()) == {cli._exit_on_signal}


def test_termination_signal_unwinds_through_cleanup(
    wine_tree: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(wine_tree)
    assert cli.main([]) == 0

    def terminate(*args: object) -> None:
        cli._exit_on_signal(signal.SIGTERM, None)

    monkeypatch.setattr(output.os, "replace", terminate)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--log", "run.jsonl"])
    assert excinfo.value.code == 1
    assert not (wine_tree / "dlls/foo/Makefile").exists()
    assert [path for path in wine_tree.rglob("*") if ".tmp" in path.name] == []
    assert (wine_tree / "run.jsonl").is_file()
