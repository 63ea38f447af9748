"""Command-line entry point."""

from __future__ import annotations

import argparse
import os
import signal
import sys
from collections.abc import Sequence
from pathlib import Path
from types import FrameType
from typing import NoReturn

from makedep.errors import MakedepError, UsageError
from makedep.export import GraphSnapshot
from makedep.generator import Generator
from makedep.paths import relative_path
from makedep.unit import DEFAULT_OUTPUT_NAME
from makedep.variables import VariableStore, parse_makeflags

USAGE = """\
Usage: makedep [options] [directories]
Options:
   -R from to  Compute the relative path between two directories
   -fxxx       Store output in file 'xxx' (default: Makefile)
"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        prefix = "unrecognized arguments: "
        if message.startswith(prefix):
            raise UsageError(f"Unknown option '{message[len(prefix):]}'")
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="makedep", usage=USAGE, add_help=False, allow_abbrev=False)
    parser.add_argument("-f", dest="output_name", default=DEFAULT_OUTPUT_NAME, metavar="NAME")
    parser.add_argument("-R", dest="relative", action="store_true")
    parser.add_argument("--log", type=Path, help="write structured run records as JSON lines")
    parser.add_argument(
        "--graph",
        type=Path,
        help="write the dependency graph (CBOR for .cbor names, JSON otherwise)",
    )
    parser.add_argument("words", nargs="*", metavar="directory | NAME=value")
    return parser


def _exit_on_signal(signum: int, frame: FrameType | None) -> None:
    raise SystemExit(1)


def _install_signal_handlers() -> None:
    for name in ("SIGTERM", "SIGINT", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _exit_on_signal)


def _split_words(words: Sequence[str], cmdline: VariableStore) -> list[str]:
    """Record ``NAME=value`` words as overrides; return the remaining directories."""
    directories: list[str] = []
    for word in words:
        if "=" in word and cmdline.parse_assignment(word):
            continue
        directories.append(word)
    return directories


def run(argv: Sequence[str] | None = None) -> int:
    cmdline = VariableStore()
    parse_makeflags(os.environ.get("MAKEFLAGS", ""), cmdline)

    args = build_parser().parse_intermixed_args(argv)
    if args.output_name == "":
        args.output_name = DEFAULT_OUTPUT_NAME
    directories = _split_words(args.words, cmdline)

    if args.relative:
        if len(directories) != 2:
            raise UsageError("Option -R needs two directories")
        print(relative_path(directories[0], directories[1]) or ".")
        return 0

    _install_signal_handlers()
    generator = Generator(root=Path.cwd(), cmdline=cmdline, output_name=args.output_name)
    try:
        result = generator.run(directories)
    finally:
        if args.log is not None:
            generator.logger.to_json_lines(args.log)

    if args.graph is not None:
        snapshot = GraphSnapshot.from_units(result.units)
        if args.graph.suffix == ".cbor":
            snapshot.to_cbor(args.graph)
        else:
            snapshot.to_json(args.graph)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    try:
        return run(argv)
    except UsageError as err:
        sys.stderr.write(err.report())
        sys.stderr.write(USAGE)
        return 1
    except MakedepError as err:
        sys.stderr.write(err.report())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
