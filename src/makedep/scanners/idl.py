"""Interface-definition scanner: ``import``, ``importlib`` and ``cpp_quote`` includes."""

from __future__ import annotations

from makedep.errors import DirectiveError
from makedep.models import IncludeKind, PhysicalFile
from makedep.scanners.c import parse_cpp_directive
from makedep.scanners.lines import iter_lines


def _parse_importlib(source: PhysicalFile, rest: str, line: int) -> None:
    rest = rest.lstrip()
    if not rest.startswith("("):
        return
    rest = rest[1:].lstrip()
    if not rest.startswith('"'):
        return
    end = rest.find('"', 1)
    if end == -1:
        raise DirectiveError("malformed importlib directive", filename=source.name, line=line)
    source.add_dependency(rest[1:end], IncludeKind.IMPORTLIB, line)


def _parse_import(source: PhysicalFile, rest: str, line: int) -> None:
    rest = rest.lstrip()
    if not rest.startswith('"'):
        return
    end = rest.find('"', 1)
    if end == -1:
        raise DirectiveError("malformed import directive", filename=source.name, line=line)
    source.add_dependency(rest[1:end], IncludeKind.IMPORT, line)


def _parse_cpp_quote(source: PhysicalFile, rest: str, line: int) -> None:
    rest = rest.lstrip()
    if not rest.startswith("("):
        return
    rest = rest[1:].lstrip()
    if not rest.startswith('"#'):
        return
    rest = rest[2:].lstrip()
    if not rest.startswith("include"):
        return
    rest = rest[7:].lstrip()

    if rest.startswith('\\"'):
        body, close, kind = rest[2:], '"', IncludeKind.CPP_QUOTE
    elif rest.startswith("<"):
        body, close, kind = rest[1:], ">", IncludeKind.CPP_QUOTE_SYSTEM
    else:
        return

    end = body.find(close)
    if end == -1 or (close == '"' and not body[:end].endswith("\\")):
        raise DirectiveError(
            "malformed #include directive inside cpp_quote", filename=source.name, line=line
        )
    name = body[: end - 1] if close == '"' else body[:end]
    source.add_dependency(name, kind, line)


def scan_idl_file(source: PhysicalFile, text: str) -> None:
    for lineno, line in iter_lines(text):
        stripped = line.lstrip()
        if stripped.startswith("importlib"):
            _parse_importlib(source, stripped[9:], lineno)
        elif stripped.startswith("import"):
            _parse_import(source, stripped[6:], lineno)
        elif stripped.startswith("cpp_quote"):
            _parse_cpp_quote(source, stripped[9:], lineno)
        else:
            parse_cpp_directive(source, stripped, lineno)
