"""Resource-script scanner: ``/* @makedep: NAME */`` comments plus ``#`` directives."""

from __future__ import annotations

from makedep.errors import DirectiveError
from makedep.models import IncludeKind, PhysicalFile
from makedep.scanners.c import parse_cpp_directive
from makedep.scanners.lines import iter_lines

MAKEDEP_MARKER = "@makedep:"


def _parse_makedep_comment(source: PhysicalFile, text: str, line: int) -> None:
    body = text.lstrip()
    if not body.startswith(MAKEDEP_MARKER):
        return
    body = body[len(MAKEDEP_MARKER) :].lstrip()

    if body.startswith('"'):
        end = body.find('"', 1)
        name = body[1:end]
    else:
        end = 0
        while end < len(body) and not body[end].isspace() and body[end] != "*":
            end += 1
        if end == len(body):
            end = -1
        name = body[:end]
    if end == -1:
        raise DirectiveError("malformed makedep comment", filename=source.name, line=line)
    source.add_dependency(name, IncludeKind.NORMAL, line)


def scan_rc_file(source: PhysicalFile, text: str) -> None:
    for lineno, line in iter_lines(text):
        stripped = line.lstrip()
        if stripped.startswith("/*"):
            _parse_makedep_comment(source, stripped[2:], lineno)
            continue
        parse_cpp_directive(source, line, lineno)
