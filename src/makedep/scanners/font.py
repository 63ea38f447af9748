"""Font-descriptor scanner.

Build directives live inside the ``UComments:`` field of the font file, one
per embedded line; the field encodes its line breaks as ``+AAoA``.
"""

from __future__ import annotations

from makedep.models import PhysicalFile
from makedep.scanners.c import parse_pragma_directive
from makedep.scanners.lines import iter_lines

COMMENT_FIELD = "UComments:"
EMBEDDED_NEWLINE = "+AAoA"


def _parse_embedded_line(source: PhysicalFile, text: str, line: int) -> None:
    body = text.lstrip()
    if not body.startswith("#"):
        return
    body = body[1:].lstrip()
    if body.startswith("pragma"):
        parse_pragma_directive(source, body[6:], line)


def scan_font_file(source: PhysicalFile, text: str) -> None:
    for lineno, line in iter_lines(text):
        if not line.startswith(COMMENT_FIELD):
            continue
        value = line[len(COMMENT_FIELD) :].lstrip(" ")
        if len(value) > 1 and value.startswith('"') and line.endswith('"'):
            value = value[1:-1]

        *embedded, last = value.split(EMBEDDED_NEWLINE)
        for entry in embedded:
            _parse_embedded_line(source, entry, lineno)
        _parse_embedded_line(source, last, lineno)
        return
