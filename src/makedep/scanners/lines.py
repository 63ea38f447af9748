"""Physical-to-logical line splitting shared by every scanner."""

from __future__ import annotations

from collections.abc import Iterator


def iter_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` pairs with backslash continuations joined.

    The reported number is the last physical line consumed, trailing ``\\r``
    is dropped, and a continuation at end of file yields what was collected.
    """
    parts = text.split("\n")
    last = len(parts) - 1
    pending: str | None = None
    lineno = 0
    for index, part in enumerate(parts):
        has_newline = index < last
        if not has_newline and not part:
            break
        lineno += 1
        if has_newline:
            if part.endswith("\r"):
                part = part[:-1]
            if part.endswith("\\"):
                pending = (pending or "") + part[:-1]
                continue
        yield lineno, (pending or "") + part
        pending = None
    if pending is not None:
        yield lineno, pending
