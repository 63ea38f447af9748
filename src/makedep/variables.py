"""Make-style variable store and ``$(NAME)`` expansion.

Lookups follow override precedence: command line, then the build unit's own
descriptor, then the root descriptor.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from makedep.errors import VariableError
from makedep.paths import make_identifier

_ASSIGNMENT_RE = re.compile(r"([A-Za-z0-9_]+)\s*=\s*(.*)\Z", re.DOTALL)


@dataclass(slots=True)
class VariableStore:
    """Name/value table; redefining a name replaces the previous value."""

    _values: dict[str, str] = field(default_factory=dict)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def parse_assignment(self, text: str) -> bool:
        """Record a ``NAME = value`` assignment; return False if *text* is not one."""
        match = _ASSIGNMENT_RE.match(text)
        if match is None:
            return False
        self.set(match.group(1), match.group(2))
        return True

    def names(self) -> list[str]:
        return sorted(self._values)

    def items(self) -> list[tuple[str, str]]:
        """Return assignments in the order names were first defined."""
        return list(self._values.items())

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._values)


def parse_makeflags(flags: str, store: VariableStore) -> None:
    """Split a MAKEFLAGS-like string and record every assignment it contains.

    Words are separated by whitespace; a backslash escapes the next character.
    """
    word: list[str] = []
    pos = 0
    while pos <= len(flags):
        ch = flags[pos] if pos < len(flags) else ""
        if not ch or ch.isspace():
            if word:
                store.parse_assignment("".join(word))
                word = []
        elif ch == "\\" and pos + 1 < len(flags):
            pos += 1
            word.append(flags[pos])
        else:
            word.append(ch)
        pos += 1


@dataclass(slots=True)
class VariableScope:
    """Resolution view for one build unit."""

    local: VariableStore
    cmdline: VariableStore = field(default_factory=VariableStore)
    top: VariableStore | None = None

    def get(self, name: str) -> str | None:
        value = self.cmdline.get(name)
        if value is not None:
            return value
        value = self.local.get(name)
        if value is not None:
            return value
        if self.top is not None:
            return self.top.get(name)
        return None

    def expand(self, text: str) -> str:
        """Rewrite every ``$(NAME)`` in *text*; ``${...}`` and ``$$`` are left alone."""
        return self._expand(text, ())

    def expand_var(self, name: str) -> str | None:
        """Return the expanded value of *name*, or None when unset or blank."""
        value = self.get(name)
        if value is None:
            return None
        expanded = self._expand(value, (name,))
        if not expanded.strip():
            return None
        return expanded

    def get_array(self, name: str) -> list[str]:
        value = self.expand_var(name)
        if value is None:
            return []
        return value.split()

    def get_file_local(self, filename: str, name: str) -> list[str]:
        """Expand a per-file variable such as ``foo_exe_LDFLAGS``."""
        return self.get_array(make_identifier(f"{filename}_{name}"))

    def _expand(self, text: str, stack: tuple[str, ...]) -> str:
        out: list[str] = []
        pos = 0
        while True:
            start = text.find("$", pos)
            if start == -1:
                out.append(text[pos:])
                return "".join(out)
            out.append(text[pos:start])
            marker = text[start + 1 : start + 2]
            if marker == "(":
                end = text.find(")", start + 2)
                if end == -1:
                    raise VariableError(f"syntax error in '{text}'")
                name = text[start + 2 : end]
                if ":" in name:
                    raise VariableError(f"pattern replacement not supported for '{name}'")
                if name in stack:
                    raise VariableError(
                        f"recursive variable '{name}' references itself",
                        context={"chain": " -> ".join((*stack, name))},
                    )
                value = self.get(name)
                if value:
                    out.append(self._expand(value, (*stack, name)))
                pos = end + 1
            elif marker == "{":
                end = text.find("}", start + 2)
                if end == -1:
                    raise VariableError(f"syntax error in '{text}'")
                out.append(text[start : end + 1])
                pos = end + 1
            elif marker == "$":
                out.append("$$")
                pos = start + 2
            else:
                raise VariableError(f"syntax error in '{text}'")


__all__ = ["VariableScope", "VariableStore", "parse_makeflags"]
