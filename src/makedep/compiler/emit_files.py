"""Side files written next to each unit's build file."""

from __future__ import annotations

from collections.abc import Iterable

from makedep.paths import replace_extension
from makedep.unit import SEPARATOR, BuildUnit
from makedep.variables import VariableStore

GENERATED_BANNER = "Automatically generated by make depend; DO NOT EDIT!!"
SEPARATOR_LINE = f"\n{SEPARATOR} (everything below this line is auto-generated; DO NOT EDIT!!)\n"


def render_top_variables(unit: BuildUnit, top_variables: VariableStore) -> str:
    """Inline the root descriptor's assignments at the head of a sub-unit's build file."""
    if unit.base_dir is None:
        return ""
    lines = [f"# {GENERATED_BANNER}", "", "all:", ""]
    for name, _value in top_variables.items():
        if name == "SUBDIRS":
            continue
        lines.append(f"{name} = {unit.variables.get(name) or ''}")
    lines.append("")
    return "\n".join(lines) + "\n"


def render_descriptor_head(descriptor_text: str) -> str:
    """Return the descriptor up to and including its separator line.

    A separator line is appended when the descriptor has none.
    """
    pos = 0
    while pos < len(descriptor_text):
        end = descriptor_text.find("\n", pos)
        end = len(descriptor_text) if end == -1 else end + 1
        if descriptor_text.startswith(SEPARATOR, pos):
            return descriptor_text[:end]
        pos = end
    return descriptor_text + SEPARATOR_LINE


def get_testlist_names(unit: BuildUnit) -> list[str]:
    return [
        replace_extension(source.name, ".c", "")
        for source in unit.sources
        if not source.generated and source.name.endswith(".c")
    ]


def render_testlist(unit: BuildUnit) -> str:
    names = get_testlist_names(unit)
    lines = [
        f"/* {GENERATED_BANNER} */",
        "",
        "#define WIN32_LEAN_AND_MEAN",
        "#include <windows.h>",
        "",
        "#define STANDALONE",
        '#include "wine/test.h"',
        "",
    ]
    lines.extend(f"extern void func_{name}(void);" for name in names)
    lines.append("")
    lines.append("const struct test winetest_testlist[] =")
    lines.append("{")
    lines.extend(f'    {{ "{name}", func_{name} }},' for name in names)
    lines.append("    { 0, 0 }")
    lines.append("};")
    return "\n".join(lines) + "\n"


def render_linguas(unit: BuildUnit) -> str:
    lines = [f"# {GENERATED_BANNER}"]
    lines.extend(
        replace_extension(source.name, ".po", "")
        for source in unit.sources
        if source.name.endswith(".po")
    )
    return "\n".join(lines) + "\n"


def render_gitignore(files: Iterable[str]) -> str:
    lines = [f"# {GENERATED_BANNER}"]
    # Names without a directory are anchored to the unit's own directory.
    lines.extend(name if "/" in name else f"/{name}" for name in files)
    return "\n".join(lines) + "\n"


__all__ = [
    "GENERATED_BANNER",
    "SEPARATOR_LINE",
    "get_testlist_names",
    "render_descriptor_head",
    "render_gitignore",
    "render_linguas",
    "render_testlist",
    "render_top_variables",
]
