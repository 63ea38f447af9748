"""Scanner for ``.in`` templates, including the man page section lookup."""

from __future__ import annotations

from makedep.models import CONFIG_HEADER, IncludeKind, ManPageInfo, PhysicalFile
from makedep.scanners.lines import iter_lines


def scan_template_file(source: PhysicalFile, text: str) -> None:
    # Substituted values come from the configuration, so every template
    # is rebuilt when the configuration header changes.
    source.add_dependency(CONFIG_HEADER, IncludeKind.SYSTEM)

    if not source.name.endswith(".man.in"):
        return

    for _lineno, line in iter_lines(text):
        if not line.startswith(".TH"):
            continue
        fields = line.split()
        # .TH program section ...
        if len(fields) < 3:
            continue
        source.metadata = ManPageInfo(section=fields[2])
        return
