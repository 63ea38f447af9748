"""Per-format dependency scanners, dispatched by filename suffix."""

from __future__ import annotations

from collections.abc import Callable

from makedep.models import PhysicalFile
from makedep.scanners.c import scan_c_file
from makedep.scanners.font import scan_font_file
from makedep.scanners.idl import scan_idl_file
from makedep.scanners.rc import scan_rc_file
from makedep.scanners.template import scan_template_file

Scanner = Callable[[PhysicalFile, str], None]

SCANNERS: dict[str, Scanner] = {
    ".c": scan_c_file,
    ".h": scan_c_file,
    ".inl": scan_c_file,
    ".l": scan_c_file,
    ".m": scan_c_file,
    ".rh": scan_c_file,
    ".x": scan_c_file,
    ".y": scan_c_file,
    ".idl": scan_idl_file,
    ".rc": scan_rc_file,
    ".in": scan_template_file,
    ".sfd": scan_font_file,
}


def scanner_for(name: str) -> Scanner | None:
    """Return the scanner registered for *name*'s suffix; None means opaque."""
    for suffix, scanner in SCANNERS.items():
        if name.endswith(suffix):
            return scanner
    return None


__all__ = [
    "SCANNERS",
    "Scanner",
    "scan_c_file",
    "scan_font_file",
    "scan_idl_file",
    "scan_rc_file",
    "scan_template_file",
    "scanner_for",
]
