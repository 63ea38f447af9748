"""Run-wide store of scanned files, keyed by path relative to the run root."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from makedep.errors import ResourceError
from makedep.models import PhysicalFile
from makedep.observability import StructuredLogger
from makedep.scanners import scanner_for


@dataclass(slots=True)
class FileCache:
    """Parse-once cache of :class:`PhysicalFile` records.

    Only files that exist are remembered; a missing path is checked against
    the filesystem again on every request.
    """

    root: Path
    logger: StructuredLogger | None = None
    _files: dict[str, PhysicalFile] = field(default_factory=dict)

    def load(self, name: str) -> PhysicalFile | None:
        cached = self._files.get(name)
        if cached is not None:
            return cached

        path = self.root / name
        if not path.is_file():
            return None
        try:
            text = path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as exc:
            raise ResourceError.from_os_error("open", exc, filename=name) from exc

        physical = PhysicalFile(name=name)
        self._files[name] = physical
        scanner = scanner_for(name)
        if scanner is not None:
            scanner(physical, text)
        if self.logger is not None:
            self.logger.log(
                operation="scan",
                unit=None,
                phase="load",
                file=name,
                message=f"Scanned {name}: {len(physical.deps)} dependencies.",
                level="debug",
            )
        return physical

    def __contains__(self, name: object) -> bool:
        return name in self._files

    def __len__(self) -> int:
        return len(self._files)


__all__ = ["FileCache"]
