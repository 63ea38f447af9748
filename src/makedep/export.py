"""Dependency graph snapshot and export helpers."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import cbor2

from makedep.graph import flatten_dependencies
from makedep.unit import BuildUnit


@dataclass(frozen=True, slots=True)
class SourceSnapshot:
    name: str
    filename: str | None
    generated: bool
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class GraphSnapshot:
    """Per-unit source lists with their flattened prerequisites."""

    units: dict[str, tuple[SourceSnapshot, ...]] = field(default_factory=dict)
    schema_version: int = 1

    @classmethod
    def from_units(cls, units: Iterable[BuildUnit]) -> GraphSnapshot:
        snapshot: dict[str, tuple[SourceSnapshot, ...]] = {}
        for unit in units:
            snapshot[unit.name] = tuple(
                SourceSnapshot(
                    name=source.name,
                    filename=source.filename,
                    generated=source.generated,
                    dependencies=tuple(flatten_dependencies(source)),
                )
                for source in unit.sources
            )
        return cls(units=snapshot)

    def dependencies_of(self, unit: str, source: str) -> tuple[str, ...]:
        for entry in self.units.get(unit, ()):
            if entry.name == source:
                return entry.dependencies
        raise KeyError(f"{unit}: {source}")

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "units": {
                unit: [
                    {
                        "name": entry.name,
                        "filename": entry.filename,
                        "generated": entry.generated,
                        # Prerequisite order is significant; keep it.
                        "dependencies": list(entry.dependencies),
                    }
                    for entry in entries
                ]
                for unit, entries in sorted(self.units.items())
            },
        }


__all__ = ["GraphSnapshot", "SourceSnapshot"]
