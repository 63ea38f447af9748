"""Atomic replacement of generated files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from makedep.errors import ResourceError

ENCODING = "utf-8"
# mkstemp creates 0600 files; generated files are world-readable.
FILE_MODE = 0o644


def _encode(text: str) -> bytes:
    return text.encode(ENCODING, errors="surrogateescape")


def write_atomic(path: str | Path, text: str, *, only_if_changed: bool = False) -> bool:
    """Write *text* to a temporary file beside *path*, then rename it over *path*.

    With *only_if_changed*, an existing file with identical bytes is left
    untouched so its timestamp does not trigger rebuilds. Returns whether
    *path* was replaced.
    """
    output_path = Path(path)
    payload = _encode(text)
    if only_if_changed:
        try:
            if output_path.read_bytes() == payload:
                return False
        except OSError:
            pass

    try:
        fd, temp_name = tempfile.mkstemp(prefix=f"{output_path.name}.tmp", dir=output_path.parent)
    except OSError as exc:
        raise ResourceError(
            f"failed to create output file for '{output_path}'",
            context={"operation": "create", "reason": exc.strerror or str(exc)},
        ) from exc

    committed = False
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        os.chmod(temp_name, FILE_MODE)
        os.replace(temp_name, output_path)
        committed = True
    except OSError as exc:
        raise ResourceError(
            f"failed to rename output file to '{output_path}'",
            context={"operation": "rename", "reason": exc.strerror or str(exc)},
        ) from exc
    finally:
        if not committed:
            Path(temp_name).unlink(missing_ok=True)
    return True


__all__ = ["ENCODING", "write_atomic"]
