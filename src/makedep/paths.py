"""Path-string helpers.

Paths are kept as plain ``/``-separated strings rather than ``Path`` objects
because they are written verbatim into build files and must stay relative to
the directory the build file lives in.
"""

from __future__ import annotations


def get_extension(name: str) -> str | None:
    """Return the final extension of *name* including the dot, if any."""
    pos = name.rfind(".")
    if pos == -1 or "/" in name[pos:]:
        return None
    return name[pos:]


def replace_extension(name: str, old_ext: str, new_ext: str) -> str:
    if name.endswith(old_ext):
        name = name[: len(name) - len(old_ext)]
    return name + new_ext


def prepend_extension(name: str, prepend: str, new_ext: str | None = None) -> str:
    """Insert *prepend* before the extension, e.g. ``foo.dll`` -> ``foo_crossres.dll``."""
    ext = get_extension(name)
    stem = name[: len(name) - len(ext)] if ext else name
    return stem + prepend + (ext or new_ext or "")


def replace_filename(path: str | None, name: str) -> str:
    if not path or "/" not in path:
        return name
    return path[: path.rfind("/") + 1] + name


def concat_paths(base: str | None, path: str | None) -> str:
    if not base:
        return path if path else "."
    if not path:
        return base
    if path.startswith("/"):
        return path
    return f"{base}/{path}"


def relative_path(src: str, dest: str) -> str | None:
    """Return *dest* relative to directory *src*, or ``None`` when they are the same.

    A *src* of ``.`` is equivalent to an empty path.
    """
    if src == ".":
        src = ""
    from_parts = [part for part in src.split("/") if part]
    dest_parts = [part for part in dest.split("/") if part]

    common = 0
    while (
        common < len(from_parts)
        and common < len(dest_parts)
        and from_parts[common] == dest_parts[common]
    ):
        common += 1

    parts = [".."] * (len(from_parts) - common) + dest_parts[common:]
    if not parts:
        return None
    return "/".join(parts)


def make_identifier(name: str) -> str:
    """Map every non-alphanumeric character to ``_`` (file-local variable names)."""
    return "".join(ch if ch.isascii() and ch.isalnum() else "_" for ch in name)


__all__ = [
    "concat_paths",
    "get_extension",
    "make_identifier",
    "prepend_extension",
    "relative_path",
    "replace_extension",
    "replace_filename",
]
