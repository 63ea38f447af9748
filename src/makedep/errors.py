"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum

PROGRAM_NAME = "makedep"


class ErrorCode(StrEnum):
    """Stable error identifiers used across the generator."""

    DIRECTIVE = "E_DIRECTIVE"
    RESOLUTION = "E_RESOLUTION"
    RESOURCE = "E_RESOURCE"
    VARIABLE = "E_VARIABLE"
    SOURCE = "E_SOURCE"
    USAGE = "E_USAGE"


class MakedepError(Exception):
    """Base error class that carries code, location, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]
    filename: str | None
    line: int

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        filename: str | None = None,
        line: int = 0,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value
        self.filename = filename
        self.line = line
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        for k, v in self.context.items():
            if v:
                parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    @property
    def location(self) -> str:
        if self.filename is None:
            return f"{PROGRAM_NAME}:"
        if self.line:
            return f"{self.filename}:{self.line}:"
        return f"{self.filename}:"

    def report(self) -> str:
        """Render the error the way compilers do, one line per message."""
        lines = [f"{self.location} error: {self.message}"]
        if self.hint:
            lines.append(f"{self.location} note: {self.hint}")
        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }
        if self.filename is not None:
            payload["filename"] = self.filename
            payload["line"] = self.line
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class DirectiveError(MakedepError):
    def __init__(
        self,
        message: str,
        *,
        filename: str | None = None,
        line: int = 0,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.DIRECTIVE,
            filename=filename,
            line=line,
            hint=hint,
            context=context,
        )


class ResolutionError(MakedepError):
    """A required include could not be found anywhere on the search list.

    ``notes`` holds one ``(filename, line, name)`` triple per ancestor of the
    missing file, innermost first.
    """

    def __init__(
        self,
        message: str,
        *,
        filename: str | None = None,
        line: int = 0,
        notes: Sequence[tuple[str, int, str]] = (),
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.RESOLUTION,
            filename=filename,
            line=line,
            context=context,
        )
        self.notes = tuple(notes)

    def report(self) -> str:
        lines = [super().report().rstrip("\n")]
        for parent, line, name in self.notes:
            lines.append(f"{parent}:{line}: note: {name} was first included here")
        return "\n".join(lines) + "\n"


class ResourceError(MakedepError):
    def __init__(
        self,
        message: str,
        *,
        filename: str | None = None,
        line: int = 0,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.RESOURCE,
            filename=filename,
            line=line,
            hint=hint,
            context=context,
        )

    @classmethod
    def from_os_error(
        cls, operation: str, exc: OSError, *, filename: str | None = None, line: int = 0
    ) -> ResourceError:
        reason = exc.strerror or str(exc)
        return cls(
            f"{operation}: {reason}",
            filename=filename,
            line=line,
            context={"operation": operation},
        )


class VariableError(MakedepError):
    def __init__(
        self,
        message: str,
        *,
        filename: str | None = None,
        line: int = 0,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.VARIABLE,
            filename=filename,
            line=line,
            hint=hint,
            context=context,
        )


class SourceError(MakedepError):
    def __init__(
        self,
        message: str,
        *,
        filename: str | None = None,
        line: int = 0,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.SOURCE,
            filename=filename,
            line=line,
            hint=hint,
            context=context,
        )


class UsageError(MakedepError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.USAGE, hint=hint, context=context)


__all__ = [
    "DirectiveError",
    "ErrorCode",
    "MakedepError",
    "PROGRAM_NAME",
    "ResolutionError",
    "ResourceError",
    "SourceError",
    "UsageError",
    "VariableError",
]
