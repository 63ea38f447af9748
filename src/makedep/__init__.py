"""Public package entrypoint for the makedep build-file generator."""

from .cache import FileCache
from .config import ToolchainConfig
from .errors import (
    DirectiveError,
    ErrorCode,
    MakedepError,
    ResolutionError,
    ResourceError,
    SourceError,
    UsageError,
    VariableError,
)
from .export import GraphSnapshot, SourceSnapshot
from .generator import Generator, RunResult
from .graph import IncludeGraphBuilder, flatten_dependencies
from .models import (
    Dependency,
    FileFlag,
    IncludeKind,
    IncludeNode,
    PhysicalFile,
    SourceEntry,
)
from .observability import StructuredLogger
from .resolver import IncludeResolver, Resolution
from .unit import BuildUnit
from .variables import VariableScope, VariableStore, parse_makeflags

__all__ = [
    "BuildUnit",
    "Dependency",
    "DirectiveError",
    "ErrorCode",
    "FileCache",
    "FileFlag",
    "Generator",
    "GraphSnapshot",
    "IncludeGraphBuilder",
    "IncludeKind",
    "IncludeNode",
    "IncludeResolver",
    "MakedepError",
    "PhysicalFile",
    "Resolution",
    "ResolutionError",
    "ResourceError",
    "RunResult",
    "SourceEntry",
    "SourceError",
    "SourceSnapshot",
    "StructuredLogger",
    "ToolchainConfig",
    "UsageError",
    "VariableError",
    "VariableScope",
    "VariableStore",
    "flatten_dependencies",
    "parse_makeflags",
]
