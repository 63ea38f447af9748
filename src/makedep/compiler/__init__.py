"""Compiler interfaces for emitting build-file rules."""

from .emit_files import (
    GENERATED_BANNER,
    get_testlist_names,
    render_descriptor_head,
    render_gitignore,
    render_linguas,
    render_testlist,
    render_top_variables,
)
from .emit_make import (
    MAX_COLUMN,
    MakefileEmitter,
    MakefileWriter,
    SourceCategory,
    UnitEmission,
    emit_makefile_rules,
    get_include_install_path,
    get_shared_lib_names,
)

__all__ = [
    "GENERATED_BANNER",
    "MAX_COLUMN",
    "MakefileEmitter",
    "MakefileWriter",
    "SourceCategory",
    "UnitEmission",
    "emit_makefile_rules",
    "get_include_install_path",
    "get_shared_lib_names",
    "get_testlist_names",
    "render_descriptor_head",
    "render_gitignore",
    "render_linguas",
    "render_testlist",
    "render_top_variables",
]
