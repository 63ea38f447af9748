"""Build-file rule emission.

Generates the rule fragment appended below the dependency separator of each
unit's build file, including:
- generation rules for grammars, templates, interface files, resources,
  message catalogs, fonts, icons and translations
- compile rules (plus cross-compiled variants) with flattened prerequisites
- link rules for modules, static and shared libraries, import libraries,
  programs, test modules and resource-only modules
- aggregate ``all``, ``install-lib``/``install-dev``, ``uninstall``, ``clean``,
  ``distclean``, ``check``/``test`` and ``.PHONY`` targets
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from makedep.config import ToolchainConfig
from makedep.errors import SourceError
from makedep.graph import flatten_dependencies
from makedep.models import (
    IDL_OUTPUTS,
    FileFlag,
    InstallClass,
    InstallKind,
    InstallRule,
    SourceEntry,
)
from makedep.paths import concat_paths, get_extension, prepend_extension, replace_extension
from makedep.unit import DEFAULT_OUTPUT_NAME, BuildUnit

MAX_COLUMN = 100
INSTALL_SH = "tools/install-sh"


class SourceCategory(StrEnum):
    """How a declared or generated source is turned into rules."""

    GRAMMAR = "grammar"
    XTEMPLATE = "xtemplate"
    LEXER = "lexer"
    RESOURCE = "resource"
    MESSAGES = "messages"
    INTERFACE = "interface"
    TEMPLATE = "template"
    FONT = "font"
    ICON = "icon"
    TRANSLATION = "translation"
    COMPILED_RESOURCE = "compiled_resource"
    TYPELIB = "typelib"
    HEADER = "header"
    COMPILE = "compile"

    @classmethod
    def for_name(cls, name: str) -> tuple[SourceCategory, str, str]:
        """Return ``(category, stem, extension)`` for a source name."""
        ext = get_extension(name)
        category = _CATEGORY_BY_EXTENSION.get(ext[1:]) if ext else None
        if ext is None or category is None:
            raise SourceError(f"unsupported file type {name}", context={"source": name})
        return category, name[: -len(ext)], ext[1:]


_CATEGORY_BY_EXTENSION: dict[str, SourceCategory] = {
    "y": SourceCategory.GRAMMAR,
    "x": SourceCategory.XTEMPLATE,
    "l": SourceCategory.LEXER,
    "rc": SourceCategory.RESOURCE,
    "mc": SourceCategory.MESSAGES,
    "idl": SourceCategory.INTERFACE,
    "in": SourceCategory.TEMPLATE,
    "sfd": SourceCategory.FONT,
    "svg": SourceCategory.ICON,
    "po": SourceCategory.TRANSLATION,
    "res": SourceCategory.COMPILED_RESOURCE,
    "tlb": SourceCategory.TYPELIB,
    "h": SourceCategory.HEADER,
    "rh": SourceCategory.HEADER,
    "inl": SourceCategory.HEADER,
    "c": SourceCategory.COMPILE,
    "m": SourceCategory.COMPILE,
    "o": SourceCategory.COMPILE,
}


# ── Helpers ─────────────────────────────────────────────────────────


class MakefileWriter:
    """Accumulate rule text, wrapping file lists before column 100."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self.column = 0

    def write(self, text: str) -> None:
        self._parts.append(text)
        newline = text.rfind("\n")
        if newline == -1:
            self.column += len(text)
        else:
            self.column = len(text) - newline - 1

    def filename(self, name: str) -> None:
        if self.column + len(name) + 1 > MAX_COLUMN:
            self.write(" \\\n")
            self.write("  ")
        elif self.column:
            self.write(" ")
        self.write(name)

    def filenames(self, names: Iterable[str]) -> None:
        for name in names:
            self.filename(name)

    def getvalue(self) -> str:
        return "".join(self._parts)


def get_include_install_path(name: str) -> str:
    if name.startswith("wine/"):
        return name[5:]
    if name.startswith("msvcrt/"):
        return name
    return f"windows/{name}"


def get_shared_lib_names(libname: str) -> list[str]:
    """Return *libname* followed by its less-versioned symlink names.

    ``libfoo.so.1.2`` gives ``libfoo.so.1`` and ``libfoo.so``.
    """
    names = [libname]
    pos = libname.find(".")
    length = 0
    while pos != -1:
        tail = libname[pos + 1 :]
        length = len(tail) - len(tail.lstrip("0123456789."))
        if length:
            break
        pos = libname.find(".", pos + 1)
    if not length:
        return names

    ext_start = pos + 1 + length
    if ext_start < len(libname) and libname[ext_start - 1] == ".":
        ext_start -= 1
    ext = libname[ext_start:]

    name = libname
    second = libname.find(".", pos + 1)
    if second != -1:
        name = libname[:second] + ext
        names.append(name)
    names.append(name[:pos] + ext)
    return names


def get_static_lib(unit: BuildUnit, name: str) -> str | None:
    """Return the path of *unit*'s static library when it is ``lib<name>.a``."""
    if unit.staticlib != f"lib{name}.a":
        return None
    return unit.base_dir_path(unit.staticlib)


@dataclass(frozen=True, slots=True)
class UnitEmission:
    """Rule text for one unit plus the unit-local files it generates."""

    text: str
    targets: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _UnitState:
    object_files: list[str] = field(default_factory=list)
    crossobj_files: list[str] = field(default_factory=list)
    res_files: list[str] = field(default_factory=list)
    clean_files: list[str] = field(default_factory=list)
    uninstall_files: list[str] = field(default_factory=list)
    mo_files: list[str] = field(default_factory=list)
    ok_files: list[str] = field(default_factory=list)
    in_files: list[str] = field(default_factory=list)
    dlldata_files: list[str] = field(default_factory=list)
    c2man_files: list[str] = field(default_factory=list)
    implib_objs: list[str] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    phony_targets: list[str] = field(default_factory=list)
    all_targets: list[str] = field(default_factory=list)
    install_rules: dict[InstallClass, list[InstallRule]] = field(
        default_factory=lambda: {InstallClass.LIB: [], InstallClass.DEV: []}
    )


def _add_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


# ── Emitter ─────────────────────────────────────────────────────────


class MakefileEmitter:
    """Emit rule fragments for the units of one run.

    *top* is the root unit; its sub-units are searched when resolving import
    and static libraries. *linguas* is the run-wide translation list.
    """

    def __init__(
        self,
        *,
        config: ToolchainConfig,
        top: BuildUnit,
        linguas: list[str],
        output_name: str = DEFAULT_OUTPUT_NAME,
    ) -> None:
        self.config = config
        self.top = top
        self.linguas = linguas
        self.output_name = output_name

    def emit(self, unit: BuildUnit) -> UnitEmission:
        rules = _UnitRules(self, unit)
        targets = rules.run()
        return UnitEmission(text=rules.out.getvalue(), targets=targets)


class _UnitRules:
    def __init__(self, emitter: MakefileEmitter, unit: BuildUnit) -> None:
        self.config = emitter.config
        self.top = emitter.top
        self.linguas = emitter.linguas
        self.output_name = emitter.output_name
        self.unit = unit
        self.out = MakefileWriter()
        self.state = _UnitState()

    # ── Small helpers ───────────────────────────────────────────────

    def tools_path(self, name: str) -> str:
        return self.unit.tools_path(self.config, name)

    def obj_filenames(self, names: Iterable[str]) -> None:
        self.out.filenames(self.unit.obj_dir_path(name) for name in names)

    def add_install_rule(self, target: str, file: str, dest: str, kind: InstallKind) -> None:
        unit = self.unit
        if target in unit.install_lib:
            self.state.install_rules[InstallClass.LIB].append(InstallRule(file, dest, kind))
        elif target in unit.install_dev:
            self.state.install_rules[InstallClass.DEV].append(InstallRule(file, dest, kind))

    def add_install(self, install_class: InstallClass, file: str, dest: str, kind: InstallKind) -> None:
        self.state.install_rules[install_class].append(InstallRule(file, dest, kind))

    def get_local_dependencies(self, name: str, targets: list[str]) -> list[str]:
        unit = self.unit
        return [
            unit.obj_dir_path(dep) if dep in targets else unit.src_dir_path(dep)
            for dep in unit.variables.get_file_local(name, "DEPS")
        ]

    def write_symlink_rule(self, src_name: str, link_name: str) -> None:
        out = self.out
        ln_s = self.config.ln_s
        out.write(f"\trm -f {link_name} && ")
        if ln_s != "ln -s" and "/" in link_name:
            directory, _, name = link_name.rpartition("/")
            out.write(f"cd {directory or '/'} && {ln_s} {src_name} {name}\n")
        else:
            out.write(f"{ln_s} {src_name} {link_name}\n")

    def write_linker_prefix(self) -> None:
        """Emit the winebuild/sysroot/target flags shared by every winegcc link."""
        unit, config, out = self.unit, self.config, self.out
        out.filename(f"-B{unit.tools_dir_path(config, 'winebuild')}")
        if config.tools_dir:
            out.filename(f"--sysroot={unit.top_obj_dir_path('')}")

    # ── Library resolution ──────────────────────────────────────────

    def add_default_libraries(self, deps: list[str]) -> list[str]:
        unit = self.unit
        all_libs = ["-lwine_port", *unit.variables.get_array("EXTRALIBS"), *self.config.libs]
        ret: list[str] = []
        for lib_arg in all_libs:
            lib = None
            if lib_arg.startswith("-l"):
                for submake in self.top.submakes:
                    lib = get_static_lib(submake, lib_arg[2:])
                    if lib:
                        break
            if lib:
                lib = unit.top_obj_dir_path(lib)
                deps.append(lib)
                ret.append(lib)
            else:
                ret.append(lib_arg)
        return ret

    def add_import_libs(self, deps: list[str], imports: Iterable[str], *, cross: bool) -> list[str]:
        unit, config = self.unit, self.config
        ret: list[str] = []
        for name in imports:
            lib = None
            for submake in self.top.submakes:
                if submake.importlib == name:
                    if cross or not config.dll_ext or submake.staticimplib:
                        lib = submake.base_dir_path(f"lib{name}.a")
                    else:
                        deps.append(unit.top_obj_dir_path(f"{submake.base_dir}/lib{name}.def"))
                    break
                lib = get_static_lib(submake, name)
                if lib:
                    break
            if lib:
                if cross:
                    lib = replace_extension(lib, ".a", ".cross.a")
                lib = unit.top_obj_dir_path(lib)
                deps.append(lib)
                ret.append(lib)
            else:
                ret.append(f"-l{name}")
        return ret

    def get_default_imports(self) -> list[str]:
        unit = self.unit
        if "-nodefaultlibs" in unit.extradllflags:
            return []
        ret: list[str] = []
        if "-mno-cygwin" in unit.appmode:
            ret.append("msvcrt")
        if unit.is_win16:
            ret.append("kernel")
        ret.extend(("kernel32", "ntdll", "winecrt0"))
        return ret

    # ── Main walk ───────────────────────────────────────────────────

    def run(self) -> list[str]:
        unit, config, state = self.unit, self.config, self.state

        po_dir = unit.top_obj_dir_path("po")
        state.mo_files = [f"{po_dir}/{lang}.mo" for lang in self.linguas]
        state.phony_targets.append("all")

        includes = state.includes
        includes.append(f"-I{unit.obj_dir_path('')}")
        if unit.src_dir:
            includes.append(f"-I{unit.src_dir}")
        if unit.parent_dir:
            includes.append(f"-I{unit.src_dir_path(unit.parent_dir)}")
        includes.append(f"-I{unit.top_obj_dir_path('include')}")
        if unit.top_src_dir:
            includes.append(f"-I{unit.top_src_dir_path('include')}")
        if unit.use_msvcrt:
            includes.append(f"-I{unit.top_src_dir_path('include/msvcrt')}")
        includes.extend(f"-I{unit.obj_dir_path(path)}" for path in unit.include_paths)

        for source in unit.sources:
            self.emit_source(source)

        self.emit_dlldata()
        self.emit_resource_dlls(unit.variables.get_array("RC_DLLS"))
        if unit.module and not unit.staticlib:
            self.emit_module()
        if unit.staticlib:
            self.emit_staticlib()
        if unit.sharedlib:
            self.emit_sharedlib()
        if unit.importlib and not unit.module:
            self.emit_standalone_importlib()
        if unit.testdll:
            self.emit_testdll()
        self.emit_programs()
        for script in unit.scripts:
            self.add_install_rule(script, script, f"$(bindir)/{script}", InstallKind.SCRIPT_SRC)
        if unit.resource:
            self.emit_resource_module()

        if not unit.disabled:
            self.emit_install_targets()

        clean = state.clean_files
        clean.extend(state.object_files)
        clean.extend(state.crossobj_files)
        clean.extend(state.res_files)
        clean.extend(state.all_targets)
        clean.extend(unit.variables.get_array("EXTRA_TARGETS"))

        if unit.submakes:
            self.emit_subdir_rules()

        out = self.out
        if clean:
            clean_target = unit.obj_dir_path("clean")
            out.write(f"{clean_target}::\n")
            out.write("\trm -f")
            self.obj_filenames(clean)
            out.write("\n")
            if unit.obj_dir:
                out.write(f"__clean__: {clean_target}\n")
            state.phony_targets.append(clean_target)

        if state.phony_targets:
            out.write(".PHONY:")
            out.filenames(state.phony_targets)
            out.write("\n")

        targets = list(clean)
        if unit.base_dir is None:
            targets.extend(unit.variables.get_array("CONFIGURE_TARGETS"))
        return targets

    def emit_source(self, source: SourceEntry) -> None:
        category, obj, ext = SourceCategory.for_name(source.name)
        extradefs = self.unit.variables.get_file_local(obj, "EXTRADEFS")
        deps = flatten_dependencies(source)
        handler = getattr(self, f"emit_{category.value}")
        handler(source, obj, ext, deps, extradefs)

    # ── Per-category rules ──────────────────────────────────────────

    def emit_grammar(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out = self.unit, self.out
        header = unit.obj_dir_path(f"{obj}.tab.h")
        target = unit.obj_dir_path(obj)
        out.write(f"{header}: {source.filename}\n")
        out.write(f"\t$(BISON) -p {obj}_ -o {target}.tab.c -d {source.filename}\n")
        out.write(f"{target}.tab.c: {source.filename} {header}\n")
        out.write(f"\t$(BISON) -p {obj}_ -o $@ {source.filename}\n")
        self.state.clean_files.append(f"{obj}.tab.h")

    def emit_xtemplate(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out = self.unit, self.out
        tool = unit.tools_dir_path(self.config, "make_xftmpl") + self.config.tools_ext
        out.write(f"{unit.obj_dir_path(obj)}.h: {tool} {source.filename}\n")
        out.write(f"\t{tool} -H -o $@ {source.filename}\n")
        if FileFlag.INSTALL in source.flags:
            self.add_install(
                InstallClass.DEV,
                source.name,
                f"$(includedir)/{get_include_install_path(source.name)}",
                InstallKind.DATA_SRC,
            )
            self.add_install(
                InstallClass.DEV,
                f"{obj}.h",
                f"$(includedir)/{get_include_install_path(obj)}.h",
                InstallKind.DATA,
            )

    def emit_lexer(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        self.out.write(f"{self.unit.obj_dir_path(obj)}.yy.c: {source.filename}\n")
        self.out.write(f"\t$(FLEX) -o$@ {source.filename}\n")

    def _write_wrc_flags(self, extradefs: list[str]) -> None:
        unit, out = self.unit, self.out
        if unit.is_win16:
            out.filename("-m16")
        else:
            out.filenames(self.config.target_flags)
        out.filename("--nostdinc")
        out.filenames(self.state.includes)
        out.filenames(unit.define_args)
        out.filenames(extradefs)

    def emit_resource(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out, state = self.unit, self.out, self.state
        target = unit.obj_dir_path(obj)
        wrc = self.tools_path("wrc")
        translated = FileFlag.RC_PO in source.flags

        state.res_files.append(f"{obj}.res")
        out.write(f"{target}.res: {source.filename}\n")
        out.write(f"\t{wrc} -o $@")
        self._write_wrc_flags(extradefs)
        if state.mo_files and translated:
            out.filename(f"--po-dir={unit.top_obj_dir_path('po')}")
            out.filename(source.filename or "")
            out.write("\n")
            out.write(f"{target}.res:")
            out.filenames(state.mo_files)
            out.write("\n")
        else:
            out.filename(source.filename or "")
            out.write("\n")

        if translated:
            state.clean_files.append(f"{obj}.pot")
            out.write(f"{target}.pot: {source.filename}\n")
            out.write(f"\t{wrc} -O pot -o $@")
            self._write_wrc_flags(extradefs)
            out.filename(source.filename or "")
            out.write("\n")
            out.write(f"{target}.pot ")
        out.write(f"{target}.res:")
        out.filename(wrc)
        out.filenames(deps)
        out.write("\n")

    def emit_messages(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out, state = self.unit, self.out, self.state
        target = unit.obj_dir_path(obj)
        wmc = self.tools_path("wmc")

        state.res_files.append(f"{obj}.res")
        state.clean_files.append(f"{obj}.pot")
        out.write(f"{target}.res: {source.filename}\n")
        out.write(f"\t{wmc} -U -O res -o $@ {source.filename}")
        if state.mo_files:
            out.filename(f"--po-dir={unit.top_obj_dir_path('po')}")
            out.write("\n")
            out.write(f"{target}.res:")
            out.filenames(state.mo_files)
        out.write("\n")
        out.write(f"{target}.pot: {source.filename}\n")
        out.write(f"\t{wmc} -O pot -o $@ {source.filename}")
        out.write("\n")
        out.write(f"{target}.pot {target}.res:")
        out.filename(wmc)
        out.filenames(deps)
        out.write("\n")

    def emit_interface(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out, state = self.unit, self.out, self.state
        flags = source.flags
        if not flags:
            flags = FileFlag.IDL_HEADER | FileFlag.INSTALL
        if unit.find_include(f"{obj}.h") is not None:
            flags |= FileFlag.IDL_HEADER

        targets: list[str] = []
        for flag, suffix in IDL_OUTPUTS:
            if flag not in flags:
                continue
            dest = f"{obj}{suffix}"
            if unit.find_source(dest) is None:
                state.clean_files.append(dest)
            targets.append(dest)

        if FileFlag.IDL_PROXY in flags:
            state.dlldata_files.append(source.name)
        if FileFlag.INSTALL in flags:
            install_path = get_include_install_path(obj)
            self.add_install(
                InstallClass.DEV, source.name, f"$(includedir)/{install_path}.idl", InstallKind.DATA_SRC
            )
            if FileFlag.IDL_HEADER in flags:
                self.add_install(
                    InstallClass.DEV, f"{obj}.h", f"$(includedir)/{install_path}.h", InstallKind.DATA
                )
        if not targets:
            return

        widl = self.tools_path("widl")
        self.obj_filenames(targets)
        out.write(f": {widl}\n")
        out.write(f"\t{widl} -o $@")
        out.filenames(self.config.target_flags)
        out.filenames(state.includes)
        out.filenames(unit.define_args)
        out.filenames(extradefs)
        out.filenames(unit.variables.get_array("EXTRAIDLFLAGS"))
        out.filename(source.filename or "")
        out.write("\n")
        self.obj_filenames(targets)
        out.write(f": {source.filename}")
        out.filenames(deps)
        out.write("\n")

    def emit_template(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out, state = self.unit, self.out, self.state
        section = source.file.man_section if source.file is not None else None
        if obj.endswith(".man") and section:
            dest = replace_extension(obj, ".man", "")
            dest, _, lang = dest.partition(".")
            mandir = f"$(mandir)/{lang}/man{section}" if lang else f"$(mandir)/man{section}"
            self.add_install_rule(dest, obj, f"{mandir}/{dest}.{section}", InstallKind.DATA)
            for link in unit.variables.get_file_local(dest, "SYMLINKS"):
                self.add_install_rule(
                    link, f"{dest}.{section}", f"{mandir}/{link}.{section}", InstallKind.SYMLINK
                )

        target = unit.obj_dir_path(obj)
        state.in_files.append(obj)
        state.all_targets.append(obj)
        out.write(f"{target}: {source.filename}\n")
        out.write(f"\t$(SED_CMD) {source.filename} >$@ || (rm -f $@ && false)\n")
        out.write(f"{target}:")
        out.filenames(deps)
        out.write("\n")
        self.add_install_rule(obj, obj, f"$(datadir)/wine/{obj}", InstallKind.DATA)

    def emit_font(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out, config = self.unit, self.out, self.config
        ttf_file = unit.src_dir_path(f"{obj}.ttf")
        has_fonts = FileFlag.SFD_FONTS in source.flags

        if config.fontforge and not unit.src_dir:
            genttf = unit.top_src_dir_path("fonts/genttf.ff")
            out.write(f"{ttf_file}: {source.filename}\n")
            out.write(f"\t{config.fontforge} -script {genttf} {source.filename} $@\n")
            if not has_fonts:
                out.write(f"all: {ttf_file}\n")
        if FileFlag.INSTALL in source.flags:
            self.add_install(
                InstallClass.LIB, f"{obj}.ttf", f"$(fontdir)/{obj}.ttf", InstallKind.DATA_SRC
            )
        if has_fonts and source.file is not None:
            sfnt2fon = self.tools_path("sfnt2fon")
            for request in source.file.fonts:
                self.state.all_targets.append(request.name)
                out.write(f"{unit.obj_dir_path(request.name)}: {sfnt2fon} {ttf_file}\n")
                out.write(f"\t{sfnt2fon} -o $@ {ttf_file} {request.args}\n")
                self.add_install(
                    InstallClass.LIB, request.name, f"$(fontdir)/{request.name}", InstallKind.DATA
                )

    def emit_icon(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, config = self.unit, self.config
        if not (config.convert and config.rsvg and config.icotool) or unit.src_dir:
            return
        base = unit.src_dir_path(obj)
        buildimage = unit.top_src_dir_path("tools/buildimage")
        self.out.write(f"{base}.ico {base}.bmp: {source.filename}\n")
        self.out.write(
            f'\tCONVERT="{config.convert}" ICOTOOL="{config.icotool}" RSVG="{config.rsvg}" '
            f"{buildimage} {source.filename} $@\n"
        )

    def emit_translation(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        msgfmt = self.config.msgfmt or "msgfmt"
        self.out.write(f"{self.unit.obj_dir_path(obj)}.mo: {source.filename}\n")
        self.out.write(f"\t{msgfmt} -o $@ {source.filename}\n")
        self.state.all_targets.append(f"{obj}.mo")

    def emit_compiled_resource(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        self.state.res_files.append(source.name)

    def emit_typelib(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        self.state.all_targets.append(source.name)

    def emit_header(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        if source.generated:
            self.state.all_targets.append(source.name)
        else:
            self.add_install(
                InstallClass.DEV,
                source.name,
                f"$(includedir)/{get_include_install_path(source.name)}",
                InstallKind.DATA_SRC,
            )

    def emit_compile(
        self, source: SourceEntry, obj: str, ext: str, deps: list[str], extradefs: list[str]
    ) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        flags = source.flags
        filename = source.filename or ""
        target = unit.obj_dir_path(obj)
        need_cross = bool(
            unit.testdll
            or unit.resource
            or FileFlag.C_IMPLIB in flags
            or (unit.module and unit.staticlib)
        )
        cross = bool(config.crosstarget) and need_cross

        if source.generated and (not unit.testdll or not filename.endswith("testlist.c")):
            state.clean_files.append(filename)
        if FileFlag.C_IMPLIB in flags:
            state.implib_objs.append(f"{obj}.o")
        state.object_files.append(f"{obj}.o")

        out.write(f"{target}.o: {filename}\n")
        out.write(f"\t$(CC) -c -o $@ {filename}")
        out.filenames(state.includes)
        out.filenames(unit.define_args)
        out.filenames(extradefs)
        if unit.module or unit.staticlib or unit.sharedlib or unit.testdll or unit.resource:
            out.filenames(config.dll_flags)
            if unit.use_msvcrt:
                out.filenames(config.msvcrt_flags)
        out.filenames(config.extra_cflags)
        out.filenames(config.cpp_flags)
        out.filename("$(CFLAGS)")
        out.write("\n")

        if cross:
            state.crossobj_files.append(f"{obj}.cross.o")
            out.write(f"{target}.cross.o: {filename}\n")
            out.write(f"\t$(CROSSCC) -c -o $@ {filename}")
            out.filenames(state.includes)
            out.filenames(unit.define_args)
            out.filenames(extradefs)
            if unit.use_msvcrt:
                out.filenames(config.msvcrt_flags)
            out.filename("-DWINE_CROSSTEST")
            out.filenames(config.cpp_flags)
            out.filename("$(CFLAGS)")
            out.write("\n")

        if unit.testdll and ext == "c" and not source.generated:
            testmodule = replace_extension(unit.testdll, ".dll", "_test.exe")
            state.ok_files.append(f"{obj}.ok")
            out.write(f"{target}.ok:\n")
            out.write(
                f"\t{unit.top_src_dir_path('tools/runtest')} $(RUNTESTFLAGS)"
                f" -T {unit.top_obj_dir_path('')} -M {unit.testdll}"
                f" -p {testmodule}{config.dll_ext} {obj} && touch $@\n"
            )
        if ext == "c" and not source.generated:
            state.c2man_files.append(filename)

        out.write(f"{target}.o")
        if cross:
            out.write(f" {target}.cross.o")
        out.write(":")
        out.filenames(deps)
        out.write("\n")

    # ── Rules spanning several sources ──────────────────────────────

    def emit_dlldata(self) -> None:
        if not self.state.dlldata_files:
            return
        unit, out = self.unit, self.out
        widl = self.tools_path("widl")
        out.write(f"{unit.obj_dir_path('dlldata.c')}: {widl} {unit.src_dir_path('Makefile.in')}\n")
        out.write(f"\t{widl} --dlldata-only -o $@")
        out.filenames(self.state.dlldata_files)
        out.write("\n")

    def emit_resource_dlls(self, resource_dlls: list[str]) -> None:
        if not resource_dlls:
            return
        unit, out, state, config = self.unit, self.out, self.state, self.config
        wrc = self.tools_path("wrc")
        dll_ext = config.dll_ext

        for dll in resource_dlls:
            out.write(f"{dll}/{dll}{dll_ext}: {dll}/Makefile\n")
            out.write(f"\t@cd {dll} && $(MAKE) {dll}{dll_ext}\n")
        out.write(f"{unit.obj_dir_path('resource_dlls.o')}:")
        for dll in resource_dlls:
            out.write(f" {dll}/{dll}{dll_ext}")
        out.write("\n")
        out.write("\t(")
        for index, dll in enumerate(resource_dlls):
            if index:
                out.write("; \\\n  ")
            out.write(f'echo "{dll} RCDATA {dll}/{dll}{dll_ext}"')
        out.write(f") | {wrc} -o $@\n")
        state.clean_files.append("resource_dlls.o")
        state.object_files.append("resource_dlls.o")

        if not (config.crosstarget and (unit.testdll or (unit.module and unit.staticlib))):
            return
        names = [prepend_extension(dll, "_crossres", ".dll") for dll in resource_dlls]
        for dll, name in zip(resource_dlls, names):
            out.write(f"{dll}/{name}: {dll}/Makefile\n")
            out.write(f"\t@cd {dll} && $(MAKE) {name}\n")
        out.write(f"{unit.obj_dir_path('resource_dlls.cross.o')}:")
        for dll, name in zip(resource_dlls, names):
            out.write(f" {dll}/{name}")
        out.write("\n")
        out.write("\t(")
        for index, (dll, name) in enumerate(zip(resource_dlls, names)):
            if index:
                out.write("; \\\n  ")
            out.write(f'echo "{dll} RCDATA {dll}/{name}"')
        out.write(f") | {wrc} -o $@\n")
        state.clean_files.append("resource_dlls.cross.o")
        state.crossobj_files.append("resource_dlls.cross.o")

    def emit_module(self) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        module = unit.module or ""
        module_path = unit.obj_dir_path(module)
        dll_ext = config.dll_ext
        winebuild = self.tools_path("winebuild")
        winegcc = self.tools_path("winegcc")

        spec_file = None
        if not unit.appmode:
            spec_file = unit.src_dir_path(
                unit.parent_spec or replace_extension(module, ".dll", ".spec")
            )

        all_libs: list[str] = []
        dep_libs: list[str] = []
        all_libs.extend(self.add_import_libs(dep_libs, unit.delayimports, cross=False))
        all_libs.extend(self.add_import_libs(dep_libs, unit.imports, cross=False))
        self.add_import_libs(dep_libs, self.get_default_imports(), cross=False)
        all_libs.extend(self.add_default_libraries(dep_libs))

        if dll_ext:
            all_libs.extend(f"-Wb,-d{name}" for name in unit.delayimports)
            state.all_targets.append(f"{module}{dll_ext}")
            state.all_targets.append(f"{module}.fake")
            self.add_install_rule(
                module, f"{module}{dll_ext}", f"$(dlldir)/{module}{dll_ext}", InstallKind.PROGRAM
            )
            self.add_install_rule(
                module, f"{module}.fake", f"$(fakedlldir)/{module}", InstallKind.DATA
            )
            out.write(f"{module_path}{dll_ext} {module_path}.fake:")
        else:
            all_libs.append("-lwine")
            state.all_targets.append(module)
            install_dir = "dlldir" if spec_file else "bindir"
            self.add_install_rule(module, module, f"$({install_dir})/{module}", InstallKind.PROGRAM)
            out.write(f"{module_path}:")
        if spec_file:
            out.filename(spec_file)
        self.obj_filenames(state.object_files)
        self.obj_filenames(state.res_files)
        out.filenames(dep_libs)
        out.filename(winebuild)
        out.filename(winegcc)
        out.write("\n")
        out.write(f"\t{winegcc} -o $@")
        self.write_linker_prefix()
        out.filenames(config.target_flags)
        out.filenames(config.unwind_flags)
        if spec_file:
            out.write(f" -shared {spec_file}")
            out.filenames(unit.extradllflags)
        else:
            out.filenames(unit.appmode)
        self.obj_filenames(state.object_files)
        self.obj_filenames(state.res_files)
        out.filenames(all_libs)
        out.filename("$(LDFLAGS)")
        out.write("\n")

        if spec_file and unit.importlib:
            self.emit_module_importlib(spec_file)

        if spec_file:
            self.emit_documentation(spec_file)
        elif dll_ext:
            binary = replace_extension(module, ".exe", "")
            self.add_install_rule(
                binary, "wineapploader", f"$(bindir)/{binary}", InstallKind.TOOL_SCRIPT
            )

    def emit_module_importlib(self, spec_file: str) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        importlib = unit.importlib or ""
        importlib_path = unit.obj_dir_path(f"lib{importlib}")
        winebuild = self.tools_path("winebuild")

        if config.dll_ext and not state.implib_objs:
            state.clean_files.append(f"lib{importlib}.def")
            out.write(f"{importlib_path}.def: {winebuild} {spec_file}\n")
            out.write(f"\t{winebuild} -w --def -o $@ --export {spec_file}")
            out.filenames(config.target_flags)
            if unit.is_win16:
                out.filename("-m16")
            out.write("\n")
            self.add_install_rule(
                importlib, f"lib{importlib}.def", f"$(dlldir)/lib{importlib}.def", InstallKind.DATA
            )
        else:
            state.clean_files.append(f"lib{importlib}.a")
            out.write(f"{importlib_path}.a: {winebuild} {spec_file}")
            self.obj_filenames(state.implib_objs)
            out.write("\n")
            out.write(f"\t{winebuild} -w --implib -o $@ --export {spec_file}")
            out.filenames(config.target_flags)
            self.obj_filenames(state.implib_objs)
            out.write("\n")
            self.add_install_rule(
                importlib, f"lib{importlib}.a", f"$(dlldir)/lib{importlib}.a", InstallKind.DATA
            )

        if config.crosstarget and not unit.is_win16:
            cross_files = [replace_extension(name, ".o", ".cross.o") for name in state.implib_objs]
            state.clean_files.append(f"lib{importlib}.cross.a")
            out.write(f"{importlib_path}.cross.a: {winebuild} {spec_file}")
            self.obj_filenames(cross_files)
            out.write("\n")
            out.write(
                f"\t{winebuild} -b {config.crosstarget} -w --implib -o $@ --export {spec_file}"
            )
            self.obj_filenames(cross_files)
            out.write("\n")

    def emit_documentation(self, spec_file: str) -> None:
        unit, out, state = self.unit, self.out, self.state
        if not state.c2man_files:
            out.write("manpages htmlpages sgmlpages xmlpages::\n")
            return
        c2man = unit.top_src_dir_path("tools/c2man.pl")
        pages = (
            ("manpages", "", f"{unit.top_obj_dir_path('documentation')}/man{self.config.man_ext}"),
            ("htmlpages", "-Th ", unit.top_obj_dir_path("documentation/html")),
            ("sgmlpages", "-Ts ", unit.top_obj_dir_path("documentation/api-guide")),
            ("xmlpages", "-Tx ", unit.top_obj_dir_path("documentation/api-guide-xml")),
        )
        for target, mode, directory in pages:
            out.write(f"{target}::\n")
            out.write(f"\t{c2man} {mode}-w {spec_file}")
            out.filename(f"-R{unit.top_src_dir_path('')}")
            out.filename(f"-I{unit.top_src_dir_path('include')}")
            out.filename(f"-o {directory}")
            out.filenames(state.c2man_files)
            out.write("\n")
        state.phony_targets.extend(target for target, _, _ in pages)

    def emit_staticlib(self) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        staticlib = unit.staticlib or ""
        state.all_targets.append(staticlib)
        out.write(f"{unit.obj_dir_path(staticlib)}:")
        self.obj_filenames(state.object_files)
        out.write("\n\trm -f $@\n")
        out.write("\t$(AR) $(ARFLAGS) $@")
        self.obj_filenames(state.object_files)
        out.write("\n\t$(RANLIB) $@\n")
        self.add_install_rule(staticlib, staticlib, f"$(dlldir)/{staticlib}", InstallKind.DATA)

        if config.crosstarget and unit.module:
            name = replace_extension(staticlib, ".a", ".cross.a")
            state.all_targets.append(name)
            out.write(f"{unit.obj_dir_path(name)}:")
            self.obj_filenames(state.crossobj_files)
            out.write("\n\trm -f $@\n")
            out.write(f"\t{config.crosstarget}-ar $(ARFLAGS) $@")
            self.obj_filenames(state.crossobj_files)
            out.write(f"\n\t{config.crosstarget}-ranlib $@\n")

    def emit_sharedlib(self) -> None:
        unit, out, state = self.unit, self.out, self.state
        sharedlib = unit.sharedlib or ""
        names = get_shared_lib_names(sharedlib)
        basename = sharedlib.split(".", 1)[0]

        dep_libs = self.get_local_dependencies(basename, state.in_files)
        all_libs = unit.variables.get_file_local(basename, "LDFLAGS")
        all_libs.extend(self.add_default_libraries(dep_libs))

        out.write(f"{unit.obj_dir_path(sharedlib)}:")
        self.obj_filenames(state.object_files)
        out.filenames(dep_libs)
        out.write("\n")
        out.write("\t$(CC) -o $@")
        self.obj_filenames(state.object_files)
        out.filenames(all_libs)
        out.filename("$(LDFLAGS)")
        out.write("\n")
        self.add_install_rule(sharedlib, sharedlib, f"$(libdir)/{sharedlib}", InstallKind.PROGRAM)
        for previous, name in zip(names, names[1:]):
            out.write(f"{unit.obj_dir_path(name)}: {unit.obj_dir_path(previous)}\n")
            self.write_symlink_rule(unit.obj_dir_path(previous), unit.obj_dir_path(name))
            self.add_install_rule(name, previous, f"$(libdir)/{name}", InstallKind.SYMLINK)
        state.all_targets.extend(names)

    def emit_standalone_importlib(self) -> None:
        unit, out = self.unit, self.out
        importlib = unit.importlib or ""
        def_file = replace_extension(importlib, ".a", ".def")
        if def_file.startswith("lib"):
            def_file = def_file[3:]
        def_path = unit.src_dir_path(def_file)
        out.write(f"{unit.obj_dir_path(importlib)}: {def_path}\n")
        out.write(f"\t{self.config.dlltool} -l $@ -d {def_path}\n")
        self.add_install_rule(importlib, importlib, f"$(libdir)/{importlib}", InstallKind.DATA)
        self.state.all_targets.append(importlib)

    def emit_testdll(self) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        testdll = unit.testdll or ""
        dll_ext = config.dll_ext
        testmodule = replace_extension(testdll, ".dll", "_test.exe")
        stripped = replace_extension(testdll, ".dll", "_test-stripped.exe")
        testres = replace_extension(testdll, ".dll", "_test.res")
        winebuild = self.tools_path("winebuild")
        winegcc = self.tools_path("winegcc")
        testmodule_path = f"{unit.obj_dir_path(testmodule)}{dll_ext}"
        stripped_path = f"{unit.obj_dir_path(stripped)}{dll_ext}"

        dep_libs: list[str] = []
        all_libs = self.add_import_libs(dep_libs, unit.imports, cross=False)
        self.add_import_libs(dep_libs, self.get_default_imports(), cross=False)
        all_libs.extend(config.libs)
        state.all_targets.append(f"{testmodule}{dll_ext}")
        state.clean_files.append(f"{stripped}{dll_ext}")

        for path, extra in ((testmodule_path, None), (stripped_path, f"-Wb,-F,{testmodule}")):
            out.write(f"{path}:\n")
            out.write(f"\t{winegcc} -o $@")
            self.write_linker_prefix()
            out.filenames(config.target_flags)
            out.filenames(config.unwind_flags)
            if extra:
                out.filename(extra)
            out.filenames(unit.appmode)
            self.obj_filenames(state.object_files)
            self.obj_filenames(state.res_files)
            out.filenames(all_libs)
            out.filename("$(LDFLAGS)")
            out.write("\n")
        out.write(f"{testmodule_path} {stripped_path}:")
        self.obj_filenames(state.object_files)
        self.obj_filenames(state.res_files)
        out.filenames(dep_libs)
        out.filename(winebuild)
        out.filename(winegcc)
        out.write("\n")

        winetest = unit.top_obj_dir_path("programs/winetest")
        if not unit.disabled:
            out.write(f"all: {winetest}/{testres}\n")
        out.write(f"{winetest}/{testres}: {stripped_path}\n")
        out.write(
            f'\techo "{testmodule} TESTRES \\"{stripped_path}\\"" | {self.tools_path("wrc")} -o $@\n'
        )

        if config.crosstarget:
            self.emit_crosstest(testdll)

        self.obj_filenames(state.ok_files)
        out.write(f": {testmodule}{dll_ext} ../{testdll}{dll_ext}\n")
        if not unit.disabled:
            out.write("check test:")
            self.obj_filenames(state.ok_files)
            out.write("\n")
            state.phony_targets.extend(("check", "test"))
        out.write("testclean::\n")
        out.write("\trm -f")
        self.obj_filenames(state.ok_files)
        out.write("\n")
        state.clean_files.extend(state.ok_files)
        state.phony_targets.append("testclean")

    def emit_crosstest(self, testdll: str) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        crosstest = replace_extension(testdll, ".dll", "_crosstest.exe")
        winebuild = self.tools_path("winebuild")
        winegcc = self.tools_path("winegcc")

        dep_libs: list[str] = []
        all_libs = self.add_import_libs(dep_libs, unit.imports, cross=True)
        self.add_import_libs(dep_libs, self.get_default_imports(), cross=True)
        all_libs.extend(config.libs)
        state.clean_files.append(crosstest)

        out.write(f"{unit.obj_dir_path(crosstest)}:")
        self.obj_filenames(state.crossobj_files)
        self.obj_filenames(state.res_files)
        out.filenames(dep_libs)
        out.filename(winebuild)
        out.filename(winegcc)
        out.write("\n")
        out.write(f"\t{winegcc} -o $@ -b {config.crosstarget}")
        self.write_linker_prefix()
        out.filename("--lib-suffix=.cross.a")
        self.obj_filenames(state.crossobj_files)
        self.obj_filenames(state.res_files)
        out.filenames(all_libs)
        out.filename("$(LDFLAGS)")
        out.write("\n")
        if not unit.disabled:
            target = unit.obj_dir_path("crosstest")
            out.write(f"{target}: {unit.obj_dir_path(crosstest)}\n")
            state.phony_targets.append(target)
            if unit.obj_dir:
                out.write(f"crosstest: {target}\n")

    def emit_programs(self) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        ldrpath_local = unit.variables.expand_var("LDRPATH_LOCAL")
        ldrpath_install = unit.variables.expand_var("LDRPATH_INSTALL")

        for name in unit.programs:
            program = f"{name}{config.exe_ext}"
            program_installed = None
            deps = self.get_local_dependencies(name, state.in_files)
            all_libs = unit.variables.get_file_local(name, "LDFLAGS")
            objs = unit.variables.get_file_local(name, "OBJS") or state.object_files
            symlinks = unit.variables.get_file_local(name, "SYMLINKS")
            all_libs.extend(self.add_default_libraries(deps))

            out.write(f"{unit.obj_dir_path(program)}:")
            self.obj_filenames(objs)
            out.filenames(deps)
            out.write("\n")
            out.write("\t$(CC) -o $@")
            self.obj_filenames(objs)

            if "-lwine" in all_libs:
                all_libs.append(f"-L{unit.top_obj_dir_path('libs/wine')}")
                if ldrpath_local and ldrpath_install:
                    program_installed = f"{name}-installed{config.exe_ext}"
                    out.filename(ldrpath_local)
                    out.filenames(all_libs)
                    out.filename("$(LDFLAGS)")
                    out.write("\n")
                    out.write(f"{unit.obj_dir_path(program_installed)}:")
                    self.obj_filenames(objs)
                    out.filenames(deps)
                    out.write("\n")
                    out.write("\t$(CC) -o $@")
                    self.obj_filenames(objs)
                    out.filename(ldrpath_install)
                    state.all_targets.append(program_installed)

            out.filenames(all_libs)
            out.filename("$(LDFLAGS)")
            out.write("\n")
            state.all_targets.append(program)

            for link in symlinks:
                out.write(f"{unit.obj_dir_path(link)}: {unit.obj_dir_path(program)}\n")
                self.write_symlink_rule(unit.obj_dir_path(program), unit.obj_dir_path(link))
            state.all_targets.extend(symlinks)

            self.add_install_rule(
                program, program_installed or program, f"$(bindir)/{program}", InstallKind.PROGRAM
            )
            for link in symlinks:
                self.add_install_rule(
                    link, program, f"$(bindir)/{link}{config.exe_ext}", InstallKind.SYMLINK
                )

    def emit_resource_module(self) -> None:
        unit, out, state, config = self.unit, self.out, self.state, self.config
        resource = unit.resource or ""
        extra_wine_flags = unit.variables.expand_var("WINEFLAGS")
        extra_cross_flags = unit.variables.expand_var("CROSSFLAGS")
        module_path = unit.obj_dir_path(resource)
        winegcc = self.tools_path("winegcc")

        spec_file = None
        if not unit.appmode:
            spec_file = unit.src_dir_path(replace_extension(resource, ".dll", ".spec"))
        all_libs = [f"-l{name}" for name in unit.imports]
        all_libs.extend(unit.variables.get_array("LIBS"))

        if config.dll_ext:
            state.all_targets.append(f"{resource}{config.dll_ext}")
            state.all_targets.append(f"{resource}.fake")
            out.write(f"{module_path}{config.dll_ext} {module_path}.fake:")
        else:
            state.all_targets.append(resource)
            out.write(f"{module_path}:")
        if spec_file:
            out.filename(spec_file)
        self.obj_filenames(state.object_files)
        self.obj_filenames(state.res_files)
        out.write("\n")

        out.write(f"\t{winegcc} -o $@")
        self.write_linker_prefix()
        out.filenames(config.target_flags)
        out.filenames(config.unwind_flags)
        self._write_spec_or_appmode(spec_file)
        if extra_wine_flags:
            out.write(f" {extra_wine_flags}")
        self.obj_filenames(state.object_files)
        self.obj_filenames(state.res_files)
        out.filenames(all_libs)
        out.filename("$(LDFLAGS)")
        out.write("\n")

        if not config.crosstarget:
            return
        crossres = prepend_extension(resource, "_crossres", ".dll")
        state.clean_files.append(crossres)
        out.write(f"{unit.obj_dir_path(crossres)}:")
        self.obj_filenames(state.crossobj_files)
        self.obj_filenames(state.res_files)
        out.write("\n")
        out.write(f"\t{winegcc} -o $@ -b {config.crosstarget}")
        self.write_linker_prefix()
        out.filename("--lib-suffix=.cross.a")
        self._write_spec_or_appmode(spec_file)
        if extra_cross_flags:
            out.write(f" {extra_cross_flags}")
        self.obj_filenames(state.crossobj_files)
        self.obj_filenames(state.res_files)
        out.filenames(all_libs)
        out.filename("$(LDFLAGS)")
        out.write("\n")

    def _write_spec_or_appmode(self, spec_file: str | None) -> None:
        if spec_file:
            self.out.write(f" -shared {spec_file}")
            self.out.filenames(self.unit.extradllflags)
        else:
            self.out.filenames(self.unit.appmode)

    # ── Aggregate targets ───────────────────────────────────────────

    def emit_install_targets(self) -> None:
        out, state = self.out, self.state
        if state.all_targets:
            out.write("all:")
            self.obj_filenames(state.all_targets)
            out.write("\n")
        for install_class in (InstallClass.LIB, InstallClass.DEV):
            state.uninstall_files.extend(
                self.write_install_rules(state.install_rules[install_class], install_class)
            )
        if state.uninstall_files:
            out.write("uninstall::\n")
            out.write("\trm -f")
            out.filenames(state.uninstall_files)
            out.write("\n")
            _add_unique(state.phony_targets, "uninstall")

    def write_install_rules(self, rules: list[InstallRule], target: InstallClass) -> list[str]:
        """Emit one ``install-*`` rule; return the installed paths for ``uninstall``."""
        if not rules:
            return []
        unit, out, config = self.unit, self.out, self.config

        targets: list[str] = []
        for rule in rules:
            if rule.kind in (InstallKind.DATA, InstallKind.PROGRAM, InstallKind.SCRIPT):
                _add_unique(targets, unit.obj_dir_path(rule.file))
            elif rule.kind is InstallKind.TOOL_SCRIPT:
                _add_unique(targets, unit.tools_dir_path(config, rule.file))

        out.write(f"install {target.value}::")
        out.filenames(targets)
        out.write("\n")

        install_sh = unit.top_src_dir_path(INSTALL_SH)
        uninstall: list[str] = []
        for rule in rules:
            dest = f"$(DESTDIR){rule.dest}"
            match rule.kind:
                case InstallKind.DATA:
                    out.write(
                        f"\t{install_sh} -m 644 $(INSTALL_DATA_FLAGS) {unit.obj_dir_path(rule.file)} {dest}\n"
                    )
                case InstallKind.DATA_SRC:
                    out.write(
                        f"\t{install_sh} -m 644 $(INSTALL_DATA_FLAGS) {unit.src_dir_path(rule.file)} {dest}\n"
                    )
                case InstallKind.PROGRAM:
                    out.write(
                        f'\tSTRIPPROG="$(STRIP)" {install_sh} $(INSTALL_PROGRAM_FLAGS) '
                        f"{unit.obj_dir_path(rule.file)} {dest}\n"
                    )
                case InstallKind.SCRIPT:
                    out.write(
                        f"\t{install_sh} $(INSTALL_SCRIPT_FLAGS) {unit.obj_dir_path(rule.file)} {dest}\n"
                    )
                case InstallKind.SCRIPT_SRC:
                    out.write(
                        f"\t{install_sh} $(INSTALL_SCRIPT_FLAGS) {unit.src_dir_path(rule.file)} {dest}\n"
                    )
                case InstallKind.TOOL_SCRIPT:
                    out.write(
                        f"\t{install_sh} $(INSTALL_SCRIPT_FLAGS) "
                        f"{unit.tools_dir_path(config, rule.file)} {dest}\n"
                    )
                case InstallKind.SYMLINK:
                    self.write_symlink_rule(rule.file, dest)
            uninstall.append(dest)

        _add_unique(self.state.phony_targets, "install")
        _add_unique(self.state.phony_targets, target.value)
        return uninstall

    def emit_subdir_rules(self) -> None:
        unit, out, state = self.unit, self.out, self.state
        build_deps: list[str] = []
        makefile_deps: list[str] = []
        distclean_files = unit.variables.get_array("CONFIGURE_TARGETS")

        distclean_files.append(unit.obj_dir_path(self.output_name))
        if not unit.src_dir:
            distclean_files.append(unit.obj_dir_path(".gitignore"))
        for submake in unit.submakes:
            makefile_deps.append(
                unit.top_src_dir_path(submake.base_dir_path(f"{self.output_name}.in"))
            )
            distclean_files.append(submake.base_dir_path(self.output_name))
            if not unit.src_dir:
                distclean_files.append(submake.base_dir_path(".gitignore"))
            if submake.testdll:
                distclean_files.append(submake.base_dir_path("testlist.c"))
            build_deps.extend(self.emit_importlib_symlinks(submake))

        out.write("Makefile:")
        out.filenames(makefile_deps)
        out.write("\n")
        out.write("distclean::\n")
        out.write("\trm -f")
        out.filenames(distclean_files)
        out.write("\n")
        state.phony_targets.append("distclean")

        if build_deps:
            out.write("__builddeps__:")
            out.filenames(build_deps)
            out.write("\n")
            state.clean_files.extend(build_deps)
        if unit.variables.expand_var("GETTEXTPO_LIBS"):
            self.emit_po_files()

    def emit_importlib_symlinks(self, submake: BuildUnit) -> list[str]:
        """Link a sub-unit's import library into ``dlls/`` for parallel builds."""
        unit, out, config = self.unit, self.out, self.config
        module, importlib = submake.module, submake.importlib
        if not module or not importlib or submake.base_dir is None:
            return []
        if submake.is_win16 and submake.disabled:
            return []
        if not submake.base_dir.startswith("dlls/"):
            return []
        if module == importlib:
            return []
        if "." not in importlib and module == f"{importlib}.dll":
            return []

        subdir = submake.base_dir[len("dlls/") :]
        libs = [f"lib{importlib}.{'def' if config.dll_ext else 'a'}"]
        if config.crosstarget and not submake.is_win16:
            libs.append(f"lib{importlib}.cross.a")

        ret: list[str] = []
        for lib in libs:
            dst = concat_paths(unit.obj_dir_path("dlls"), lib)
            out.write(f"{dst}: {submake.base_dir_path(lib)}\n")
            self.write_symlink_rule(concat_paths(subdir, lib), dst)
            ret.append(dst)
        return ret

    def emit_po_files(self) -> None:
        unit, out = self.unit, self.out
        po_dir = unit.src_dir_path("po")
        pot_files: list[str] = []

        for submake in unit.submakes:
            for source in submake.sources:
                if source.name.endswith(".rc") and FileFlag.RC_PO in source.flags:
                    tool, pot_file = "wrc", replace_extension(source.name, ".rc", ".pot")
                elif source.name.endswith(".mc"):
                    tool, pot_file = "wmc", replace_extension(source.name, ".mc", ".pot")
                else:
                    continue
                pot_path = submake.base_dir_path(pot_file)
                out.write(f"{pot_path}: tools/{tool} include dummy\n")
                out.write(f"\t@cd {submake.base_dir_path('')} && $(MAKE) {pot_file}\n")
                pot_files.append(pot_path)

        if self.linguas:
            po_files = [f"{po_dir}/{lang}.po" for lang in self.linguas]
            out.filenames(po_files)
            out.write(f": {po_dir}/wine.pot\n")
            out.write(
                f"\tmsgmerge --previous -q $@ {po_dir}/wine.pot"
                " | msgattrib --no-obsolete -o $@.new && mv $@.new $@\n"
            )
            out.write("po:")
            out.filenames(po_files)
            out.write("\n")
        out.write(f"{po_dir}/wine.pot:")
        out.filenames(pot_files)
        out.write("\n")
        out.write("\tmsgcat -o $@")
        out.filenames(pot_files)
        out.write("\n")


def emit_makefile_rules(
    unit: BuildUnit,
    *,
    config: ToolchainConfig,
    top: BuildUnit,
    linguas: list[str],
    output_name: str = DEFAULT_OUTPUT_NAME,
) -> UnitEmission:
    emitter = MakefileEmitter(config=config, top=top, linguas=linguas, output_name=output_name)
    return emitter.emit(unit)


__all__ = [
    "MAX_COLUMN",
    "MakefileEmitter",
    "MakefileWriter",
    "SourceCategory",
    "UnitEmission",
    "emit_makefile_rules",
    "get_include_install_path",
    "get_shared_lib_names",
    "get_static_lib",
]
