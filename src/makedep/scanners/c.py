"""C-family scanner and the preprocessor-directive parsing shared with other formats."""

from __future__ import annotations

import re

from makedep.errors import DirectiveError
from makedep.models import FileFlag, FontRequest, FontTargets, IncludeKind, PhysicalFile
from makedep.scanners.lines import iter_lines

_TOKEN_RE = re.compile(r"[^ \t]+")

IDL_PRAGMA_FLAGS: dict[str, FileFlag] = {
    "header": FileFlag.IDL_HEADER,
    "proxy": FileFlag.IDL_PROXY,
    "client": FileFlag.IDL_CLIENT,
    "server": FileFlag.IDL_SERVER,
    "ident": FileFlag.IDL_IDENT,
    "typelib": FileFlag.IDL_TYPELIB,
    "register": FileFlag.IDL_REGISTER,
    "regtypelib": FileFlag.IDL_REGTYPELIB,
}


def parse_include_directive(source: PhysicalFile, text: str, line: int) -> None:
    body = text.lstrip()
    if not body or body[0] not in "\"<":
        return
    close = ">" if body[0] == "<" else '"'
    end = body.find(close, 1)
    if end == -1:
        raise DirectiveError(
            f"malformed include directive '{text}'", filename=source.name, line=line
        )
    kind = IncludeKind.SYSTEM if close == ">" else IncludeKind.NORMAL
    source.add_dependency(body[1:end], kind, line)


def parse_pragma_directive(source: PhysicalFile, text: str, line: int) -> None:
    """Handle ``#pragma makedep ...``; *text* is what follows the ``pragma`` keyword."""
    if not text or not text[0].isspace():
        return
    tokens = list(_TOKEN_RE.finditer(text))
    if not tokens or tokens[0].group() != "makedep":
        return

    for index, token in enumerate(tokens[1:], start=1):
        flag = token.group()
        if flag == "depend":
            for dep in tokens[index + 1 :]:
                source.add_dependency(dep.group(), IncludeKind.NORMAL, line)
            return
        if flag == "install":
            source.flags |= FileFlag.INSTALL

        if source.name.endswith(".idl"):
            source.flags |= IDL_PRAGMA_FLAGS.get(flag, FileFlag.NONE)
        elif source.name.endswith(".rc"):
            if flag == "po":
                source.flags |= FileFlag.RC_PO
        elif source.name.endswith(".sfd"):
            if flag == "font":
                request = FontRequest.parse(text[token.end() + 1 :])
                if not request.name:
                    raise DirectiveError(
                        "malformed makedep font directive", filename=source.name, line=line
                    )
                if not isinstance(source.metadata, FontTargets):
                    source.metadata = FontTargets()
                    source.flags |= FileFlag.SFD_FONTS
                source.metadata.requests.append(request)
                return
        elif flag == "implib":
            source.flags |= FileFlag.C_IMPLIB


def parse_cpp_directive(source: PhysicalFile, text: str, line: int) -> None:
    body = text.lstrip()
    if not body.startswith("#"):
        return
    body = body[1:].lstrip()

    if body.startswith("include"):
        parse_include_directive(source, body[7:], line)
    elif body.startswith("import") and source.name.endswith(".m"):
        parse_include_directive(source, body[6:], line)
    elif body.startswith("pragma"):
        parse_pragma_directive(source, body[6:], line)


def scan_c_file(source: PhysicalFile, text: str) -> None:
    for lineno, line in iter_lines(text):
        parse_cpp_directive(source, line, lineno)
