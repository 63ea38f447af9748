import pytest

from makedep.errors import ErrorCode, VariableError
from makedep.variables import VariableScope, VariableStore, parse_makeflags


def _scope(**values: str) -> VariableScope:
    local = VariableStore()
    for name, value in values.items():
        local.set(name, value)
    return VariableScope(local=local)


def test_lookup_precedence_is_cmdline_then_local_then_top() -> None:
    top = VariableStore()
    top.set("CC", "gcc")
    top.set("CFLAGS", "-O2")
    top.set("LIBS", "-lm")
    local = VariableStore()
    local.set("CC", "clang")
    local.set("CFLAGS", "-g")
    cmdline = VariableStore()
    cmdline.set("CFLAGS", "-O0")

    scope = VariableScope(local=local, cmdline=cmdline, top=top)

    assert scope.get("CFLAGS") == "-O0"
    assert scope.get("CC") == "clang"
    assert scope.get("LIBS") == "-lm"
    assert scope.get("MISSING") is None


def test_parse_assignment_accepts_spacing_and_rejects_other_lines() -> None:
    store = VariableStore()
    assert store.parse_assignment("MODULE  =  foo.dll")
    assert store.parse_assignment("EMPTY =")
    assert not store.parse_assignment("all: foo.dll")
    assert not store.parse_assignment("include Make.rules")
    assert store.get("MODULE") == "foo.dll"
    assert store.get("EMPTY") == ""


def test_redefinition_keeps_first_position() -> None:
    store = VariableStore()
    store.set("B", "1")
    store.set("A", "2")
    store.set("B", "3")
    assert store.items() == [("B", "3"), ("A", "2")]
    assert store.names() == ["A", "B"]
    assert list(store) == ["A", "B"]
    assert len(store) == 2
    assert "A" in store


def test_expand_nested_references() -> None:
    scope = _scope(OBJS="$(SRCS) extra.o", SRCS="a.o $(MORE)", MORE="b.o")
    assert scope.expand_var("OBJS") == "a.o b.o extra.o"
    assert scope.get_array("OBJS") == ["a.o", "b.o", "extra.o"]


def test_expand_leaves_braces_and_double_dollar_alone() -> None:
    scope = _scope(HOME="/home/wine")
    assert scope.expand("${HOME} $$HOME $(HOME)") == "${HOME} $$HOME /home/wine"


def test_undefined_and_blank_values() -> None:
    scope = _scope(BLANK="   ", REF="$(UNDEFINED)")
    assert scope.expand("x$(UNDEFINED)y") == "xy"
    assert scope.expand_var("BLANK") is None
    assert scope.expand_var("REF") is None
    assert scope.get_array("BLANK") == []


def test_recursive_variable_is_an_error() -> None:
    scope = _scope(A="$(B)", B="x $(A)")
    with pytest.raises(VariableError) as excinfo:
        scope.expand_var("A")
    assert excinfo.value.code == ErrorCode.VARIABLE
    assert excinfo.value.context["chain"] == "A -> B -> A"


@pytest.mark.parametrize(
    "text",
    ["$(SRCS:.c=.o)", "$(UNCLOSED", "${UNCLOSED", "$x"],
)
def test_unsupported_syntax_is_rejected(text: str) -> None:
    with pytest.raises(VariableError):
        _scope(SRCS="a.c").expand(text)


def test_file_local_variables_use_identifier_names() -> None:
    scope = _scope(foo_bar_exe_LDFLAGS="-lm -lz")
    assert scope.get_file_local("foo-bar.exe", "LDFLAGS") == ["-lm", "-lz"]
    assert scope.get_file_local("other", "LDFLAGS") == []


def test_parse_makeflags_records_assignments_only() -> None:
    store = VariableStore()
    parse_makeflags(" -j4 CC=gcc\\ -m32  --no-print-directory CFLAGS=-O2 ", store)
    assert store.get("CC") == "gcc -m32"
    assert store.get("CFLAGS") == "-O2"
    assert len(store) == 2
