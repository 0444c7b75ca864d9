import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from apidiff.errors import ResolveError
from apidiff.model.loader import SymbolTableLoader, go_exported, python_exported
from apidiff.model.types import DeclKind, Shape

# ----------------------------
# Helpers
# ----------------------------


def write_yaml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def write_json(path: Path, obj: Any) -> Path:
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")
    return path


def parse(text: str, **kw):
    return SymbolTableLoader().parse(yaml.safe_load(text), **kw)


# ----------------------------
# Naming rules
# ----------------------------


def test_naming_rules():
    assert go_exported("Name")
    assert not go_exported("name")
    assert not go_exported("")
    assert python_exported("name")
    assert python_exported("Name")
    assert not python_exported("_name")
    assert not python_exported("")


# ----------------------------
# Happy paths
# ----------------------------


def test_single_package_list_form():
    p = parse(
        """
name: pack
naming: go
declarations:
  - {name: A, kind: var, signature: int}
  - {name: b, kind: var, signature: int}
  - {name: K, kind: func, signature: "func(int) string"}
"""
    )
    assert p.name == "pack"
    assert p.names() == ["A", "K", "b"]
    assert p.declarations["A"].kind == DeclKind.VAR
    assert p.declarations["A"].package == "pack"
    assert not p.declarations["b"].exported


def test_mapping_declarations_and_python_naming_default():
    p = parse(
        """
name: mod
declarations:
  fetch: {kind: func, signature: "async func(url: str) -> bytes"}
  _cache: {kind: var, signature: dict}
  Limit: {kind: const, signature: "untyped int", exported: false}
"""
    )
    assert p.declarations["fetch"].exported
    assert not p.declarations["_cache"].exported
    assert not p.declarations["Limit"].exported


def test_type_defaults_to_other_shape():
    p = parse("name: pack\ndeclarations:\n  - {name: S, kind: type, signature: '[]string'}\n")
    assert p.declarations["S"].shape == Shape.OTHER


def test_field_shorthand_and_method_receivers():
    p = parse(
        """
name: pack
naming: go
declarations:
  - name: T
    kind: type
    shape: aggregate
    signature: "struct{A int; b string}"
    fields: ["A int", "b string", {name: C, type: "[]pack.T"}]
    method_set:
      - {name: Get, signature: "() int"}
      - {name: Set, signature: "(int)", receiver: "*pack.T"}
      - {name: reset}
"""
    )
    t = p.declarations["T"]

    assert [(f.name, f.type, f.exported) for f in t.fields] == [
        ("A", "int", True),
        ("b", "string", False),
        ("C", "[]pack.T", True),
    ]
    assert [m.receiver for m in t.method_set] == ["pack.T", "*pack.T", "pack.T"]
    assert t.method_set[2].signature == "()"
    assert not t.method_set[2].exported


def test_embeds_resolve_within_package_or_become_stubs():
    p = parse(
        """
name: pack
naming: go
declarations:
  - name: I2
    kind: type
    shape: contract
    signature: "interface{pack.I1; io.Reader}"
    embeds: [pack.I1, io.Reader]
  - name: I1
    kind: type
    shape: contract
    signature: "interface{X()}"
    methods: [{name: X}]
"""
    )
    local, foreign = p.declarations["I2"].embeds

    assert local.qualified_name == "pack.I1"
    assert local.declaration == p.declarations["I1"]

    assert foreign.qualified_name == "io.Reader"
    assert foreign.declaration.package == "io"
    assert foreign.declaration.shape == Shape.CONTRACT
    assert foreign.exported


def test_packages_list_select_by_name():
    text = """
naming: go
packages:
  - name: a
    declarations: [{name: A, kind: var, signature: int}]
  - name: b
    declarations: [{name: B, kind: var, signature: int}]
"""
    assert parse(text, package="b").names() == ["B"]


def test_packages_list_with_single_entry_needs_no_selection():
    p = parse("packages:\n  - name: only\n    declarations: []\n")
    assert p.name == "only"
    assert len(p) == 0


def test_load_json_file(tmp_path: Path):
    f = write_json(
        tmp_path / "symbols.json",
        {"name": "pack", "naming": "go", "declarations": [{"name": "A", "kind": "var", "signature": "int"}]},
    )
    p = SymbolTableLoader().load(f)
    assert p.names() == ["A"]


def test_load_yaml_file_from_str_path(tmp_path: Path):
    f = write_yaml(tmp_path / "symbols.yaml", "name: pack\ndeclarations: []\n")
    assert SymbolTableLoader().load(str(f)).name == "pack"  # type: ignore[arg-type]


# ----------------------------
# Errors
# ----------------------------


def test_several_packages_without_selection_fail():
    with pytest.raises(ResolveError) as ei:
        parse("packages:\n  - {name: a}\n  - {name: b}\n")
    assert ei.value.code == "multiple_packages"
    assert str(ei.value) == "cannot have ['a', 'b'] packages in the same symbol table"


def test_unknown_package_selection_fails():
    with pytest.raises(ResolveError) as ei:
        parse("packages:\n  - {name: a}\n", package="zzz")
    assert ei.value.code == "package_not_found"
    assert ei.value.details["available"] == ["a"]


def test_missing_file_fails(tmp_path: Path):
    with pytest.raises(ResolveError) as ei:
        SymbolTableLoader().load(tmp_path / "nope.yaml")
    assert ei.value.code == "symbols_not_found"


def test_non_mapping_root_fails(tmp_path: Path):
    f = write_yaml(tmp_path / "symbols.yaml", "- a\n- b\n")
    with pytest.raises(ResolveError) as ei:
        SymbolTableLoader().load(f)
    assert ei.value.code == "invalid_symbols"


def test_broken_json_fails(tmp_path: Path):
    f = tmp_path / "symbols.json"
    f.write_text("{not json", encoding="utf-8")
    with pytest.raises(ResolveError) as ei:
        SymbolTableLoader().load(f)
    assert ei.value.code == "invalid_symbols"


@pytest.mark.parametrize(
    "text",
    [
        "declarations: []\n",
        "name: pack\nnaming: rust\n",
        "name: pack\ndeclarations: 3\n",
        "name: pack\ndeclarations:\n  - {name: A, kind: macro}\n",
        "name: pack\ndeclarations:\n  - {name: T, kind: type, shape: union}\n",
        "name: pack\ndeclarations:\n  - {kind: var}\n",
        "name: pack\ndeclarations:\n  - {name: A, kind: var}\n  - {name: A, kind: func}\n",
        "packages: {a: 1}\n",
    ],
)
def test_invalid_symbol_tables(text: str):
    with pytest.raises(ResolveError) as ei:
        parse(text)
    assert ei.value.code == "invalid_symbols"
