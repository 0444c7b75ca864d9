# SPDX-License-Identifier: AGPL-3.0-only
#
# Copyright (c) 2026 Apidiff Contributors
#
# This file is part of Apidiff.
#
# Apidiff is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 only.
#
# Apidiff is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.
# See the GNU Affero General Public License for more details.

import ast
import fnmatch
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from apidiff.errors import ResolveError
from apidiff.frontends.interfaces import ResolveConfig
from apidiff.frontends.notes import NoteCollector
from apidiff.model.loader import python_exported
from apidiff.model.types import Declaration, DeclKind, Embed, Field, Method, Package, Shape

logger = logging.getLogger(__name__)

_CONTRACT_BASES = frozenset(
    {
        "Protocol",
        "typing.Protocol",
        "typing_extensions.Protocol",
        "ABC",
        "abc.ABC",
    }
)

_ENUM_BASES = frozenset(
    {
        "Enum",
        "IntEnum",
        "StrEnum",
        "Flag",
        "IntFlag",
        "enum.Enum",
        "enum.IntEnum",
        "enum.StrEnum",
        "enum.Flag",
        "enum.IntFlag",
    }
)

# Bases that say nothing about the API shape
_IGNORED_BASES = frozenset({"object", "Generic", "typing.Generic"})

_LITERAL_TYPES = {
    ast.List: "list",
    ast.Tuple: "tuple",
    ast.Dict: "dict",
    ast.Set: "set",
    ast.JoinedStr: "str",
    ast.ListComp: "list",
    ast.DictComp: "dict",
    ast.SetComp: "set",
    ast.Lambda: "Callable",
}


@dataclass(slots=True)
class _Entry:
    """
    First top-level definition of a name, and where it came from.
    """

    file: str
    node: ast.stmt
    exported: bool


@dataclass(slots=True)
class _Scope:
    package: str
    notes: NoteCollector
    entries: dict[str, _Entry] = field(default_factory=dict)


class PythonFrontEnd:
    """
    Resolves a directory of Python modules into one Package.

    Scope:
    - *.py files directly inside the directory (not recursive), tests excluded
    - module-level functions, classes, variables, constants and type aliases
    - exported = no leading underscore, restricted by a literal `__all__` if present

    Resolution is syntactic (ast only); nothing is imported or executed.
    """

    @property
    def frontend_id(self) -> str:
        return "python"

    _TEST_FILE_GLOBS: tuple[str, ...] = (
        "test_*.py",
        "*_test.py",
        "conftest.py",
    )

    def can_resolve(self, directory: Path) -> bool:
        if not directory.is_dir():
            return False
        return any(True for _ in self._iter_source_files(directory, ()))

    def resolve(self, config: ResolveConfig) -> Package:
        directory = config.normalized_directory()
        if not directory.is_dir():
            raise ResolveError(code="no_sources", message=f"Package directory does not exist: {directory}")

        files = sorted(self._iter_source_files(directory, config.exclude_globs), key=lambda p: p.name)
        if not files:
            raise ResolveError(code="no_sources", message=f"No Python source files in {directory}")

        scope = _Scope(package=directory.name, notes=NoteCollector(str(directory), limit=config.note_limit))

        for f in files:
            tree = self._parse(f, scope.notes)
            if tree is not None:
                self._collect(f.name, tree, scope)

        decls = _DeclarationBuilder(scope).build()
        scope.notes.finish()

        logger.debug("resolved %s: %d files, %d declarations, %d notes", directory, len(files), len(decls), len(scope.notes))
        return Package.of(scope.package, decls)

    def _iter_source_files(self, directory: Path, exclude_globs: tuple[str, ...]) -> Iterator[Path]:
        for f in directory.glob("*.py"):
            if not f.is_file():
                continue
            if any(fnmatch.fnmatch(f.name, g) for g in self._TEST_FILE_GLOBS):
                continue
            if any(fnmatch.fnmatch(f.name, g) or fnmatch.fnmatch(f.as_posix(), g) for g in exclude_globs):
                continue
            yield f

    def _parse(self, f: Path, notes: NoteCollector) -> ast.Module | None:
        try:
            text = f.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            notes.note(f"{f}: cannot read file: {e}")
            return None

        try:
            return ast.parse(text, filename=str(f))
        except SyntaxError as e:
            notes.note(f"{f}:{e.lineno}: {e.msg}")
            return None

    def _collect(self, filename: str, tree: ast.Module, scope: _Scope) -> None:
        public = _literal_all(tree)
        if public is None and _declares_all(tree):
            scope.notes.note(f"{filename}: __all__ is not a literal sequence; using naming convention")

        local: dict[str, _Entry] = {}
        for stmt in tree.body:
            for name in _defined_names(stmt):
                exported = python_exported(name) and (public is None or name in public)
                # later definitions in the same module win, like at runtime
                local[name] = _Entry(file=filename, node=stmt, exported=exported)

        for name, entry in local.items():
            prev = scope.entries.get(name)
            if prev is not None:
                scope.notes.note(f"{filename}:{entry.node.lineno}: {name} redeclared in this package (first in {prev.file})")
                continue
            scope.entries[name] = entry


class _DeclarationBuilder:
    """
    Turns collected top-level statements into Declarations.

    Classes are built in two passes so contracts can embed other contracts of
    the same package regardless of definition order.
    """

    def __init__(self, scope: _Scope) -> None:
        self._scope = scope
        self._pkg = scope.package

    def build(self) -> list[Declaration]:
        plain: dict[str, Declaration] = {}
        for name, entry in self._scope.entries.items():
            decl = self._declaration(name, entry, embeds=())
            if decl is not None:
                plain[name] = decl

        out: list[Declaration] = []
        for name, decl in plain.items():
            node = self._scope.entries[name].node
            if decl.shape == Shape.CONTRACT and isinstance(node, ast.ClassDef):
                embeds = tuple(self._embeds(node, plain))
                if embeds:
                    decl = self._declaration(name, self._scope.entries[name], embeds=embeds) or decl
            out.append(decl)
        return out

    def _declaration(self, name: str, entry: _Entry, *, embeds: tuple[Embed, ...]) -> Declaration | None:
        node = entry.node

        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            return Declaration(
                name=name,
                kind=DeclKind.FUNC,
                signature=_func_signature(node, drop_first=False),
                package=self._pkg,
                exported=entry.exported,
            )

        if isinstance(node, ast.ClassDef):
            return self._class(node, entry.exported, embeds)

        if isinstance(node, ast.TypeAlias):
            return self._alias(name, ast.unparse(node.value), entry.exported)

        if isinstance(node, ast.AnnAssign):
            return self._annotated(name, node, entry.exported)

        if isinstance(node, ast.Assign):
            return self._assigned(name, node.value, entry.exported)

        return None

    def _alias(self, name: str, target: str, exported: bool) -> Declaration:
        return Declaration(
            name=name,
            kind=DeclKind.TYPE,
            signature=target,
            package=self._pkg,
            exported=exported,
            shape=Shape.OTHER,
        )

    def _annotated(self, name: str, node: ast.AnnAssign, exported: bool) -> Declaration:
        ann = node.annotation
        ann_text = ast.unparse(ann)

        if ann_text in ("TypeAlias", "typing.TypeAlias") and node.value is not None:
            return self._alias(name, ast.unparse(node.value), exported)

        kind = DeclKind.VAR
        signature = ann_text
        if _is_final(ann):
            kind = DeclKind.CONST
            if isinstance(ann, ast.Subscript):
                signature = ast.unparse(ann.slice)
            else:
                signature = _infer_type(node.value, untyped=True) if node.value is not None else "object"

        return Declaration(name=name, kind=kind, signature=signature, package=self._pkg, exported=exported)

    def _assigned(self, name: str, value: ast.expr, exported: bool) -> Declaration:
        if isinstance(value, ast.Call) and _call_name(value) in ("NewType", "typing.NewType") and len(value.args) == 2:
            return self._alias(name, ast.unparse(value.args[1]), exported)

        if name.isupper() and _is_literal(value):
            return Declaration(
                name=name,
                kind=DeclKind.CONST,
                signature=_infer_type(value, untyped=True),
                package=self._pkg,
                exported=exported,
            )

        return Declaration(
            name=name,
            kind=DeclKind.VAR,
            signature=_infer_type(value, untyped=False),
            package=self._pkg,
            exported=exported,
        )

    def _class(self, node: ast.ClassDef, exported: bool, embeds: tuple[Embed, ...]) -> Declaration:
        bases = [ast.unparse(b) for b in node.bases]
        receiver = f"{self._pkg}.{node.name}"

        if _is_contract(node, bases):
            methods = tuple(_methods(node, receiver))
            visible = [f"{m.name}{m.signature}" for m in methods if m.exported]
            visible.extend(e.qualified_name for e in embeds if e.exported)
            return Declaration(
                name=node.name,
                kind=DeclKind.TYPE,
                signature="interface{" + "; ".join(visible) + "}",
                package=self._pkg,
                exported=exported,
                shape=Shape.CONTRACT,
                methods=methods,
                embeds=embeds,
            )

        fields = tuple(_fields(node, bases))
        return Declaration(
            name=node.name,
            kind=DeclKind.TYPE,
            signature="struct{" + "; ".join(f"{f.name} {f.type}" for f in fields if f.exported) + "}",
            package=self._pkg,
            exported=exported,
            shape=Shape.AGGREGATE,
            fields=fields,
            method_set=tuple(m for m in _methods(node, receiver) if not _is_property(m.name, node)),
        )

    def _embeds(self, node: ast.ClassDef, known: dict[str, Declaration]) -> Iterator[Embed]:
        for base in node.bases:
            text = ast.unparse(base)
            if _is_marker_base(text):
                continue

            local = known.get(text)
            if local is not None:
                yield Embed(qualified_name=local.qualified_name, declaration=local)
                continue

            pkg, _, ident = text.rpartition(".")
            yield Embed(
                qualified_name=text,
                declaration=Declaration(
                    name=ident,
                    kind=DeclKind.TYPE,
                    signature="interface{}",
                    package=pkg,
                    exported=python_exported(ident),
                    shape=Shape.CONTRACT,
                ),
            )


# Module-level helpers


def _defined_names(stmt: ast.stmt) -> list[str]:
    if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
        return [stmt.name]
    if isinstance(stmt, ast.TypeAlias) and isinstance(stmt.name, ast.Name):
        return [stmt.name.id]
    if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
        return [stmt.target.id]
    if isinstance(stmt, ast.Assign):
        return [t.id for t in stmt.targets if isinstance(t, ast.Name)]
    return []


def _declares_all(tree: ast.Module) -> bool:
    return "__all__" in {n for stmt in tree.body for n in _defined_names(stmt)}


def _literal_all(tree: ast.Module) -> frozenset[str] | None:
    value: ast.expr | None = None
    for stmt in tree.body:
        if isinstance(stmt, ast.Assign) and any(isinstance(t, ast.Name) and t.id == "__all__" for t in stmt.targets):
            value = stmt.value
        elif isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name) and stmt.target.id == "__all__":
            value = stmt.value
    if not isinstance(value, (ast.List, ast.Tuple)):
        return None
    names = [e.value for e in value.elts if isinstance(e, ast.Constant) and isinstance(e.value, str)]
    if len(names) != len(value.elts):
        return None
    return frozenset(names)


def _call_name(call: ast.Call) -> str:
    return ast.unparse(call.func)


def _is_literal(value: ast.expr) -> bool:
    if isinstance(value, ast.Constant):
        return True
    if isinstance(value, ast.UnaryOp) and isinstance(value.operand, ast.Constant):
        return True
    return isinstance(value, (ast.Tuple, ast.List, ast.Set, ast.Dict)) and all(
        _is_literal(e) for e in _literal_children(value)
    )


def _literal_children(value: ast.expr) -> list[ast.expr]:
    if isinstance(value, ast.Dict):
        return [k for k in value.keys if k is not None] + list(value.values)
    return list(getattr(value, "elts", []))


def _infer_type(value: ast.expr | None, *, untyped: bool) -> str:
    """
    Best-effort static type of an unannotated value.

    Constants get the "untyped " marker, like untyped literal constants.
    """
    if value is None:
        return "object"
    if isinstance(value, ast.UnaryOp) and isinstance(value.operand, ast.Constant):
        value = value.operand
    if isinstance(value, ast.Constant):
        t = "None" if value.value is None else type(value.value).__name__
        return f"untyped {t}" if untyped else t
    for node_type, name in _LITERAL_TYPES.items():
        if isinstance(value, node_type):
            return name
    if isinstance(value, ast.Call):
        return _call_name(value)
    if isinstance(value, (ast.Name, ast.Attribute)):
        return ast.unparse(value)
    return "object"


def _is_final(ann: ast.expr) -> bool:
    target = ann.value if isinstance(ann, ast.Subscript) else ann
    return ast.unparse(target) in ("Final", "typing.Final")


def _is_marker_base(text: str) -> bool:
    head = text.split("[", 1)[0]
    return head in _CONTRACT_BASES or head in _IGNORED_BASES


def _is_contract(node: ast.ClassDef, bases: list[str]) -> bool:
    if any(b.split("[", 1)[0] in _CONTRACT_BASES for b in bases):
        return True
    return any(kw.arg == "metaclass" and ast.unparse(kw.value) in ("ABCMeta", "abc.ABCMeta") for kw in node.keywords)


def _is_enum(bases: list[str]) -> bool:
    return any(b in _ENUM_BASES for b in bases)


def _method_exported(name: str) -> bool:
    # dunder hooks (__init__, __call__, ...) are part of the public surface
    return python_exported(name) or (name.startswith("__") and name.endswith("__"))


def _decorator_names(fn: ast.FunctionDef | ast.AsyncFunctionDef) -> list[str]:
    return [ast.unparse(d.func if isinstance(d, ast.Call) else d) for d in fn.decorator_list]


def _is_property(name: str, node: ast.ClassDef) -> bool:
    for stmt in node.body:
        if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and stmt.name == name:
            decorators = _decorator_names(stmt)
            if "property" in decorators or "functools.cached_property" in decorators or "cached_property" in decorators:
                return True
    return False


def _methods(node: ast.ClassDef, receiver: str) -> Iterator[Method]:
    seen: set[str] = set()
    for stmt in node.body:
        if not isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        decorators = _decorator_names(stmt)
        # @x.setter / @x.deleter / @overload variants add nothing new
        if any(d.endswith((".setter", ".deleter")) or d in ("overload", "typing.overload") for d in decorators):
            continue
        if stmt.name in seen:
            continue
        seen.add(stmt.name)
        static = "staticmethod" in decorators
        yield Method(
            name=stmt.name,
            signature=_func_params(stmt, drop_first=not static),
            exported=_method_exported(stmt.name),
            receiver=receiver,
        )


def _fields(node: ast.ClassDef, bases: list[str]) -> Iterator[Field]:
    for b in bases:
        if b.split("[", 1)[0] not in _IGNORED_BASES:
            yield Field(name=b, type="(base)", exported=True)

    enum = _is_enum(bases)
    for stmt in node.body:
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            yield Field(
                name=stmt.target.id,
                type=ast.unparse(stmt.annotation),
                exported=python_exported(stmt.target.id),
            )
        elif enum and isinstance(stmt, ast.Assign):
            for t in stmt.targets:
                if isinstance(t, ast.Name):
                    yield Field(name=t.id, type=node.name, exported=python_exported(t.id))
        elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and _is_property(stmt.name, node):
            if any(d.endswith((".setter", ".deleter")) for d in _decorator_names(stmt)):
                continue
            yield Field(
                name=stmt.name,
                type=ast.unparse(stmt.returns) if stmt.returns is not None else "Any",
                exported=python_exported(stmt.name),
            )


def _func_signature(fn: ast.FunctionDef | ast.AsyncFunctionDef, *, drop_first: bool) -> str:
    """
    "func(a: int, b: str = ..., *args, key: bool = ...) -> bool"

    Default values are elided; only their presence is part of the signature.
    """
    prefix = "async func" if isinstance(fn, ast.AsyncFunctionDef) else "func"
    return prefix + _func_params(fn, drop_first=drop_first)


def _func_params(fn: ast.FunctionDef | ast.AsyncFunctionDef, *, drop_first: bool) -> str:
    a = fn.args
    params: list[str] = []

    positional = list(a.posonlyargs) + list(a.args)
    defaults_from = len(positional) - len(a.defaults)
    for i, arg in enumerate(positional):
        if drop_first and i == 0:
            continue
        p = _param(arg)
        if i >= defaults_from:
            p += " = ..."
        params.append(p)
        if a.posonlyargs and i == len(a.posonlyargs) - 1 and params:
            params.append("/")

    if a.vararg is not None:
        params.append("*" + _param(a.vararg))
    elif a.kwonlyargs:
        params.append("*")

    for arg, default in zip(a.kwonlyargs, a.kw_defaults):
        p = _param(arg)
        if default is not None:
            p += " = ..."
        params.append(p)

    if a.kwarg is not None:
        params.append("**" + _param(a.kwarg))

    out = f"({', '.join(params)})"
    if fn.returns is not None:
        out += f" -> {ast.unparse(fn.returns)}"
    return out


def _param(arg: ast.arg) -> str:
    if arg.annotation is None:
        return arg.arg
    return f"{arg.arg}: {ast.unparse(arg.annotation)}"
