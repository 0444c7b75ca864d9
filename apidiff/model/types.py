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

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any

# Enums


class DeclKind(StrEnum):
    """
    Kind of a top-level declaration.

    VAR and CONST are both "values"; TYPE is a named type whose
    underlying shape is described by `Shape`.
    """

    VAR = auto()
    CONST = auto()
    FUNC = auto()
    TYPE = auto()

    def is_value(self) -> bool:
        return self in (DeclKind.VAR, DeclKind.CONST)


class Shape(StrEnum):
    """
    Underlying shape of a named type.
    """

    AGGREGATE = auto()  # record with named, typed fields
    CONTRACT = auto()  # interface: explicit methods + embedded contracts
    OTHER = auto()  # alias to primitive / container / callable, etc.


# Members


@dataclass(frozen=True, slots=True)
class Field:
    name: str
    type: str
    exported: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "exported": self.exported}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Field":
        return Field(
            name=str(data["name"]),
            type=str(data.get("type", "")),
            exported=bool(data.get("exported", True)),
        )


@dataclass(frozen=True, slots=True)
class Method:
    """
    A method, either declared explicitly by a contract or attached to a named type.

    `signature` is the parameter/result part only, e.g. "(x int) string".
    `receiver` is the package-qualified owner, e.g. "pack.T2" or "*pack.T2".
    """

    name: str
    signature: str
    exported: bool = True
    receiver: str = ""

    @property
    def text(self) -> str:
        if self.receiver:
            return f"func ({self.receiver}).{self.name}{self.signature}"
        return f"func {self.name}{self.signature}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.signature,
            "exported": self.exported,
            "receiver": self.receiver,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any], *, receiver: str = "") -> "Method":
        return Method(
            name=str(data["name"]),
            signature=str(data.get("signature", "()")),
            exported=bool(data.get("exported", True)),
            receiver=str(data.get("receiver") or receiver),
        )


@dataclass(frozen=True, slots=True)
class Embed:
    """
    Reference to a contract embedded in another contract.

    `declaration` is what gets rendered in reports; `qualified_name` is the match key.
    """

    qualified_name: str
    declaration: "Declaration"

    @property
    def exported(self) -> bool:
        return self.declaration.exported

    def to_dict(self) -> dict[str, Any]:
        return {"qualified_name": self.qualified_name, "declaration": self.declaration.to_dict()}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Embed":
        qualified = str(data["qualified_name"])
        package, _, _ = qualified.rpartition(".")
        return Embed(
            qualified_name=qualified,
            declaration=Declaration.from_dict(data["declaration"], package=package),
        )


# Declaration


@dataclass(frozen=True, slots=True)
class Declaration:
    """
    A top-level named entity of a package.

    `signature` is the package-qualified string form of the declaration's
    underlying type:
      - VAR/CONST: "int", "untyped string", "pack.T"
      - FUNC:      "func(x int) string"
      - TYPE:      "struct{A int; B string}", "interface{M() int}", "[]string"

    Only TYPE declarations carry `shape`, members and an attached method set.
    """

    name: str
    kind: DeclKind
    signature: str
    package: str = ""
    exported: bool = True

    shape: Shape | None = None
    fields: tuple[Field, ...] = ()
    methods: tuple[Method, ...] = ()
    embeds: tuple[Embed, ...] = ()
    method_set: tuple[Method, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name

    @property
    def text(self) -> str:
        """
        Full, package-qualified textual form, e.g. "var pack.A int" or
        "type pack.T1 struct{A int; G string}".
        """
        if self.kind == DeclKind.FUNC:
            for prefix in ("func", "async func"):
                if self.signature.startswith(prefix + "("):
                    return f"{prefix} {self.qualified_name}{self.signature[len(prefix) :]}"
            return f"func {self.qualified_name}{self.signature}"
        return f"{self.kind.value} {self.qualified_name} {self.signature}"

    def is_named_type(self) -> bool:
        return self.kind == DeclKind.TYPE

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "signature": self.signature,
            "exported": self.exported,
        }
        if self.shape is not None:
            out["shape"] = self.shape.value
        if self.fields:
            out["fields"] = [f.to_dict() for f in self.fields]
        if self.methods:
            out["methods"] = [m.to_dict() for m in self.methods]
        if self.embeds:
            out["embeds"] = [e.to_dict() for e in self.embeds]
        if self.method_set:
            out["method_set"] = [m.to_dict() for m in self.method_set]
        return out

    @staticmethod
    def from_dict(data: Mapping[str, Any], *, package: str = "") -> "Declaration":
        kind = DeclKind(str(data["kind"]).lower())
        raw_shape = data.get("shape")
        shape = Shape(str(raw_shape).lower()) if raw_shape is not None else None
        if kind == DeclKind.TYPE and shape is None:
            shape = Shape.OTHER

        pkg = str(data.get("package") or package)
        name = str(data["name"])
        receiver = f"{pkg}.{name}" if pkg else name

        return Declaration(
            name=name,
            kind=kind,
            signature=str(data.get("signature", "")),
            package=pkg,
            exported=bool(data.get("exported", True)),
            shape=shape,
            fields=tuple(Field.from_dict(f) for f in data.get("fields") or ()),
            methods=tuple(Method.from_dict(m, receiver=receiver) for m in data.get("methods") or ()),
            embeds=tuple(Embed.from_dict(e) for e in data.get("embeds") or ()),
            method_set=tuple(Method.from_dict(m, receiver=receiver) for m in data.get("method_set") or ()),
        )


# Package


@dataclass(frozen=True, slots=True)
class Package:
    """
    Immutable, fully resolved symbol table of one package.

    Declarations are keyed by identifier; `names()` always iterates in
    ascending lexical order regardless of construction order.
    """

    name: str
    declarations: Mapping[str, Declaration] = field(default_factory=dict)

    def names(self) -> list[str]:
        return sorted(self.declarations)

    def lookup(self, name: str) -> Declaration | None:
        return self.declarations.get(name)

    def exported(self) -> Iterator[Declaration]:
        for n in self.names():
            d = self.declarations[n]
            if d.exported:
                yield d

    def __len__(self) -> int:
        return len(self.declarations)

    @staticmethod
    def of(name: str, declarations: Iterable[Declaration]) -> "Package":
        """
        Build a package from declarations, filling in the owning package name.
        """
        decls: dict[str, Declaration] = {}
        for d in declarations:
            if not d.package:
                d = _with_package(d, name)
            decls[d.name] = d
        return Package(name=name, declarations=dict(sorted(decls.items())))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "declarations": [self.declarations[n].to_dict() for n in self.names()],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Package":
        name = str(data["name"])
        return Package.of(name, [Declaration.from_dict(d, package=name) for d in data.get("declarations") or ()])


def _with_package(d: Declaration, package: str) -> Declaration:
    receiver = f"{package}.{d.name}"
    return Declaration(
        name=d.name,
        kind=d.kind,
        signature=d.signature,
        package=package,
        exported=d.exported,
        shape=d.shape,
        fields=d.fields,
        methods=tuple(_with_receiver(m, receiver) for m in d.methods),
        embeds=d.embeds,
        method_set=tuple(_with_receiver(m, receiver) for m in d.method_set),
    )


def _with_receiver(m: Method, receiver: str) -> Method:
    if m.receiver:
        return m
    return Method(name=m.name, signature=m.signature, exported=m.exported, receiver=receiver)
