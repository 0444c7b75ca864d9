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

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml

from apidiff.errors import ResolveError
from apidiff.model.types import Declaration, DeclKind, Embed, Field, Method, Package, Shape

NamingRule = Callable[[str], bool]


def go_exported(name: str) -> bool:
    return name[:1].isupper()


def python_exported(name: str) -> bool:
    return bool(name) and not name.startswith("_")


NAMING_RULES: Mapping[str, NamingRule] = {
    "go": go_exported,
    "python": python_exported,
}


class SymbolTableLoader:
    """
    Loads a resolved Package from a symbol table file (YAML or JSON).

    Accepted layouts:

      # single package
      name: pack
      naming: go
      declarations:
        - {name: A, kind: var, signature: int}

      # several packages; pick one with `package=`
      naming: go
      packages:
        - name: pack
          declarations: {...}

    `declarations` may be a list of objects or a mapping name -> object.
    When `exported` is omitted it follows the file's naming rule
    ("python" by default: no leading underscore).
    """

    def load(self, path: Path, *, package: str | None = None) -> Package:
        if not isinstance(path, Path):
            path = Path(path)

        if not path.exists():
            raise ResolveError(code="symbols_not_found", message=f"Symbol table does not exist: {path}")

        data = self._read_file(path)
        if not isinstance(data, dict):
            raise ResolveError(code="invalid_symbols", message=f"{path}: root must be a mapping/object.")

        return self.parse(data, package=package, source=str(path))

    def parse(self, data: Mapping[str, Any], *, package: str | None = None, source: str = "<memory>") -> Package:
        naming = self._naming_rule(data.get("naming", "python"), source)

        raw_pkgs = data.get("packages")
        if raw_pkgs is None:
            return self._parse_package(data, naming, source)

        if not isinstance(raw_pkgs, list) or not all(isinstance(p, dict) for p in raw_pkgs):
            raise ResolveError(code="invalid_symbols", message=f"{source}: 'packages' must be a list of objects.")

        if package is not None:
            for p in raw_pkgs:
                if p.get("name") == package:
                    return self._parse_package(p, naming, source)
            raise ResolveError(
                code="package_not_found",
                message=f"{source}: no package named {package!r}",
                details={"available": [p.get("name") for p in raw_pkgs]},
            )

        if len(raw_pkgs) != 1:
            names = [str(p.get("name")) for p in raw_pkgs]
            raise ResolveError(
                code="multiple_packages",
                message=f"cannot have {names} packages in the same symbol table",
                details={"packages": names, "source": source},
            )
        return self._parse_package(raw_pkgs[0], naming, source)

    def _read_file(self, path: Path) -> Any:
        raw = path.read_text(encoding="utf-8")
        try:
            if path.suffix.lower() == ".json":
                return json.loads(raw)
            # YAML is a superset of JSON, so anything else goes through it
            return yaml.safe_load(raw)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ResolveError(code="invalid_symbols", message=f"{path}: cannot parse symbol table: {e}") from e

    def _naming_rule(self, raw: Any, source: str) -> NamingRule:
        rule = NAMING_RULES.get(str(raw).lower())
        if rule is None:
            raise ResolveError(
                code="invalid_symbols",
                message=f"{source}: unknown naming rule {raw!r}",
                details={"supported": sorted(NAMING_RULES)},
            )
        return rule

    def _parse_package(self, raw: Mapping[str, Any], naming: NamingRule, source: str) -> Package:
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ResolveError(code="invalid_symbols", message=f"{source}: package 'name' must be a non-empty string.")

        decls_raw = raw.get("declarations") or []
        items: list[tuple[str, Any]]
        if isinstance(decls_raw, dict):
            items = [(str(k), v) for k, v in decls_raw.items()]
        elif isinstance(decls_raw, list):
            items = [(str(d.get("name", "")) if isinstance(d, dict) else "", d) for d in decls_raw]
        else:
            raise ResolveError(code="invalid_symbols", message=f"{source}: 'declarations' must be a list or mapping.")

        # First pass: plain declarations; embeds may refer to any of them.
        specs: dict[str, Mapping[str, Any]] = {}
        for ident, spec in items:
            if not isinstance(spec, dict) or not ident:
                raise ResolveError(
                    code="invalid_symbols",
                    message=f"{source}: declaration {ident or '?'!r} in package {name!r} must be an object with a name.",
                )
            if ident in specs:
                raise ResolveError(
                    code="invalid_symbols",
                    message=f"{source}: {ident} redeclared in package {name!r}",
                )
            specs[ident] = spec

        plain = {ident: self._parse_declaration(ident, spec, name, naming, source, embeds=()) for ident, spec in specs.items()}

        decls: list[Declaration] = []
        for ident, spec in specs.items():
            raw_embeds = spec.get("embeds") or ()
            if not raw_embeds:
                decls.append(plain[ident])
                continue
            embeds = tuple(self._parse_embed(e, name, plain, naming) for e in raw_embeds)
            decls.append(self._parse_declaration(ident, spec, name, naming, source, embeds=embeds))

        return Package.of(name, decls)

    def _parse_declaration(
        self,
        ident: str,
        spec: Mapping[str, Any],
        package: str,
        naming: NamingRule,
        source: str,
        *,
        embeds: tuple[Embed, ...],
    ) -> Declaration:
        try:
            kind = DeclKind(str(spec.get("kind", "")).lower())
        except ValueError as e:
            raise ResolveError(
                code="invalid_symbols",
                message=f"{source}: {ident}: unknown kind {spec.get('kind')!r}",
                details={"supported": [k.value for k in DeclKind]},
            ) from e

        shape: Shape | None = None
        if kind == DeclKind.TYPE:
            try:
                shape = Shape(str(spec.get("shape", Shape.OTHER.value)).lower())
            except ValueError as e:
                raise ResolveError(
                    code="invalid_symbols",
                    message=f"{source}: {ident}: unknown shape {spec.get('shape')!r}",
                    details={"supported": [s.value for s in Shape]},
                ) from e

        receiver = f"{package}.{ident}"

        return Declaration(
            name=ident,
            kind=kind,
            signature=str(spec.get("signature", "")),
            package=package,
            exported=bool(spec.get("exported", naming(ident))),
            shape=shape,
            fields=tuple(self._parse_field(f, naming) for f in spec.get("fields") or ()),
            methods=tuple(self._parse_method(m, receiver, naming) for m in spec.get("methods") or ()),
            embeds=embeds,
            method_set=tuple(self._parse_method(m, receiver, naming) for m in spec.get("method_set") or ()),
        )

    def _parse_field(self, raw: Any, naming: NamingRule) -> Field:
        if isinstance(raw, str):
            # "A int" shorthand
            fname, _, ftype = raw.partition(" ")
            return Field(name=fname, type=ftype.strip(), exported=naming(fname))
        fname = str(raw["name"])
        return Field(name=fname, type=str(raw.get("type", "")), exported=bool(raw.get("exported", naming(fname))))

    def _parse_method(self, raw: Any, receiver: str, naming: NamingRule) -> Method:
        mname = str(raw["name"])
        return Method(
            name=mname,
            signature=str(raw.get("signature", "()")),
            exported=bool(raw.get("exported", naming(mname))),
            receiver=str(raw.get("receiver") or receiver),
        )

    def _parse_embed(
        self, raw: Any, package: str, known: Mapping[str, Declaration], naming: NamingRule
    ) -> Embed:
        qualified = str(raw if isinstance(raw, str) else raw["qualified_name"])
        pkg, _, ident = qualified.rpartition(".")

        if pkg == package and ident in known:
            return Embed(qualified_name=qualified, declaration=known[ident])

        # embedded from another package: render it by name only
        return Embed(
            qualified_name=qualified,
            declaration=Declaration(
                name=ident,
                kind=DeclKind.TYPE,
                signature="interface{}" if isinstance(raw, str) else str(raw.get("signature", "interface{}")),
                package=pkg,
                exported=naming(ident),
                shape=Shape.CONTRACT,
            ),
        )
