"""
Alias resolution: fully-qualified Cairo path -> generated Python identifier.

The resolver does not rewrite the model. It produces a `NameTable` that the
code generator consults for every declaration and every reference, so a path
renders the same way wherever it appears (struct field, enum payload, function
input/output, nested generic argument).

Naming rules, first match wins:
  1. the alias given for the path;
  2. the last segment of the base path, followed by the capitalized identifiers
     of its generic arguments for user generics
     (``pkg::Wrapper::<core::integer::u32>`` -> ``WrapperU32``).

The result is sanitized into a usable Python name. Two paths landing on the
same identifier, or an identifier equal to the contract or reader class name,
is a NameCollision.
"""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .. import logging as alog
from ..errors import ConfigError, MalformedSource, NameCollision, UnresolvedReference
from .paths import TypePath, last_segment, parse_type_path
from .types import TokenizedAbi

__all__ = ["AliasResolver", "NameTable", "py_ident", "RESERVED_NAMES"]

log = alog.get_logger(__name__)

# Names a generated module binds at top level besides the user types.
RESERVED_NAMES = frozenset(
    ("dataclass", "Any", "List", "Optional", "Sequence", "Tuple", "int", "bool", "bytes", "str")
)

_INVALID = re.compile(r"\W")


def py_ident(name: str, reserved: frozenset = frozenset()) -> str:
    """
    Sanitize `name` into a Python identifier.

    >>> py_ident("from"), py_ident("None"), py_ident("0x"), py_ident("a-b")
    ('from_', 'None_', '_0x', 'a_b')
    """
    out = _INVALID.sub("_", name) or "_"
    if out[0].isdigit():
        out = "_" + out
    if keyword.iskeyword(out) or out in reserved:
        out += "_"
    return out


def _cap(s: str) -> str:
    return s[:1].upper() + s[1:]


@dataclass(frozen=True)
class NameTable:
    contract_name: str
    reader_name: str
    names: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", MappingProxyType(dict(self.names)))

    def __contains__(self, path: object) -> bool:
        return path in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def name_of(self, path: str, entity: str) -> str:
        try:
            return self.names[path]
        except KeyError:
            raise UnresolvedReference(path, entity) from None


class AliasResolver:
    def __init__(self, aliases: Optional[Mapping[str, str]] = None, *, max_type_depth: int = 32):
        self.max_type_depth = max_type_depth
        self.aliases: Dict[str, str] = {}
        for raw, alias in (aliases or {}).items():
            try:
                key = parse_type_path(raw, max_depth=max_type_depth).text
            except MalformedSource as e:
                raise ConfigError("type alias key is not a valid type path", path=raw) from e
            if not isinstance(alias, str) or alias in RESERVED_NAMES or py_ident(alias) != alias:
                raise ConfigError(
                    "type alias is not usable as a generated identifier", path=raw, alias=alias
                )
            self.aliases[key] = alias

    def identifier(self, path: str) -> str:
        """Generated identifier for one canonical path (not collision-checked)."""
        tp = parse_type_path(path, max_depth=self.max_type_depth)
        return py_ident(self._raw_ident(tp), RESERVED_NAMES)

    def _raw_ident(self, tp: TypePath) -> str:
        alias = self.aliases.get(tp.text)
        if alias:
            return alias
        if tp.is_tuple:
            return "Tuple" + "".join(_cap(self._raw_ident(a)) for a in tp.args) if tp.args else "Unit"
        return last_segment(tp.base) + "".join(_cap(self._raw_ident(a)) for a in tp.args)

    def resolve(self, abi: TokenizedAbi, contract_name: str, reader_name: Optional[str] = None) -> NameTable:
        reader_name = reader_name or f"{contract_name}Reader"
        owners: Dict[str, str] = {
            contract_name: f"<contract {contract_name}>",
            reader_name: f"<reader {reader_name}>",
        }
        names: Dict[str, str] = {}
        for path in list(abi.structs) + list(abi.enums):
            ident = self.identifier(path)
            prev = owners.get(ident)
            if prev is not None:
                raise NameCollision(ident, [prev, path])
            owners[ident] = path
            names[path] = ident

        unused = sorted(set(self.aliases) - set(names))
        if unused:
            log.warning("type aliases match no declared type", extra={"aliases": unused})
        log.debug("resolved names", extra={"types": len(names), "aliased": len(self.aliases) - len(unused)})
        return NameTable(contract_name=contract_name, reader_name=reader_name, names=names)
