"""
Type tokens: the closed, validated model produced by the ABI tokenizer.

A token is one of the frozen dataclasses below. Leaf tokens (`CoreBasic`,
`CompositeBuiltin`) and structural tokens (`Array`, `GenericBuiltin`, `Tuple`)
describe core-library types; `UserType` is a *reference* to a `Struct` or
`Enum` held by the enclosing `TokenizedAbi`, keyed by canonical path.

Consumers dispatch over `TYPE_TOKENS` with isinstance checks and must raise
on anything else (see `abigen.codegen.types`), so adding a token kind forces
every projection to be revisited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum as _PyEnum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple as _Tuple, Union

__all__ = [
    "CoreBasic",
    "Array",
    "GenericBuiltin",
    "CompositeBuiltin",
    "Tuple",
    "UserType",
    "TypeToken",
    "TYPE_TOKENS",
    "Field",
    "Variant",
    "Struct",
    "Enum",
    "Param",
    "Function",
    "StateMutability",
    "TokenizedAbi",
    "iter_user_refs",
    "token_to_dict",
]


# ──────────────────────────────────────────────────────────────────────────────
# Type tokens
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CoreBasic:
    """Scalar core type. Also carries the integer-literal bounds of BoundedInt."""

    type_path: str


@dataclass(frozen=True)
class Array:
    type_path: str
    inner: "TypeToken"
    is_span: bool = False


@dataclass(frozen=True)
class GenericBuiltin:
    type_path: str  # base path, generic arguments stripped
    args: _Tuple["TypeToken", ...]


@dataclass(frozen=True)
class CompositeBuiltin:
    type_path: str


@dataclass(frozen=True)
class Tuple:
    inners: _Tuple["TypeToken", ...] = ()

    @property
    def is_unit(self) -> bool:
        return not self.inners


@dataclass(frozen=True)
class UserType:
    type_path: str


TypeToken = Union[CoreBasic, Array, GenericBuiltin, CompositeBuiltin, Tuple, UserType]
TYPE_TOKENS = (CoreBasic, Array, GenericBuiltin, CompositeBuiltin, Tuple, UserType)


# ──────────────────────────────────────────────────────────────────────────────
# Declarations
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Field:
    name: str
    token: TypeToken
    kind: Optional[str] = None  # events: "key" | "data"


@dataclass(frozen=True)
class Variant:
    name: str
    token: Optional[TypeToken]  # None for unit variants
    kind: Optional[str] = None  # events: "nested" | "flat"


@dataclass(frozen=True)
class Struct:
    type_path: str
    fields: _Tuple[Field, ...]
    is_event: bool = False

    def same_shape(self, other: "Struct") -> bool:
        return [(f.name, f.token) for f in self.fields] == [
            (f.name, f.token) for f in other.fields
        ]


@dataclass(frozen=True)
class Enum:
    type_path: str
    variants: _Tuple[Variant, ...]
    is_event: bool = False

    def same_shape(self, other: "Enum") -> bool:
        return [(v.name, v.token) for v in self.variants] == [
            (v.name, v.token) for v in other.variants
        ]


class StateMutability(str, _PyEnum):
    VIEW = "view"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Param:
    name: str
    token: TypeToken


@dataclass(frozen=True)
class Function:
    name: str
    state_mutability: StateMutability
    inputs: _Tuple[Param, ...] = ()
    outputs: _Tuple[TypeToken, ...] = ()

    @property
    def is_view(self) -> bool:
        return self.state_mutability is StateMutability.VIEW


@dataclass(frozen=True)
class TokenizedAbi:
    """
    Parser output. Structs and enums are keyed by canonical path and keep
    declaration order; functions keep ABI order.
    """

    structs: Mapping[str, Struct] = field(default_factory=dict)
    enums: Mapping[str, Enum] = field(default_factory=dict)
    functions: _Tuple[Function, ...] = ()
    interfaces: Mapping[str, _Tuple[Function, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "structs", MappingProxyType(dict(self.structs)))
        object.__setattr__(self, "enums", MappingProxyType(dict(self.enums)))
        object.__setattr__(self, "functions", tuple(self.functions))
        object.__setattr__(
            self,
            "interfaces",
            MappingProxyType({k: tuple(v) for k, v in self.interfaces.items()}),
        )

    def lookup(self, path: str) -> Optional[Union[Struct, Enum]]:
        return self.structs.get(path) or self.enums.get(path)

    def all_functions(self) -> List[Function]:
        """Top-level functions followed by every interface's functions, flattened."""
        out = list(self.functions)
        for funcs in self.interfaces.values():
            out.extend(funcs)
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "structs": [
                {
                    "path": s.type_path,
                    "event": s.is_event,
                    "fields": [
                        {"name": f.name, "type": token_to_dict(f.token), "kind": f.kind}
                        for f in s.fields
                    ],
                }
                for s in self.structs.values()
            ],
            "enums": [
                {
                    "path": e.type_path,
                    "event": e.is_event,
                    "variants": [
                        {
                            "name": v.name,
                            "type": token_to_dict(v.token) if v.token is not None else None,
                            "kind": v.kind,
                        }
                        for v in e.variants
                    ],
                }
                for e in self.enums.values()
            ],
            "functions": [_function_to_dict(f) for f in self.functions],
            "interfaces": {
                name: [_function_to_dict(f) for f in funcs]
                for name, funcs in self.interfaces.items()
            },
        }


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────


def iter_user_refs(token: TypeToken) -> Iterator[str]:
    """Yield every user-defined path referenced by `token`, depth first."""
    stack: List[TypeToken] = [token]
    while stack:
        t = stack.pop()
        if isinstance(t, UserType):
            yield t.type_path
        elif isinstance(t, Array):
            stack.append(t.inner)
        elif isinstance(t, GenericBuiltin):
            stack.extend(reversed(t.args))
        elif isinstance(t, Tuple):
            stack.extend(reversed(t.inners))


def token_to_dict(token: TypeToken) -> Dict[str, Any]:
    if isinstance(token, CoreBasic):
        return {"kind": "basic", "path": token.type_path}
    if isinstance(token, CompositeBuiltin):
        return {"kind": "composite_builtin", "path": token.type_path}
    if isinstance(token, UserType):
        return {"kind": "user", "path": token.type_path}
    if isinstance(token, Array):
        return {
            "kind": "span" if token.is_span else "array",
            "path": token.type_path,
            "inner": token_to_dict(token.inner),
        }
    if isinstance(token, GenericBuiltin):
        return {
            "kind": "generic_builtin",
            "path": token.type_path,
            "args": [token_to_dict(a) for a in token.args],
        }
    if isinstance(token, Tuple):
        return {"kind": "tuple", "inners": [token_to_dict(t) for t in token.inners]}
    raise TypeError(f"unknown type token: {token!r}")


def _function_to_dict(f: Function) -> Dict[str, Any]:
    return {
        "name": f.name,
        "state_mutability": f.state_mutability.value,
        "inputs": [{"name": p.name, "type": token_to_dict(p.token)} for p in f.inputs],
        "outputs": [token_to_dict(t) for t in f.outputs],
    }
