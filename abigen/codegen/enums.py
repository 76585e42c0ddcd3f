"""
Enum emitter.

A Cairo enum becomes a base class plus one frozen dataclass per variant,
attached to the base as ``<Enum>.<Variant>``:

    class Direction:
        def cairo_serialize(self) -> List[int]: ...
        @classmethod
        def cairo_deserialize(cls, felts, offset=0) -> Tuple[Direction, int]: ...

    @dataclass(frozen=True)
    class _Direction_North(Direction):
        def cairo_serialize(self) -> List[int]:
            return [0]

    Direction.North = _Direction_North

Unit variants carry no field; payload variants carry ``value``. The variant
index is the wire discriminant.

Event enums additionally get ``try_from_event(keys, data)`` (raises
CairoSerdeError when nothing matches) and ``match_event(keys, data)``
(returns None instead). Per variant:

- struct payload: ``keys[0]`` is the variant selector; ``key`` members are
  read from ``keys[1:]`` and ``data`` members from ``data``;
- nested enum payload: selector checked, inner enum gets ``keys[1:]``;
- flat enum payload: inner enum gets the full key list;
- unit variant: selector only.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..errors import NameCollision, UnresolvedReference
from ..runtime.selectors import get_selector_from_name
from ..tokens.aliases import py_ident
from ..tokens.types import Enum, Struct, TokenizedAbi, UserType, Variant
from .structs import MEMBER_RESERVED
from .types import TypeProjector

__all__ = ["emit_enum", "variant_names"]

_VARIANT_RESERVED = MEMBER_RESERVED | {"Variant", "value"}

_BASE_TMPL = '''

class {name}:
    def cairo_serialize(self) -> List[int]:
        raise NotImplementedError

    @classmethod
    def cairo_deserialize(cls, felts: Sequence[int], offset: int = 0) -> Tuple[{name}, int]:
        index, offset = _serde.FELT.deserialize(felts, offset)
{branches}        raise _serde.CairoSerdeError(f"{name}: invalid variant index {{index}}")
'''

_EVENT_TMPL = '''
    @classmethod
    def try_from_event(cls, keys: Sequence[int], data: Sequence[int]) -> {name}:
        if not keys:
            raise _serde.CairoSerdeError("{name}: event has no keys")
{branches}        raise _serde.CairoSerdeError(f"{name}: no variant matches event selector {{keys[0]:#x}}")

    @classmethod
    def match_event(cls, keys: Sequence[int], data: Sequence[int]) -> Optional[{name}]:
        try:
            return cls.try_from_event(keys, data)
        except _serde.CairoSerdeError:
            return None
'''

_UNIT_VARIANT_TMPL = '''

@dataclass(frozen=True)
class {cls}({name}):
    def cairo_serialize(self) -> List[int]:
        return [{index}]
'''

_VALUE_VARIANT_TMPL = '''

@dataclass(frozen=True)
class {cls}({name}):
    value: {annotation}

    def cairo_serialize(self) -> List[int]:
        return [{index}, *{serde}.serialize(self.value)]
'''


def variant_names(enum: Enum, type_name: str) -> List[str]:
    seen: Dict[str, str] = {}
    out = []
    for v in enum.variants:
        attr = py_ident(v.name, _VARIANT_RESERVED)
        if attr in seen:
            raise NameCollision(f"{type_name}.{attr}", [f"{enum.type_path}.{seen[attr]}", f"{enum.type_path}.{v.name}"])
        seen[attr] = v.name
        out.append(attr)
    return out


def emit_enum(enum: Enum, proj: TypeProjector, abi: TokenizedAbi) -> str:
    entity = enum.type_path
    name = proj.names.name_of(entity, entity)
    attrs = variant_names(enum, name)

    branches = []
    for index, (attr, v) in enumerate(zip(attrs, enum.variants)):
        if v.token is None:
            branches.append(
                f"        if index == {index}:\n"
                f"            return cls.{attr}(), offset\n"
            )
        else:
            branches.append(
                f"        if index == {index}:\n"
                f"            value, offset = {proj.serde(v.token, entity)}.deserialize(felts, offset)\n"
                f"            return cls.{attr}(value), offset\n"
            )
    out = _BASE_TMPL.format(name=name, branches="".join(branches))

    if enum.is_event:
        out += _EVENT_TMPL.format(
            name=name,
            branches="".join(_event_branch(enum, v, attr, proj, abi) for attr, v in zip(attrs, enum.variants)),
        )

    for index, (attr, v) in enumerate(zip(attrs, enum.variants)):
        cls = f"_{name}_{attr}"
        if v.token is None:
            out += _UNIT_VARIANT_TMPL.format(cls=cls, name=name, index=index)
        else:
            out += _VALUE_VARIANT_TMPL.format(
                cls=cls,
                name=name,
                index=index,
                annotation=proj.annotation(v.token, entity),
                serde=proj.serde(v.token, entity),
            )
    out += "\n\n" + "".join(f"{name}.{attr} = _{name}_{attr}\n" for attr in attrs)
    return out


# ──────────────────────────────────────────────────────────────────────────────
# Event conversion
# ──────────────────────────────────────────────────────────────────────────────


def _event_payload(enum: Enum, v: Variant, abi: TokenizedAbi) -> Optional[object]:
    """The Struct/Enum a variant carries; None for unit variants."""
    if v.token is None:
        return None
    if not isinstance(v.token, UserType):
        raise UnresolvedReference(str(v.token), enum.type_path, variant=v.name)
    payload = abi.lookup(v.token.type_path)
    if payload is None:
        raise UnresolvedReference(v.token.type_path, enum.type_path, variant=v.name)
    return payload


def _event_branch(enum: Enum, v: Variant, attr: str, proj: TypeProjector, abi: TokenizedAbi) -> str:
    entity = enum.type_path
    payload = _event_payload(enum, v, abi)
    selector = f"{get_selector_from_name(v.name):#x}"

    if payload is None:
        return (
            f"        if keys[0] == {selector}:\n"
            f"            return cls.{attr}()\n"
        )

    inner = proj.names.name_of(payload.type_path, entity)
    if isinstance(payload, Enum):
        if v.kind == "flat" and payload.is_event:
            return (
                f"        inner = {inner}.match_event(keys, data)\n"
                f"        if inner is not None:\n"
                f"            return cls.{attr}(inner)\n"
            )
        return (
            f"        if keys[0] == {selector}:\n"
            f"            return cls.{attr}({_nested_enum(inner, payload)})\n"
        )

    return (
        f"        if keys[0] == {selector}:\n"
        f"{_struct_from_event(payload, proj, entity)}"
        f"            return cls.{attr}({inner}({', '.join(f'_f{i}' for i in range(len(payload.fields)))}))\n"
    )


def _nested_enum(inner: str, payload: Enum) -> str:
    if payload.is_event:
        return f"{inner}.try_from_event(keys[1:], data)"
    return f"_serde.Composite({inner}).decode(data)"


def _struct_from_event(payload: Struct, proj: TypeProjector, entity: str) -> str:
    lines = ["            k, d = 1, 0\n"]
    for i, f in enumerate(payload.fields):
        serde = proj.serde(f.token, entity)
        if f.kind == "key":
            lines.append(f"            _f{i}, k = {serde}.deserialize(keys, k)\n")
        else:
            lines.append(f"            _f{i}, d = {serde}.deserialize(data, d)\n")
    return "".join(lines)
