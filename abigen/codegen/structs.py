"""Struct emitter: one @dataclass per Cairo struct, serde in field order."""

from __future__ import annotations

from typing import Dict, List

from ..errors import NameCollision
from ..tokens.aliases import py_ident
from ..tokens.types import Struct
from .types import TypeProjector

__all__ = ["emit_struct", "field_names", "MEMBER_RESERVED"]

# Attribute names a generated struct or enum already uses.
MEMBER_RESERVED = frozenset(
    ("self", "cls", "cairo_serialize", "cairo_deserialize", "match_event", "try_from_event")
)

_STRUCT_TMPL = '''

@dataclass
class {name}:
{fields}
    def cairo_serialize(self) -> List[int]:
        out: List[int] = []
{serialize}        return out

    @classmethod
    def cairo_deserialize(cls, felts: Sequence[int], offset: int = 0) -> Tuple[{name}, int]:
{deserialize}        return cls({args}), offset
'''


def field_names(struct: Struct, type_name: str) -> List[str]:
    """Python attribute name per field, in order; clashes raise NameCollision."""
    seen: Dict[str, str] = {}
    out = []
    for f in struct.fields:
        attr = py_ident(f.name, MEMBER_RESERVED)
        if attr in seen:
            raise NameCollision(f"{type_name}.{attr}", [f"{struct.type_path}.{seen[attr]}", f"{struct.type_path}.{f.name}"])
        seen[attr] = f.name
        out.append(attr)
    return out


def emit_struct(struct: Struct, proj: TypeProjector) -> str:
    entity = struct.type_path
    name = proj.names.name_of(entity, entity)
    attrs = field_names(struct, name)

    fields = "".join(
        f"    {attr}: {proj.annotation(f.token, entity)}\n" for attr, f in zip(attrs, struct.fields)
    )
    if fields:
        fields += "\n"
    serialize = "".join(
        f"        out += {proj.serde(f.token, entity)}.serialize(self.{attr})\n"
        for attr, f in zip(attrs, struct.fields)
    )
    deserialize = "".join(
        f"        _f{i}, offset = {proj.serde(f.token, entity)}.deserialize(felts, offset)\n"
        for i, f in enumerate(struct.fields)
    )
    args = ", ".join(f"_f{i}" for i in range(len(struct.fields)))
    return _STRUCT_TMPL.format(
        name=name,
        fields=fields,
        serialize=serialize,
        deserialize=deserialize,
        args=args,
    )
