"""
Textual Cairo type paths.

ABI entries spell types as strings such as

    core::felt252
    core::array::Span::<core::integer::u8>
    core::result::Result::<(core::felt252, pkg::Point), core::felt252>
    core::internal::bounded_int::BoundedInt::<0, 255>
    ()

`parse_type_path` turns such a string into a small syntax tree (`TypePath`)
with the base path and the ordered generic arguments. Whitespace is not
significant; `TypePath.text` is the canonical spelling used as the lookup key
for user-defined structs/enums, so declarations and references always agree.

A leading `@` (snapshot) is dropped. Nesting is bounded by `max_depth`, which
is itself capped at `MAX_TYPE_DEPTH`; a deeper (or unbalanced) path is
rejected with MalformedSource instead of recursing without limit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..config import MAX_TYPE_DEPTH
from ..errors import MalformedSource
from .constants import PATH_SEPARATOR

__all__ = ["TypePath", "parse_type_path", "canonical_path", "last_segment"]

_DELIMS = "<>(),"


@dataclass(frozen=True)
class TypePath:
    base: str
    args: Tuple["TypePath", ...] = ()
    is_tuple: bool = False

    @property
    def text(self) -> str:
        if self.is_tuple:
            if len(self.args) == 1:
                return f"({self.args[0].text},)"
            return "(" + ", ".join(a.text for a in self.args) + ")"
        if not self.args:
            return self.base
        return f"{self.base}{PATH_SEPARATOR}<" + ", ".join(a.text for a in self.args) + ">"

    @property
    def is_unit(self) -> bool:
        return self.is_tuple and not self.args

    def __str__(self) -> str:
        return self.text


class _Reader:
    def __init__(self, source: str, max_depth: int):
        self.src = source
        self.pos = 0
        self.max_depth = max_depth

    def error(self, reason: str) -> MalformedSource:
        return MalformedSource(
            f"invalid type path: {reason}", type_path=self.src, position=self.pos
        )

    def skip_ws(self) -> None:
        while self.pos < len(self.src) and self.src[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        self.skip_ws()
        return self.src[self.pos] if self.pos < len(self.src) else ""

    def expect(self, ch: str) -> None:
        if self.peek() != ch:
            raise self.error(f"expected {ch!r}")
        self.pos += 1

    def parse(self, depth: int) -> TypePath:
        if depth > self.max_depth:
            raise self.error(f"generic nesting deeper than {self.max_depth}")
        if self.peek() == "@":
            # snapshot marker: same wire layout as the plain type
            self.pos += 1
        if self.peek() == "(":
            self.pos += 1
            elems = self.parse_list(")", depth)
            return TypePath(base="", args=elems, is_tuple=True)

        start = self.pos
        while self.pos < len(self.src) and self.src[self.pos] not in _DELIMS:
            self.pos += 1
        base = "".join(self.src[start : self.pos].split())
        if base.endswith(PATH_SEPARATOR):
            base = base[: -len(PATH_SEPARATOR)]
        if not base:
            raise self.error("empty path segment")

        if self.peek() == "<":
            self.pos += 1
            args = self.parse_list(">", depth)
            if not args:
                raise self.error("empty generic argument list")
            return TypePath(base=base, args=args)
        return TypePath(base=base)

    def parse_list(self, close: str, depth: int) -> Tuple[TypePath, ...]:
        items = []
        if self.peek() == close:
            self.pos += 1
            return ()
        while True:
            items.append(self.parse(depth + 1))
            nxt = self.peek()
            if nxt == ",":
                self.pos += 1
                if self.peek() == close:
                    self.pos += 1
                    return tuple(items)
                continue
            if nxt == close:
                self.pos += 1
                return tuple(items)
            raise self.error(f"expected ',' or {close!r}")


def parse_type_path(text: str, *, max_depth: int = 32) -> TypePath:
    if not isinstance(text, str) or not text.strip():
        raise MalformedSource("type path must be a non-empty string", type_path=text)
    reader = _Reader(text, min(max_depth, MAX_TYPE_DEPTH))
    tp = reader.parse(0)
    if reader.peek():
        raise reader.error("trailing characters")
    return tp


def canonical_path(text: str, *, max_depth: int = 32) -> str:
    return parse_type_path(text, max_depth=max_depth).text


def last_segment(path: str) -> str:
    """`pkg::module::Point` -> `Point` (generic arguments are ignored)."""
    base = path.split("<", 1)[0].rstrip(":").strip()
    return base.rsplit(PATH_SEPARATOR, 1)[-1]
