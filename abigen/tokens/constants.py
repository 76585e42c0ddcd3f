"""
Type category table for Cairo core-library paths.

Every type path met in an ABI is classified, in this fixed order, as:

  1. BASIC              scalar without substructure (felt252, uN/iN, bool, ...)
  2. ARRAY_SPAN         homogeneous sequence; a span is technically a struct but
                        binds exactly like an array
  3. GENERIC_BUILTIN    parametrized core container (Option, Result, NonZero,
                        BoundedInt)
  4. COMPOSITE_BUILTIN  core type with internal structure that is bound as a
                        primitive rather than a generated struct
  5. unclassified       anything else: a user-defined struct or enum

The table is immutable and built at import time; it is safe to share across
threads and concurrent generations.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

__all__ = [
    "UNIT_TYPE",
    "PATH_SEPARATOR",
    "TypeCategory",
    "CAIRO_CORE_BASIC",
    "CAIRO_CORE_SPAN_ARRAY",
    "CAIRO_GENERIC_BUILTINS",
    "CAIRO_COMPOSITE_BUILTINS",
    "GENERIC_ARITY",
    "CATEGORY_TABLE",
    "classify",
    "generic_arity",
    "strip_generic_args",
]

UNIT_TYPE = "()"
PATH_SEPARATOR = "::"


class TypeCategory(str, Enum):
    BASIC = "basic"
    ARRAY_SPAN = "array_span"
    GENERIC_BUILTIN = "generic_builtin"
    COMPOSITE_BUILTIN = "composite_builtin"


CAIRO_CORE_BASIC = frozenset(
    (
        "felt",
        "core::felt252",
        "core::bool",
        "core::integer::u8",
        "core::integer::u16",
        "core::integer::u32",
        "core::integer::u64",
        "core::integer::u128",
        "core::integer::usize",
        "core::integer::i8",
        "core::integer::i16",
        "core::integer::i32",
        "core::integer::i64",
        "core::integer::i128",
        "core::starknet::contract_address::ContractAddress",
        "core::starknet::class_hash::ClassHash",
        "core::bytes_31::bytes31",
    )
)

CAIRO_CORE_SPAN_ARRAY = frozenset(("core::array::Span", "core::array::Array"))

CAIRO_GENERIC_BUILTINS = frozenset(
    (
        "core::option::Option",
        "core::result::Result",
        "core::zeroable::NonZero",
        "core::internal::bounded_int::BoundedInt",
    )
)

CAIRO_COMPOSITE_BUILTINS = frozenset(
    (
        "core::byte_array::ByteArray",
        "core::starknet::eth_address::EthAddress",
        "core::integer::u256",
    )
)

# Expected number of generic arguments per parametrized base.
GENERIC_ARITY: Mapping[str, int] = MappingProxyType(
    {
        "core::array::Span": 1,
        "core::array::Array": 1,
        "core::option::Option": 1,
        "core::result::Result": 2,
        "core::zeroable::NonZero": 1,
        "core::internal::bounded_int::BoundedInt": 2,
    }
)

# Ordered: the first category claiming a path wins.
CATEGORY_TABLE = (
    (TypeCategory.BASIC, CAIRO_CORE_BASIC),
    (TypeCategory.ARRAY_SPAN, CAIRO_CORE_SPAN_ARRAY),
    (TypeCategory.GENERIC_BUILTIN, CAIRO_GENERIC_BUILTINS),
    (TypeCategory.COMPOSITE_BUILTIN, CAIRO_COMPOSITE_BUILTINS),
)


def strip_generic_args(path: str) -> str:
    """`core::array::Array::<core::felt252>` -> `core::array::Array`."""
    path = path.strip()
    idx = path.find("<")
    if idx < 0:
        return path
    base = path[:idx].rstrip()
    if base.endswith(PATH_SEPARATOR):
        base = base[: -len(PATH_SEPARATOR)]
    return base


def classify(path: str) -> Optional[TypeCategory]:
    """
    Return the category of a fully-qualified type path, or None when the path
    is not catalogued (user-defined struct/enum).

    Basic and composite entries are matched on the whole path; sequence and
    generic entries on the base path with generic arguments removed.
    """
    full = path.strip()
    base = strip_generic_args(full)
    for category, paths in CATEGORY_TABLE:
        if category in (TypeCategory.ARRAY_SPAN, TypeCategory.GENERIC_BUILTIN):
            if base in paths:
                return category
        elif full in paths:
            return category
    return None


def generic_arity(base: str) -> Optional[int]:
    return GENERIC_ARITY.get(base)
