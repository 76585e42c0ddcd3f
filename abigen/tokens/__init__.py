"""
abigen.tokens: ABI tokenization and type resolution.

    constants  immutable category table for core-library paths
    paths      textual type-path parser
    types      token model and TokenizedAbi
    parser     raw ABI text -> TokenizedAbi
    aliases    path -> generated identifier (NameTable)
"""

from .aliases import AliasResolver, NameTable, py_ident
from .constants import TypeCategory, classify, generic_arity
from .parser import AbiParser, load_entries, tokens_from_abi_string
from .paths import TypePath, canonical_path, parse_type_path
from .types import (
    Array,
    CompositeBuiltin,
    CoreBasic,
    Enum,
    Field,
    Function,
    GenericBuiltin,
    Param,
    StateMutability,
    Struct,
    TokenizedAbi,
    Tuple,
    TypeToken,
    UserType,
    Variant,
)

__all__ = [
    "AbiParser",
    "AliasResolver",
    "NameTable",
    "TypeCategory",
    "TypePath",
    "TokenizedAbi",
    "Array",
    "CompositeBuiltin",
    "CoreBasic",
    "Enum",
    "Field",
    "Function",
    "GenericBuiltin",
    "Param",
    "StateMutability",
    "Struct",
    "Tuple",
    "TypeToken",
    "UserType",
    "Variant",
    "canonical_path",
    "classify",
    "generic_arity",
    "load_entries",
    "parse_type_path",
    "py_ident",
    "tokens_from_abi_string",
]
