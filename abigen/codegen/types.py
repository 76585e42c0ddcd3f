"""
Type projection: token -> Python annotation text and serde expression text.

Both projections recurse over the token tree, so generic arguments nest to
any depth the tokenizer accepted. Dispatch is an isinstance chain over
`TYPE_TOKENS`; anything else is rejected with MalformedSource rather than
guessed at.

    core::integer::u32                        int                 _serde.U32
    core::bool                                bool                _serde.BOOL
    core::integer::u256                       int                 _serde.U256
    core::byte_array::ByteArray               bytes               _serde.BYTE_ARRAY
    core::array::Span::<T>                    List[T]             _serde.ArraySerde(T)
    core::option::Option::<T>                 Optional[T]         _serde.OptionSerde(T)
    core::result::Result::<T, E>              _serde.Result[T, E] _serde.ResultSerde(T, E)
    core::zeroable::NonZero::<T>              T                   _serde.NonZeroSerde(T)
    core::internal::bounded_int::BoundedInt   int                 _serde.BoundedIntSerde(lo, hi)
    (A, B)                                    Tuple[A, B]         _serde.TupleSerde(A, B)
    ()                                        None                _serde.UNIT
    pkg::Point                                Point               _serde.Composite(Point)
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence

from ..errors import MalformedSource
from ..tokens.aliases import NameTable
from ..tokens.types import (
    Array,
    CompositeBuiltin,
    CoreBasic,
    GenericBuiltin,
    Tuple,
    TypeToken,
    UserType,
)

__all__ = ["SCALAR_SERDES", "SCALAR_ANNOTATIONS", "TypeProjector", "path_for_serde"]

# path -> name of the serde instance in abigen.runtime.serde
SCALAR_SERDES: Mapping[str, str] = MappingProxyType(
    {
        "core::felt252": "FELT",
        "felt": "FELT",
        "core::bool": "BOOL",
        "core::integer::u8": "U8",
        "core::integer::u16": "U16",
        "core::integer::u32": "U32",
        "core::integer::u64": "U64",
        "core::integer::u128": "U128",
        "core::integer::usize": "USIZE",
        "core::integer::i8": "I8",
        "core::integer::i16": "I16",
        "core::integer::i32": "I32",
        "core::integer::i64": "I64",
        "core::integer::i128": "I128",
        "core::starknet::contract_address::ContractAddress": "CONTRACT_ADDRESS",
        "core::starknet::class_hash::ClassHash": "CLASS_HASH",
        "core::bytes_31::bytes31": "BYTES31",
        "core::integer::u256": "U256",
        "core::byte_array::ByteArray": "BYTE_ARRAY",
        "core::starknet::eth_address::EthAddress": "ETH_ADDRESS",
    }
)

SCALAR_ANNOTATIONS: Mapping[str, str] = MappingProxyType(
    {"core::bool": "bool", "core::byte_array::ByteArray": "bytes"}
)

_REVERSE: Dict[str, str] = {}
for _path, _name in SCALAR_SERDES.items():
    _REVERSE.setdefault(_name, _path)

_OPTION = "core::option::Option"
_RESULT = "core::result::Result"
_NON_ZERO = "core::zeroable::NonZero"
_BOUNDED_INT = "core::internal::bounded_int::BoundedInt"


def path_for_serde(name: str) -> Optional[str]:
    """`U32` -> `core::integer::u32`; None for combinators and unknown names."""
    return _REVERSE.get(name)


def _literal_int(text: str) -> int:
    neg = text.startswith("-")
    body = text[1:] if neg else text
    v = int(body, 16) if body.lower().startswith("0x") else int(body, 10)
    return -v if neg else v


class TypeProjector:
    def __init__(self, names: NameTable):
        self.names = names

    # -- annotations ----------------------------------------------------------

    def annotation(self, token: Optional[TypeToken], entity: str) -> str:
        if token is None:
            return "None"
        if isinstance(token, (CoreBasic, CompositeBuiltin)):
            self._scalar(token, entity)
            return SCALAR_ANNOTATIONS.get(token.type_path, "int")
        if isinstance(token, Array):
            return f"List[{self.annotation(token.inner, entity)}]"
        if isinstance(token, GenericBuiltin):
            if token.type_path == _BOUNDED_INT:
                return "int"
            args = [self.annotation(a, entity) for a in token.args]
            if token.type_path == _OPTION:
                return f"Optional[{args[0]}]"
            if token.type_path == _RESULT:
                return f"_serde.Result[{args[0]}, {args[1]}]"
            if token.type_path == _NON_ZERO:
                return args[0]
            raise self._unknown(token, entity)
        if isinstance(token, Tuple):
            if token.is_unit:
                return "None"
            return "Tuple[" + ", ".join(self.annotation(t, entity) for t in token.inners) + "]"
        if isinstance(token, UserType):
            return self.names.name_of(token.type_path, entity)
        raise self._unknown(token, entity)

    def outputs_annotation(self, outputs: Sequence[TypeToken], entity: str) -> str:
        if not outputs:
            return "None"
        if len(outputs) == 1:
            return self.annotation(outputs[0], entity)
        return "Tuple[" + ", ".join(self.annotation(t, entity) for t in outputs) + "]"

    # -- serde expressions ----------------------------------------------------

    def serde(self, token: Optional[TypeToken], entity: str) -> str:
        if token is None:
            return "_serde.UNIT"
        if isinstance(token, (CoreBasic, CompositeBuiltin)):
            return f"_serde.{self._scalar(token, entity)}"
        if isinstance(token, Array):
            return f"_serde.ArraySerde({self.serde(token.inner, entity)})"
        if isinstance(token, GenericBuiltin):
            if token.type_path == _BOUNDED_INT:
                lo, hi = (_literal_int(a.type_path) for a in token.args)
                return f"_serde.BoundedIntSerde({lo}, {hi})"
            args = ", ".join(self.serde(a, entity) for a in token.args)
            if token.type_path == _OPTION:
                return f"_serde.OptionSerde({args})"
            if token.type_path == _RESULT:
                return f"_serde.ResultSerde({args})"
            if token.type_path == _NON_ZERO:
                return f"_serde.NonZeroSerde({args})"
            raise self._unknown(token, entity)
        if isinstance(token, Tuple):
            if token.is_unit:
                return "_serde.UNIT"
            return "_serde.TupleSerde(" + ", ".join(self.serde(t, entity) for t in token.inners) + ")"
        if isinstance(token, UserType):
            return f"_serde.Composite({self.names.name_of(token.type_path, entity)})"
        raise self._unknown(token, entity)

    def outputs_serde(self, outputs: Sequence[TypeToken], entity: str) -> str:
        if not outputs:
            return "_serde.UNIT"
        if len(outputs) == 1:
            return self.serde(outputs[0], entity)
        return "_serde.TupleSerde(" + ", ".join(self.serde(t, entity) for t in outputs) + ")"

    # -- helpers --------------------------------------------------------------

    def _scalar(self, token: TypeToken, entity: str) -> str:
        name = SCALAR_SERDES.get(token.type_path)
        if name is None:
            raise self._unknown(token, entity)
        return name

    @staticmethod
    def _unknown(token: object, entity: str) -> MalformedSource:
        return MalformedSource(
            "type token has no Python projection",
            token=repr(token),
            entity=entity,
        )
