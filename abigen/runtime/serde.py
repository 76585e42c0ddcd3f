"""
Cairo serde for generated bindings.

Everything on the wire is a flat list of field elements (felts), integers in
``[0, FELT_PRIME)``. Each `Serde` maps one Python value to a run of felts and
back:

- felt252, ContractAddress, ClassHash   1 felt
- uN / usize / bytes31 / EthAddress     1 felt, range checked
- iN                                    1 felt, negatives as ``P - |v|``
- bool                                  1 felt, 0 or 1
- u256                                  2 felts ``[low, high]`` (128-bit limbs)
- ByteArray                             ``[n_words, word_0..word_n-1, pending, pending_len]``
                                        with 31-byte big-endian words
- Array / Span                          ``[len, item...]``
- Option                                Some ``[0, value...]`` / None ``[1]``
- Result                                Ok ``[0, value...]`` / Err ``[1, error...]``
- tuples and structs                    members concatenated in order
- enums                                 ``[variant_index, payload...]``

`deserialize(felts, offset)` returns ``(value, next_offset)`` so composite
decoders can chain calls; `decode(felts)` additionally insists the whole
buffer is consumed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar, Union

__all__ = [
    "FELT_PRIME",
    "CairoSerdeError",
    "Serde",
    "FeltSerde",
    "BoolSerde",
    "U256Serde",
    "ByteArraySerde",
    "ArraySerde",
    "TupleSerde",
    "OptionSerde",
    "ResultSerde",
    "NonZeroSerde",
    "BoundedIntSerde",
    "Composite",
    "Ok",
    "Err",
    "Result",
    "UNIT",
    "FELT",
    "BOOL",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "USIZE",
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "CONTRACT_ADDRESS",
    "CLASS_HASH",
    "BYTES31",
    "U256",
    "BYTE_ARRAY",
    "ETH_ADDRESS",
    "to_felt",
    "from_felt",
]

FELT_PRIME = 2**251 + 17 * 2**192 + 1

T = TypeVar("T")
E = TypeVar("E")


class CairoSerdeError(ValueError):
    """Value cannot be encoded, or a felt buffer cannot be decoded."""


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s, 16) if s.lower().startswith("0x") else int(s, 10)
        except ValueError:
            pass
    raise CairoSerdeError(f"{what}: expected an integer, got {value!r}")


def to_felt(value: int) -> int:
    """Signed Python int -> felt (negatives wrap around the prime)."""
    if not -FELT_PRIME < value < FELT_PRIME:
        raise CairoSerdeError(f"{value} does not fit in a felt")
    return value % FELT_PRIME


def from_felt(felt: int) -> int:
    """Felt -> signed Python int, values above P/2 read as negative."""
    return felt - FELT_PRIME if felt > FELT_PRIME // 2 else felt


def _take(felts: Sequence[int], offset: int, what: str) -> int:
    if offset >= len(felts):
        raise CairoSerdeError(f"{what}: buffer exhausted at offset {offset}")
    v = felts[offset]
    if not isinstance(v, int) or not 0 <= v < FELT_PRIME:
        raise CairoSerdeError(f"{what}: invalid felt {v!r} at offset {offset}")
    return v


# ──────────────────────────────────────────────────────────────────────────────
# Base
# ──────────────────────────────────────────────────────────────────────────────


class Serde(Generic[T]):
    name = "serde"

    def serialize(self, value: T) -> List[int]:
        raise NotImplementedError

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[T, int]:
        raise NotImplementedError

    def decode(self, felts: Sequence[int]) -> T:
        value, end = self.deserialize(felts, 0)
        if end != len(felts):
            raise CairoSerdeError(
                f"{self.name}: {len(felts) - end} trailing felt(s) after decoding"
            )
        return value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class _UnitSerde(Serde[None]):
    name = "()"

    def serialize(self, value: None) -> List[int]:
        if value not in (None, ()):
            raise CairoSerdeError(f"(): expected None, got {value!r}")
        return []

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[None, int]:
        return None, offset


# ──────────────────────────────────────────────────────────────────────────────
# Scalars
# ──────────────────────────────────────────────────────────────────────────────


class FeltSerde(Serde[int]):
    """
    Single-felt integer with an inclusive-exclusive range ``[lo, hi)``.
    Signed ranges (lo < 0) store negatives as ``P - |v|``.
    """

    def __init__(self, name: str, lo: int = 0, hi: int = FELT_PRIME):
        self.name = name
        self.lo = lo
        self.hi = hi

    def _check(self, v: int) -> int:
        if not self.lo <= v < self.hi:
            raise CairoSerdeError(f"{self.name}: {v} out of range [{self.lo}, {self.hi})")
        return v

    def serialize(self, value: Any) -> List[int]:
        v = self._check(_as_int(value, self.name))
        return [to_felt(v) if v < 0 else v]

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[int, int]:
        raw = _take(felts, offset, self.name)
        v = from_felt(raw) if self.lo < 0 else raw
        return self._check(v), offset + 1


class BoolSerde(Serde[bool]):
    name = "bool"

    def serialize(self, value: bool) -> List[int]:
        if not isinstance(value, bool):
            raise CairoSerdeError(f"bool: expected True/False, got {value!r}")
        return [1 if value else 0]

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[bool, int]:
        v = _take(felts, offset, self.name)
        if v not in (0, 1):
            raise CairoSerdeError(f"bool: invalid value {v}")
        return v == 1, offset + 1


class U256Serde(Serde[int]):
    name = "u256"
    _MASK = (1 << 128) - 1

    def serialize(self, value: Any) -> List[int]:
        v = _as_int(value, self.name)
        if not 0 <= v < 1 << 256:
            raise CairoSerdeError(f"u256: {v} out of range")
        return [v & self._MASK, v >> 128]

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[int, int]:
        low = _take(felts, offset, "u256.low")
        high = _take(felts, offset + 1, "u256.high")
        if low > self._MASK or high > self._MASK:
            raise CairoSerdeError("u256: limb exceeds 128 bits")
        return (high << 128) | low, offset + 2


class ByteArraySerde(Serde[bytes]):
    name = "ByteArray"
    WORD = 31

    def serialize(self, value: Union[bytes, str]) -> List[int]:
        if isinstance(value, str):
            value = value.encode("utf-8")
        if not isinstance(value, (bytes, bytearray)):
            raise CairoSerdeError(f"ByteArray: expected bytes or str, got {value!r}")
        data = bytes(value)
        n_full = len(data) // self.WORD
        words = [
            int.from_bytes(data[i * self.WORD : (i + 1) * self.WORD], "big") for i in range(n_full)
        ]
        pending = data[n_full * self.WORD :]
        return [n_full, *words, int.from_bytes(pending, "big"), len(pending)]

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[bytes, int]:
        n_full = _take(felts, offset, "ByteArray.len")
        pos = offset + 1
        out = bytearray()
        for _ in range(n_full):
            word = _take(felts, pos, "ByteArray.word")
            if word >> (8 * self.WORD):
                raise CairoSerdeError("ByteArray: word exceeds 31 bytes")
            out += word.to_bytes(self.WORD, "big")
            pos += 1
        pending = _take(felts, pos, "ByteArray.pending_word")
        pending_len = _take(felts, pos + 1, "ByteArray.pending_word_len")
        if pending_len >= self.WORD or pending >> (8 * pending_len):
            raise CairoSerdeError("ByteArray: invalid pending word")
        out += pending.to_bytes(pending_len, "big")
        return bytes(out), pos + 2


# ──────────────────────────────────────────────────────────────────────────────
# Combinators
# ──────────────────────────────────────────────────────────────────────────────


class ArraySerde(Serde[List[T]]):
    def __init__(self, inner: Serde[T]):
        self.inner = inner
        self.name = f"Array<{inner.name}>"

    def serialize(self, value: Sequence[T]) -> List[int]:
        if not isinstance(value, (list, tuple)):
            raise CairoSerdeError(f"{self.name}: expected a sequence, got {value!r}")
        out = [len(value)]
        for item in value:
            out += self.inner.serialize(item)
        return out

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[List[T], int]:
        n = _take(felts, offset, self.name)
        pos = offset + 1
        items = []
        for _ in range(n):
            item, pos = self.inner.deserialize(felts, pos)
            items.append(item)
        return items, pos


class TupleSerde(Serde[tuple]):
    def __init__(self, *inners: Serde[Any]):
        self.inners = inners
        self.name = "(" + ", ".join(i.name for i in inners) + ")"

    def serialize(self, value: Sequence[Any]) -> List[int]:
        if not isinstance(value, (tuple, list)) or len(value) != len(self.inners):
            raise CairoSerdeError(f"{self.name}: expected a {len(self.inners)}-tuple, got {value!r}")
        out: List[int] = []
        for serde, item in zip(self.inners, value):
            out += serde.serialize(item)
        return out

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[tuple, int]:
        items = []
        for serde in self.inners:
            item, offset = serde.deserialize(felts, offset)
            items.append(item)
        return tuple(items), offset


class OptionSerde(Serde[Optional[T]]):
    def __init__(self, inner: Serde[T]):
        self.inner = inner
        self.name = f"Option<{inner.name}>"

    def serialize(self, value: Optional[T]) -> List[int]:
        if value is None:
            return [1]
        return [0, *self.inner.serialize(value)]

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[Optional[T], int]:
        tag = _take(felts, offset, self.name)
        if tag == 1:
            return None, offset + 1
        if tag != 0:
            raise CairoSerdeError(f"{self.name}: invalid variant index {tag}")
        return self.inner.deserialize(felts, offset + 1)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]


class ResultSerde(Serde[Any]):
    def __init__(self, ok: Serde[T], err: Serde[E]):
        self.ok = ok
        self.err = err
        self.name = f"Result<{ok.name}, {err.name}>"

    def serialize(self, value: Any) -> List[int]:
        if isinstance(value, Ok):
            return [0, *self.ok.serialize(value.value)]
        if isinstance(value, Err):
            return [1, *self.err.serialize(value.error)]
        raise CairoSerdeError(f"{self.name}: expected Ok(...) or Err(...), got {value!r}")

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[Any, int]:
        tag = _take(felts, offset, self.name)
        if tag == 0:
            v, pos = self.ok.deserialize(felts, offset + 1)
            return Ok(v), pos
        if tag == 1:
            e, pos = self.err.deserialize(felts, offset + 1)
            return Err(e), pos
        raise CairoSerdeError(f"{self.name}: invalid variant index {tag}")


class NonZeroSerde(Serde[T]):
    def __init__(self, inner: Serde[T]):
        self.inner = inner
        self.name = f"NonZero<{inner.name}>"

    def serialize(self, value: T) -> List[int]:
        out = self.inner.serialize(value)
        if not any(out):
            raise CairoSerdeError(f"{self.name}: value must not be zero")
        return out

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[T, int]:
        value, end = self.inner.deserialize(felts, offset)
        if not any(felts[offset:end]):
            raise CairoSerdeError(f"{self.name}: decoded zero")
        return value, end


class BoundedIntSerde(FeltSerde):
    """``BoundedInt<lo, hi>``: inclusive bounds, one felt."""

    def __init__(self, lo: int, hi: int):
        if lo > hi:
            raise CairoSerdeError(f"BoundedInt: empty range [{lo}, {hi}]")
        super().__init__(f"BoundedInt<{lo}, {hi}>", lo, hi + 1)


class Composite(Serde[Any]):
    """Adapter for generated structs/enums exposing cairo_serialize/cairo_deserialize."""

    def __init__(self, cls: Type[Any]):
        self.cls = cls
        self.name = cls.__name__

    def serialize(self, value: Any) -> List[int]:
        if not isinstance(value, self.cls):
            raise CairoSerdeError(f"{self.name}: expected {self.name}, got {value!r}")
        return value.cairo_serialize()

    def deserialize(self, felts: Sequence[int], offset: int = 0) -> Tuple[Any, int]:
        return self.cls.cairo_deserialize(felts, offset)


# ──────────────────────────────────────────────────────────────────────────────
# Instances
# ──────────────────────────────────────────────────────────────────────────────

UNIT = _UnitSerde()
FELT = FeltSerde("felt252")
BOOL = BoolSerde()
U8 = FeltSerde("u8", 0, 1 << 8)
U16 = FeltSerde("u16", 0, 1 << 16)
U32 = FeltSerde("u32", 0, 1 << 32)
U64 = FeltSerde("u64", 0, 1 << 64)
U128 = FeltSerde("u128", 0, 1 << 128)
USIZE = FeltSerde("usize", 0, 1 << 32)
I8 = FeltSerde("i8", -(1 << 7), 1 << 7)
I16 = FeltSerde("i16", -(1 << 15), 1 << 15)
I32 = FeltSerde("i32", -(1 << 31), 1 << 31)
I64 = FeltSerde("i64", -(1 << 63), 1 << 63)
I128 = FeltSerde("i128", -(1 << 127), 1 << 127)
CONTRACT_ADDRESS = FeltSerde("ContractAddress")
CLASS_HASH = FeltSerde("ClassHash")
BYTES31 = FeltSerde("bytes31", 0, 1 << 248)
ETH_ADDRESS = FeltSerde("EthAddress", 0, 1 << 160)
U256 = U256Serde()
BYTE_ARRAY = ByteArraySerde()
