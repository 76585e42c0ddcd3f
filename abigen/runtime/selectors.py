"""
Entry-point and event selectors.

A selector is the Starknet keccak of the ASCII name: Keccak-256 (the original
Keccak padding, not NIST SHA3-256) truncated to its low 250 bits. The two
default entry points map to selector 0.
"""

from __future__ import annotations

from functools import lru_cache

from Crypto.Hash import keccak as _keccak

__all__ = ["MASK_250", "DEFAULT_ENTRY_POINTS", "keccak_256", "starknet_keccak", "get_selector_from_name"]

MASK_250 = (1 << 250) - 1
DEFAULT_ENTRY_POINTS = frozenset(("__default__", "__l1_default__"))


def keccak_256(data: bytes | bytearray | memoryview) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("keccak_256 expects bytes-like input")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def starknet_keccak(data: bytes) -> int:
    return int.from_bytes(keccak_256(data), "big") & MASK_250


@lru_cache(maxsize=1024)
def get_selector_from_name(name: str) -> int:
    """
    >>> hex(get_selector_from_name("transfer"))
    '0x83afd3f4caedc6eebf44246fe54e38c95e3179a5ec9ea81740eca5b482d12e'
    """
    if name in DEFAULT_ENTRY_POINTS:
        return 0
    return starknet_keccak(name.encode("ascii"))
