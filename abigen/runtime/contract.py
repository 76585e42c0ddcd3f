"""
Call surfaces used by generated contract classes.

Generated code never talks to a network itself. A contract class wraps an
*account* (anything satisfying `ConnectedAccount`) and a reader class wraps a
*provider* (anything satisfying `Provider`); both are injected by the caller.

- view functions return a `ViewCall[T]`; ``.call()`` asks the provider and
  decodes the returned felts into T. No transaction is built.
- external functions return an `ExecutionV1` (legacy ``max_fee``) or an
  `ExecutionV3` (L1 resource bounds) wrapping a single `Call`; ``.send()``
  hands it to the account.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, Protocol, Sequence, TypeVar, Union

from . import serde as _serde

__all__ = [
    "BlockId",
    "Call",
    "ResourceBounds",
    "Provider",
    "ConnectedAccount",
    "A",
    "P",
    "ContractBase",
    "ReaderBase",
    "ViewCall",
    "ExecutionV1",
    "ExecutionV3",
]

BlockId = Union[int, str]
DEFAULT_BLOCK_ID: BlockId = "pending"

T = TypeVar("T")


@dataclass(frozen=True)
class Call:
    to: int
    selector: int
    calldata: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class ResourceBounds:
    max_amount: int
    max_price_per_unit: int


class Provider(Protocol):
    def call(self, call: Call, block_id: BlockId = DEFAULT_BLOCK_ID) -> List[int]: ...


class ConnectedAccount(Protocol):
    @property
    def provider(self) -> Provider: ...

    def execute_v1(
        self, calls: Sequence[Call], *, max_fee: Optional[int] = None, nonce: Optional[int] = None
    ) -> Any: ...

    def execute_v3(
        self,
        calls: Sequence[Call],
        *,
        l1_resource_bounds: Optional[ResourceBounds] = None,
        nonce: Optional[int] = None,
    ) -> Any: ...

    def estimate_fee_v1(self, calls: Sequence[Call], *, nonce: Optional[int] = None) -> Any: ...

    def estimate_fee_v3(self, calls: Sequence[Call], *, nonce: Optional[int] = None) -> Any: ...


A = TypeVar("A", bound=ConnectedAccount)
P = TypeVar("P", bound=Provider)


def _address(value: Any) -> int:
    return _serde.CONTRACT_ADDRESS.serialize(value)[0]


# ──────────────────────────────────────────────────────────────────────────────
# Pending calls
# ──────────────────────────────────────────────────────────────────────────────


class ViewCall(Generic[T]):
    """Read-only call; nothing is sent until `call()`."""

    def __init__(
        self,
        provider: Provider,
        request: Call,
        decoder: Callable[[List[int]], T],
        block_id: BlockId = DEFAULT_BLOCK_ID,
    ):
        self.provider = provider
        self.request = request
        self.decoder = decoder
        self._block_id = block_id

    def block_id(self, block_id: BlockId) -> "ViewCall[T]":
        self._block_id = block_id
        return self

    def raw_call(self) -> List[int]:
        return list(self.provider.call(self.request, self._block_id))

    def call(self) -> T:
        return self.decoder(self.raw_call())


class ExecutionV1:
    """Invoke transaction with a legacy fee cap (``max_fee``)."""

    def __init__(self, request: Call, account: ConnectedAccount):
        self.request = request
        self.account = account
        self._nonce: Optional[int] = None
        self._max_fee: Optional[int] = None

    def nonce(self, nonce: int) -> "ExecutionV1":
        self._nonce = nonce
        return self

    def max_fee(self, max_fee: int) -> "ExecutionV1":
        self._max_fee = max_fee
        return self

    def estimate_fee(self) -> Any:
        return self.account.estimate_fee_v1([self.request], nonce=self._nonce)

    def send(self) -> Any:
        return self.account.execute_v1([self.request], max_fee=self._max_fee, nonce=self._nonce)


class ExecutionV3:
    """Invoke transaction bounded by L1 gas amount and price."""

    def __init__(self, request: Call, account: ConnectedAccount):
        self.request = request
        self.account = account
        self._nonce: Optional[int] = None
        self._l1_gas: Optional[int] = None
        self._l1_gas_price: Optional[int] = None

    def nonce(self, nonce: int) -> "ExecutionV3":
        self._nonce = nonce
        return self

    def l1_gas(self, amount: int) -> "ExecutionV3":
        self._l1_gas = amount
        return self

    def l1_gas_price(self, price: int) -> "ExecutionV3":
        self._l1_gas_price = price
        return self

    def resource_bounds(self) -> Optional[ResourceBounds]:
        if self._l1_gas is None and self._l1_gas_price is None:
            return None
        if self._l1_gas is None or self._l1_gas_price is None:
            raise ValueError("l1_gas and l1_gas_price must be set together")
        return ResourceBounds(max_amount=self._l1_gas, max_price_per_unit=self._l1_gas_price)

    def estimate_fee(self) -> Any:
        return self.account.estimate_fee_v3([self.request], nonce=self._nonce)

    def send(self) -> Any:
        return self.account.execute_v3(
            [self.request], l1_resource_bounds=self.resource_bounds(), nonce=self._nonce
        )


# ──────────────────────────────────────────────────────────────────────────────
# Bases for generated classes
# ──────────────────────────────────────────────────────────────────────────────


class ContractBase(Generic[A]):
    """Full surface: views and externals, backed by an account."""

    def __init__(self, address: Union[int, str], account: A):
        self.address = _address(address)
        self.account = account
        self.block_id: BlockId = DEFAULT_BLOCK_ID

    @property
    def provider(self) -> Provider:
        return self.account.provider

    def with_block(self, block_id: BlockId) -> "ContractBase[A]":
        self.block_id = block_id
        return self

    def _view(self, selector: int, calldata: List[int], decoder: Callable[[List[int]], T]) -> ViewCall[T]:
        return ViewCall(self.provider, Call(self.address, selector, calldata), decoder, self.block_id)

    def _call(self, selector: int, calldata: List[int]) -> Call:
        return Call(self.address, selector, calldata)


class ReaderBase(Generic[P]):
    """Read-only surface backed by a provider."""

    def __init__(self, address: Union[int, str], provider: P):
        self.address = _address(address)
        self.provider = provider
        self.block_id: BlockId = DEFAULT_BLOCK_ID

    def with_block(self, block_id: BlockId) -> "ReaderBase[P]":
        self.block_id = block_id
        return self

    def _view(self, selector: int, calldata: List[int], decoder: Callable[[List[int]], T]) -> ViewCall[T]:
        return ViewCall(self.provider, Call(self.address, selector, calldata), decoder, self.block_id)
