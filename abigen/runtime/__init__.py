"""
abigen.runtime: support library imported by generated bindings.

    serde       Cairo felt encoding for scalars, containers, structs and enums
    selectors   starknet keccak entry-point/event selectors
    contract    Call, ViewCall, ExecutionV1/V3 and the contract/reader bases

Generated modules import ``contract`` as ``_rt`` and ``serde`` as ``_serde``.
"""

from . import contract, selectors, serde
from .contract import (
    Call,
    ConnectedAccount,
    ContractBase,
    ExecutionV1,
    ExecutionV3,
    Provider,
    ReaderBase,
    ResourceBounds,
    ViewCall,
)
from .selectors import get_selector_from_name, starknet_keccak
from .serde import FELT_PRIME, CairoSerdeError

__all__ = [
    "contract",
    "selectors",
    "serde",
    "Call",
    "ConnectedAccount",
    "ContractBase",
    "ExecutionV1",
    "ExecutionV3",
    "Provider",
    "ReaderBase",
    "ResourceBounds",
    "ViewCall",
    "get_selector_from_name",
    "starknet_keccak",
    "FELT_PRIME",
    "CairoSerdeError",
]
