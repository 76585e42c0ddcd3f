"""
abigen: typed Python bindings from Cairo (Starknet) contract ABIs.

Public surface (lazily loaded so that generated modules, which only import
`abigen.runtime`, do not pull in the generator stack):

- generate(abi_text, config) -> ContractBindings
- tokenize(abi_text, config) -> TokenizedAbi
- AbigenConfig, ExecutionVersion, load_config
- AbigenError and its subclasses (MalformedSource, ConflictingDefinition,
  UnresolvedReference, NameCollision, ConfigError, GenerationError)
"""

from __future__ import annotations

import importlib
from typing import Any, Dict

from .version import __version__

_LAZY: Dict[str, str] = {
    "generate": "pipeline",
    "tokenize": "pipeline",
    "ContractBindings": "pipeline",
    "AbigenConfig": "config",
    "ExecutionVersion": "config",
    "ParseExecutionVersionError": "config",
    "load_config": "config",
    "AbigenError": "errors",
    "MalformedSource": "errors",
    "ConflictingDefinition": "errors",
    "UnresolvedReference": "errors",
    "NameCollision": "errors",
    "ConfigError": "errors",
    "GenerationError": "errors",
}

__all__ = ["__version__", *_LAZY]


def __getattr__(name: str) -> Any:
    module = _LAZY.get(name)
    if module is None:
        raise AttributeError(f"module 'abigen' has no attribute {name!r}")
    value = getattr(importlib.import_module(f".{module}", __name__), name)
    globals()[name] = value
    return value
