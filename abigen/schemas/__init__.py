"""
abigen.schemas
--------------
Package marker + loader for the JSON-Schema shipped with abigen.

Shipped files:
  - abi_entry.schema.json   shape of a single Cairo ABI entry (struct, enum,
                            function, interface, event; other kinds pass and are
                            judged by the tokenizer)
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files as _res_files
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema.exceptions import best_match

ABI_ENTRY_SCHEMA = "abi_entry.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str = ABI_ENTRY_SCHEMA) -> Dict[str, Any]:
    """Read and parse a packaged schema (cached)."""
    text = _res_files(__name__).joinpath(name).read_text(encoding="utf-8")
    return json.loads(text)


@lru_cache(maxsize=None)
def entry_validator() -> jsonschema.Draft202012Validator:
    schema = load_schema(ABI_ENTRY_SCHEMA)
    jsonschema.Draft202012Validator.check_schema(schema)
    return jsonschema.Draft202012Validator(schema)


def iter_entry_errors(entry: Any) -> Iterator[jsonschema.ValidationError]:
    yield from entry_validator().iter_errors(entry)


def first_entry_error(entry: Any) -> jsonschema.ValidationError | None:
    """Most relevant schema violation for `entry`, or None when it conforms."""
    return best_match(iter_entry_errors(entry))


__all__ = [
    "ABI_ENTRY_SCHEMA",
    "load_schema",
    "entry_validator",
    "iter_entry_errors",
    "first_entry_error",
]
