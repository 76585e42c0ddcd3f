"""
abigen.errors
-------------

Structured error taxonomy for the ABI tokenizer, alias resolver and code
generator.

Design goals
------------
- One root `AbigenError` with a machine-stable `code` and JSON-safe `data`.
- One concrete class per failure mode so callers and tests can catch precisely:
    * MalformedSource: input is not a recognised ABI shape / bad entry
    * ConflictingDefinition: same path declared with incompatible shapes
    * UnresolvedReference: a type path is neither catalogued nor declared
    * NameCollision: two paths map to the same generated identifier
    * ConfigError: invalid generator configuration
- `GenerationError` is the single top-level failure surfaced by
  `abigen.generate`; it carries the contract name and the source identifier
  and chains the originating structured error as `__cause__`.

Every stage fails fast: the first error aborts the invocation and no partial
output is produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping

__all__ = [
    "AbigenErrorCode",
    "AbigenError",
    "MalformedSource",
    "ConflictingDefinition",
    "UnresolvedReference",
    "NameCollision",
    "ConfigError",
    "GenerationError",
]


class AbigenErrorCode(str, Enum):
    MALFORMED_SOURCE = "ABIGEN/MALFORMED_SOURCE"
    CONFLICTING_DEFINITION = "ABIGEN/CONFLICTING_DEFINITION"
    UNRESOLVED_REFERENCE = "ABIGEN/UNRESOLVED_REFERENCE"
    NAME_COLLISION = "ABIGEN/NAME_COLLISION"
    CONFIG = "ABIGEN/CONFIG"
    GENERATION = "ABIGEN/GENERATION"


@dataclass(eq=False)
class AbigenError(Exception):
    """
    Root error for abigen.

    Attributes
    ----------
    code: str
        Machine-stable error code (see AbigenErrorCode).
    message: str
        Human hint suitable for logs.
    data: dict
        JSON-serializable diagnostics (paths, entity names, entry indexes).
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(f"{self.code}: {self.message}")

    def with_context(self, **ctx: Any) -> "AbigenError":
        """Merge extra diagnostics into `data` (in place) and return self."""
        for k, v in ctx.items():
            self.data[k] = _coerce_json(v)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": str(self.code.value if isinstance(self.code, Enum) else self.code),
            "message": self.message,
            "data": _coerce_json(self.data),
        }

    def __str__(self) -> str:
        code = self.code.value if isinstance(self.code, Enum) else self.code
        parts = [f"{code}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


class MalformedSource(AbigenError):
    def __init__(self, message: str = "malformed ABI source", **data: Any) -> None:
        super().__init__(
            code=AbigenErrorCode.MALFORMED_SOURCE,
            message=message,
            data=_jsonmap(data),
        )


class ConflictingDefinition(AbigenError):
    def __init__(self, path: str, *, kind: str = "struct") -> None:
        super().__init__(
            code=AbigenErrorCode.CONFLICTING_DEFINITION,
            message=f"{kind} {path!r} is declared more than once with different shapes",
            data={"path": path, "kind": kind},
        )
        self.path = path


class UnresolvedReference(AbigenError):
    def __init__(self, path: str, entity: str, **data: Any) -> None:
        super().__init__(
            code=AbigenErrorCode.UNRESOLVED_REFERENCE,
            message=f"type {path!r} used by {entity!r} is neither a core type nor a declared struct/enum",
            data={"path": path, "entity": entity, **_jsonmap(data)},
        )
        self.path = path
        self.entity = entity


class NameCollision(AbigenError):
    def __init__(self, identifier: str, paths: Iterable[str]) -> None:
        paths = sorted(set(paths))
        super().__init__(
            code=AbigenErrorCode.NAME_COLLISION,
            message=f"generated identifier {identifier!r} is produced by {len(paths)} definitions; add a type alias",
            data={"identifier": identifier, "paths": paths},
        )
        self.identifier = identifier
        self.paths = paths


class ConfigError(AbigenError):
    def __init__(self, message: str = "invalid configuration", **data: Any) -> None:
        super().__init__(
            code=AbigenErrorCode.CONFIG,
            message=message,
            data=_jsonmap(data),
        )


class GenerationError(AbigenError):
    """Top-level failure of one `generate` invocation."""

    def __init__(self, contract_name: str, source: str, error: AbigenError) -> None:
        super().__init__(
            code=AbigenErrorCode.GENERATION,
            message=(
                f"ABI source {source} could not be turned into bindings for "
                f"{contract_name}: {error.message}"
            ),
            data={
                "contract": contract_name,
                "source": source,
                "error": error.to_dict(),
            },
        )
        self.contract_name = contract_name
        self.source = source
        self.error = error


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, Mapping):
        return {str(k): _coerce_json(x) for k, x in v.items()}
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_coerce_json(x) for x in v]
    return str(v)


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"

