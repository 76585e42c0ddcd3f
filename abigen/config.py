"""
abigen.config: generator configuration.

The builder layer (CLI or a library caller) hands the core a plain
`AbigenConfig`:

- contract_name      identifier of the generated wrapper (reader gets "<Name>Reader")
- types_aliases      fully-qualified Cairo path → replacement identifier
- execution_version  transaction convention for external calls: "v1" (max_fee)
                     or "v3" (L1 resource bounds)
- abi_source         identifier of the ABI source used in diagnostics
- runtime_module     import path of the runtime support library used by the
                     generated module
- max_type_depth     bound on generic nesting accepted by the tokenizer

Precedence for `load_config`:
  1) hardcoded defaults below
  2) YAML/JSON file (explicit `path` or ABIGEN_CONFIG_FILE)
  3) environment (ABIGEN_EXECUTION_VERSION, ABIGEN_RUNTIME_MODULE,
     ABIGEN_MAX_TYPE_DEPTH)
  4) explicit keyword overrides

Example file:

    contract_name: Erc20
    execution_version: v3
    types_aliases:
      openzeppelin::token::erc20::erc20::ERC20Component::Event: Erc20Event
"""

from __future__ import annotations

import keyword
import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError

__all__ = [
    "ExecutionVersion",
    "ParseExecutionVersionError",
    "AbigenConfig",
    "load_config",
    "DEFAULT_RUNTIME_MODULE",
    "DEFAULT_MAX_TYPE_DEPTH",
    "MAX_TYPE_DEPTH",
]

DEFAULT_RUNTIME_MODULE = "abigen.runtime"
DEFAULT_MAX_TYPE_DEPTH = 32
# The path reader recurses twice per nesting level; stays well under the interpreter limit.
MAX_TYPE_DEPTH = 128


class ParseExecutionVersionError(ValueError):
    """Raised when an execution version string is not one of the supported values."""


class ExecutionVersion(str, Enum):
    """Transaction-construction convention for state-changing calls."""

    V1 = "v1"
    V3 = "v3"

    @classmethod
    def parse(cls, raw: Any) -> "ExecutionVersion":
        if isinstance(raw, ExecutionVersion):
            return raw
        s = str(raw).strip().lower()
        if s in ("1", "v1"):
            return cls.V1
        if s in ("3", "v3"):
            return cls.V3
        raise ParseExecutionVersionError(
            f"invalid execution version {raw!r} (expected 'v1' or 'v3')"
        )


def _is_identifier(name: Any) -> bool:
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


@dataclass
class AbigenConfig:
    contract_name: str
    types_aliases: Dict[str, str] = field(default_factory=dict)
    execution_version: ExecutionVersion = ExecutionVersion.V1
    abi_source: str = "<memory>"
    runtime_module: str = DEFAULT_RUNTIME_MODULE
    max_type_depth: int = DEFAULT_MAX_TYPE_DEPTH

    def __post_init__(self) -> None:
        self.execution_version = ExecutionVersion.parse(self.execution_version)
        self.types_aliases = dict(self.types_aliases or {})

    @property
    def reader_name(self) -> str:
        return f"{self.contract_name}Reader"

    def validate(self) -> None:
        if not _is_identifier(self.contract_name):
            raise ConfigError(
                "contract_name must be a valid identifier",
                contract_name=self.contract_name,
            )
        for path, alias in self.types_aliases.items():
            if not isinstance(path, str) or not path.strip():
                raise ConfigError("type alias keys must be non-empty paths", path=path)
            if not _is_identifier(alias):
                raise ConfigError(
                    "type alias must be a valid identifier", path=path, alias=alias
                )
        if not all(part.isidentifier() for part in self.runtime_module.split(".")):
            raise ConfigError(
                "runtime_module must be a dotted module path",
                runtime_module=self.runtime_module,
            )
        if not (1 <= self.max_type_depth <= MAX_TYPE_DEPTH):
            raise ConfigError(
                f"max_type_depth must be between 1 and {MAX_TYPE_DEPTH}",
                max_type_depth=self.max_type_depth,
            )

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["execution_version"] = self.execution_version.value
        return d


# ----------------------------- loading ---------------------------------------


def _load_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError("cannot read config file", path=str(path), reason=str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError("config file is not valid YAML/JSON", path=str(path), reason=str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError("config file must contain a mapping", path=str(path))
    return dict(data)


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    ev = os.getenv("ABIGEN_EXECUTION_VERSION")
    if ev:
        out["execution_version"] = ev
    rt = os.getenv("ABIGEN_RUNTIME_MODULE")
    if rt:
        out["runtime_module"] = rt
    depth = os.getenv("ABIGEN_MAX_TYPE_DEPTH")
    if depth:
        try:
            out["max_type_depth"] = int(depth, 0)
        except ValueError as e:
            raise ConfigError("ABIGEN_MAX_TYPE_DEPTH must be an integer", value=depth) from e
    return out


def load_config(path: Optional[str | Path] = None, **overrides: Any) -> AbigenConfig:
    """
    Build and validate an AbigenConfig from file + environment + overrides.

    `None` override values are ignored so CLI options that were not given do
    not mask file or environment values. `types_aliases` from the file and the
    overrides are merged, overrides winning per key.
    """
    values: Dict[str, Any] = {}
    file_path = path or os.getenv("ABIGEN_CONFIG_FILE")
    if file_path:
        values.update(_load_file(Path(file_path).expanduser()))
    values.update(_env_overrides())

    aliases = dict(values.pop("types_aliases", None) or {})
    extra_aliases = overrides.pop("types_aliases", None) or {}
    aliases.update(extra_aliases)
    values.update({k: v for k, v in overrides.items() if v is not None})
    values["types_aliases"] = aliases

    known = set(AbigenConfig.__dataclass_fields__)
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError("unknown configuration keys", keys=unknown)
    if not values.get("contract_name"):
        raise ConfigError("contract_name is required")

    try:
        cfg = AbigenConfig(**values)
    except ParseExecutionVersionError as e:
        raise ConfigError(str(e), execution_version=values.get("execution_version")) from e
    cfg.validate()
    return cfg
