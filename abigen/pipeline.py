"""
abigen.pipeline: one synchronous pass: parse -> resolve names -> generate.

    from abigen import AbigenConfig, generate

    bindings = generate(abi_json_text, AbigenConfig(contract_name="Erc20"))
    bindings.write_to_file("erc20.py")

The first structured error aborts the pass and is re-raised wrapped in a
`GenerationError` that names the contract and the ABI source; the original
error stays reachable as ``.error`` and ``__cause__``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from . import logging as alog
from .codegen import CodeGenerator
from .config import AbigenConfig
from .errors import AbigenError, GenerationError
from .tokens import AbiParser, AliasResolver, TokenizedAbi

__all__ = ["ContractBindings", "generate", "tokenize"]

log = alog.get_logger(__name__)


@dataclass(frozen=True)
class ContractBindings:
    name: str
    source: str

    def write_to_file(self, path: Union[str, Path]) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(self.source, encoding="utf-8")
        log.info("wrote bindings", extra={"path": str(out), "bytes": len(self.source)})
        return out


def tokenize(abi_text: Union[str, bytes], config: AbigenConfig) -> TokenizedAbi:
    """Parse only; errors are wrapped like `generate`'s."""
    try:
        config.validate()
        return AbiParser(max_type_depth=config.max_type_depth).parse(abi_text)
    except AbigenError as e:
        raise GenerationError(config.contract_name, config.abi_source, e) from e


def generate(abi_text: Union[str, bytes], config: AbigenConfig) -> ContractBindings:
    with alog.trace_scope(contract=config.contract_name, source=config.abi_source):
        try:
            config.validate()
            alog.bind(stage="parse")
            abi = AbiParser(max_type_depth=config.max_type_depth).parse(abi_text)
            alog.bind(stage="resolve")
            names = AliasResolver(
                config.types_aliases, max_type_depth=config.max_type_depth
            ).resolve(abi, config.contract_name, config.reader_name)
            alog.bind(stage="generate")
            source = CodeGenerator(abi, names, config).generate()
        except AbigenError as e:
            log.error("generation failed", extra={"code": e.to_dict()["code"]})
            raise GenerationError(config.contract_name, config.abi_source, e) from e

        log.info(
            "generated bindings",
            extra={
                "structs": len(abi.structs),
                "enums": len(abi.enums),
                "functions": len(abi.all_functions()),
                "execution": config.execution_version.value,
            },
        )
        return ContractBindings(name=config.contract_name, source=source)
