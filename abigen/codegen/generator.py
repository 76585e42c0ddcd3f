"""
Module assembly.

Output order:

    header (provenance comment, imports)
    class <Name>(_rt.ContractBase[_rt.A])      every view + every external
    class <Name>Reader(_rt.ReaderBase[_rt.P])  every view
    structs, in declaration order
    enums, in declaration order
    __all__

The contract classes come first and refer to struct/enum names only inside
method bodies and (postponed) annotations, so the later declarations are
bound by the time any method runs.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .. import logging as alog
from ..config import AbigenConfig
from ..errors import NameCollision
from ..tokens.aliases import NameTable
from ..tokens.types import Function, TokenizedAbi
from ..version import get_version
from .enums import emit_enum
from .functions import emit_execute, emit_getcall, emit_view, method_name
from .structs import emit_struct
from .types import TypeProjector

__all__ = ["CodeGenerator", "flatten_functions"]

log = alog.get_logger(__name__)

_HEADER_TMPL = '''# Generated by abigen {version} for contract {contract} (execution {execution}).
# Do not edit by hand.
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from {runtime} import contract as _rt
from {runtime} import serde as _serde
'''

_CONTRACT_TMPL = '''

class {name}(_rt.ContractBase[_rt.A]):
    """Views and externals of {contract}, sent through an account."""
'''

_READER_TMPL = '''

class {name}(_rt.ReaderBase[_rt.P]):
    """Views of {contract}, answered by a provider."""
'''


def flatten_functions(abi: TokenizedAbi) -> List[Tuple[str, Function]]:
    """(origin, function) for top-level functions, then each interface in order."""
    out = [(fn.name, fn) for fn in abi.functions]
    for iface, funcs in abi.interfaces.items():
        out.extend((f"{iface}::{fn.name}", fn) for fn in funcs)
    return out


class CodeGenerator:
    def __init__(self, abi: TokenizedAbi, names: NameTable, config: AbigenConfig):
        self.abi = abi
        self.names = names
        self.config = config
        self.proj = TypeProjector(names)

    def generate(self) -> str:
        functions = flatten_functions(self.abi)
        self._check_methods(functions)

        views = [fn for _, fn in functions if fn.is_view]
        externals = [fn for _, fn in functions if not fn.is_view]

        parts = [
            _HEADER_TMPL.format(
                version=get_version(),
                contract=self.names.contract_name,
                execution=self.config.execution_version.value,
                runtime=self.config.runtime_module,
            )
        ]

        parts.append(_CONTRACT_TMPL.format(name=self.names.contract_name, contract=self.names.contract_name))
        for _, fn in functions:
            if fn.is_view:
                parts.append(emit_view(fn, self.proj))
            else:
                parts.append(emit_getcall(fn, self.proj))
                parts.append(emit_execute(fn, self.proj, self.config.execution_version))

        parts.append(_READER_TMPL.format(name=self.names.reader_name, contract=self.names.contract_name))
        for fn in views:
            parts.append(emit_view(fn, self.proj))

        for struct in self.abi.structs.values():
            parts.append(emit_struct(struct, self.proj))
        for enum in self.abi.enums.values():
            parts.append(emit_enum(enum, self.proj, self.abi))

        exported = [self.names.contract_name, self.names.reader_name, *self.names.names.values()]
        parts.append("\n\n__all__ = [\n" + "".join(f'    "{n}",\n' for n in exported) + "]\n")

        log.debug(
            "generated bindings",
            extra={
                "views": len(views),
                "externals": len(externals),
                "structs": len(self.abi.structs),
                "enums": len(self.abi.enums),
            },
        )
        return "".join(parts)

    @staticmethod
    def _check_methods(functions: List[Tuple[str, Function]]) -> None:
        owners: Dict[str, str] = {}
        for origin, fn in functions:
            name = method_name(fn)
            claimed = [name] if fn.is_view else [name, f"{name}_getcall"]
            for method in claimed:
                prev = owners.get(method)
                if prev is not None:
                    raise NameCollision(method, [prev, origin])
                owners[method] = origin
