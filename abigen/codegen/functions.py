"""
Function emitters for the two call surfaces.

view       ``def f(self, ...) -> _rt.ViewCall[T]``, emitted on the contract
           class and on the reader class; never builds a transaction.
external   ``def f_getcall(self, ...) -> _rt.Call`` and
           ``def f(self, ...) -> _rt.ExecutionV1`` (or ``ExecutionV3``),
           emitted on the contract class only.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..config import ExecutionVersion
from ..errors import NameCollision
from ..runtime.selectors import get_selector_from_name
from ..tokens.aliases import py_ident
from ..tokens.types import Function
from .types import TypeProjector

__all__ = ["METHOD_RESERVED", "method_name", "param_names", "emit_view", "emit_getcall", "emit_execute"]

# Attributes of ContractBase / ReaderBase.
METHOD_RESERVED = frozenset(
    ("address", "account", "provider", "block_id", "with_block", "_view", "_call")
)

_PARAM_RESERVED = frozenset(("self", "_calldata"))

_EXECUTION_CLASS = {
    ExecutionVersion.V1: "ExecutionV1",
    ExecutionVersion.V3: "ExecutionV3",
}

_VIEW_TMPL = '''
    def {py_name}(self{sig}) -> _rt.ViewCall[{ret}]:
        _calldata: List[int] = []
{encode}        return self._view({selector}, _calldata, {decoder}.decode)
'''

_GETCALL_TMPL = '''
    def {py_name}_getcall(self{sig}) -> _rt.Call:
        _calldata: List[int] = []
{encode}        return self._call({selector}, _calldata)
'''

_EXECUTE_TMPL = '''
    def {py_name}(self{sig}) -> _rt.{execution}:
        return _rt.{execution}(self.{py_name}_getcall({args}), self.account)
'''


def method_name(fn: Function) -> str:
    return py_ident(fn.name, METHOD_RESERVED)


def param_names(fn: Function) -> List[str]:
    seen: Dict[str, str] = {}
    out = []
    for p in fn.inputs:
        name = py_ident(p.name, _PARAM_RESERVED)
        if name in seen:
            raise NameCollision(f"{fn.name}({name})", [f"{fn.name}.{seen[name]}", f"{fn.name}.{p.name}"])
        seen[name] = p.name
        out.append(name)
    return out


def _signature(fn: Function, proj: TypeProjector) -> Tuple[str, str, List[str]]:
    names = param_names(fn)
    sig = "".join(f", {n}: {proj.annotation(p.token, fn.name)}" for n, p in zip(names, fn.inputs))
    encode = "".join(
        f"        _calldata += {proj.serde(p.token, fn.name)}.serialize({n})\n"
        for n, p in zip(names, fn.inputs)
    )
    return sig, encode, names


def _selector(fn: Function) -> str:
    return f"{get_selector_from_name(fn.name):#x}"


def emit_view(fn: Function, proj: TypeProjector) -> str:
    sig, encode, _ = _signature(fn, proj)
    return _VIEW_TMPL.format(
        py_name=method_name(fn),
        sig=sig,
        ret=proj.outputs_annotation(fn.outputs, fn.name),
        encode=encode,
        selector=_selector(fn),
        decoder=proj.outputs_serde(fn.outputs, fn.name),
    )


def emit_getcall(fn: Function, proj: TypeProjector) -> str:
    sig, encode, _ = _signature(fn, proj)
    return _GETCALL_TMPL.format(py_name=method_name(fn), sig=sig, encode=encode, selector=_selector(fn))


def emit_execute(fn: Function, proj: TypeProjector, version: ExecutionVersion) -> str:
    sig, _, names = _signature(fn, proj)
    return _EXECUTE_TMPL.format(
        py_name=method_name(fn),
        sig=sig,
        execution=_EXECUTION_CLASS[version],
        args=", ".join(names),
    )
