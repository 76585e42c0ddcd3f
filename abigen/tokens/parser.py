"""
ABI tokenizer: raw Cairo ABI text -> closed, deduplicated `TokenizedAbi`.

Pipeline for one call to `AbiParser.parse`:

1. Shape detection. Either a JSON array of entries, or an object carrying the
   array under ``abi`` (Sierra contract classes store it as a JSON string).
2. Per-entry validation against ``abi_entry.schema.json``.
3. Dispatch by ``type``: struct, enum, function, interface, event. ``impl``,
   ``constructor`` and ``l1_handler`` are markers with nothing to bind and
   are skipped.
4. Every declared type path is classified through the category table and
   turned into a token; catalogued paths declared as explicit entries (u256,
   bool, Option::<T>, Span::<T>, ...) are skipped.
5. Closure check once every entry is read, so payloads may be declared after
   their users.

Errors are raised on the first problem found; nothing partial is returned.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .. import logging as alog
from ..config import DEFAULT_MAX_TYPE_DEPTH
from ..errors import ConflictingDefinition, MalformedSource, UnresolvedReference
from ..schemas import first_entry_error
from .constants import TypeCategory, classify, generic_arity
from .paths import TypePath, parse_type_path
from .types import (
    Array,
    CompositeBuiltin,
    CoreBasic,
    Enum,
    Field,
    Function,
    GenericBuiltin,
    Param,
    StateMutability,
    Struct,
    TokenizedAbi,
    Tuple,
    TypeToken,
    UserType,
    Variant,
    iter_user_refs,
)

__all__ = ["AbiParser", "tokens_from_abi_string", "load_entries"]

log = alog.get_logger(__name__)

_BOUNDED_INT = "core::internal::bounded_int::BoundedInt"
_SPAN = "core::array::Span"
_INT_LITERAL = re.compile(r"^-?(0x[0-9a-fA-F]+|[0-9]+)$")
_IGNORED_KINDS = frozenset(("impl", "constructor", "l1_handler"))


def load_entries(text: Union[str, bytes]) -> List[Any]:
    """Decode `text` and return the list of raw ABI entries it carries."""
    if isinstance(text, (bytes, bytearray)):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedSource("ABI source is not valid UTF-8", reason=str(e)) from e
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedSource(
            "ABI source is not valid JSON", line=e.lineno, column=e.colno, reason=e.msg
        ) from e

    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict) and "abi" in raw:
        inner = raw["abi"]
        if isinstance(inner, str):
            try:
                inner = json.loads(inner)
            except json.JSONDecodeError as e:
                raise MalformedSource(
                    "embedded 'abi' string is not valid JSON", reason=e.msg
                ) from e
        if isinstance(inner, list):
            return inner
        raise MalformedSource(
            "embedded 'abi' must be an array of entries", found=type(inner).__name__
        )
    raise MalformedSource(
        "expected a JSON array of ABI entries or an object with an 'abi' field",
        found=type(raw).__name__,
    )


class AbiParser:
    """
    Stateless between calls; one instance may parse any number of sources.

    >>> abi = AbiParser().parse('[{"type": "function", "name": "get", '
    ...     '"inputs": [], "outputs": [{"type": "core::felt252"}], '
    ...     '"state_mutability": "view"}]')
    >>> abi.functions[0].name
    'get'
    """

    def __init__(self, max_type_depth: int = DEFAULT_MAX_TYPE_DEPTH):
        self.max_type_depth = max_type_depth

    # -- entry points ---------------------------------------------------------

    def parse(self, text: Union[str, bytes]) -> TokenizedAbi:
        entries = load_entries(text)
        st = _State()
        for index, entry in enumerate(entries):
            err = first_entry_error(entry)
            if err is not None:
                where = "/".join(str(p) for p in err.absolute_path)
                raise MalformedSource(
                    f"ABI entry #{index} does not match the entry schema: {err.message}",
                    index=index,
                    entry_type=entry.get("type") if isinstance(entry, dict) else None,
                    at=where or None,
                )
            try:
                self._dispatch(entry, index, st)
            except (MalformedSource, ConflictingDefinition) as e:
                e.data.setdefault("index", index)
                raise

        self._check_closure(st)
        abi = TokenizedAbi(
            structs=st.structs,
            enums=st.enums,
            functions=st.functions,
            interfaces=st.interfaces,
        )
        log.debug(
            "tokenized abi",
            extra={
                "entries": len(entries),
                "structs": len(abi.structs),
                "enums": len(abi.enums),
                "functions": len(abi.functions),
                "interfaces": len(abi.interfaces),
            },
        )
        return abi

    def resolve_type(self, text: str, *, entity: str) -> TypeToken:
        """Turn one declared type path into a token (no closure check)."""
        try:
            tp = parse_type_path(text, max_depth=self.max_type_depth)
        except MalformedSource as e:
            e.with_context(entity=entity)
            raise
        return self._token(tp, entity)

    # -- dispatch -------------------------------------------------------------

    def _dispatch(self, entry: Mapping[str, Any], index: int, st: "_State") -> None:
        kind = entry["type"]
        if kind == "struct":
            self._struct(entry, st, is_event=False)
        elif kind == "enum":
            self._enum(entry, st, is_event=False)
        elif kind == "function":
            st.functions.append(self._function(entry))
        elif kind == "interface":
            self._interface(entry, index, st)
        elif kind == "event":
            if entry["kind"] == "struct":
                self._struct(entry, st, is_event=True)
            else:
                self._enum(entry, st, is_event=True)
        elif kind in _IGNORED_KINDS:
            log.debug("skipping abi entry", extra={"index": index, "kind": kind})
        else:
            raise MalformedSource(
                f"unknown ABI entry kind {kind!r}", index=index, entry_type=kind
            )

    def _declared_path(self, name: str) -> Optional[str]:
        """Canonical path of a struct/enum declaration, None when catalogued."""
        tp = parse_type_path(name, max_depth=self.max_type_depth)
        path = tp.text
        if tp.is_tuple or classify(path) is not None:
            log.debug("skipping catalogued declaration", extra={"path": path})
            return None
        return path

    def _struct(self, entry: Mapping[str, Any], st: "_State", *, is_event: bool) -> None:
        path = self._declared_path(entry["name"])
        if path is None:
            return
        fields = tuple(
            Field(
                name=m["name"],
                token=self.resolve_type(m["type"], entity=path),
                kind=m.get("kind") if is_event else None,
            )
            for m in entry["members"]
        )
        st.add_struct(Struct(type_path=path, fields=fields, is_event=is_event))

    def _enum(self, entry: Mapping[str, Any], st: "_State", *, is_event: bool) -> None:
        path = self._declared_path(entry["name"])
        if path is None:
            return
        variants = []
        for v in entry["variants"]:
            token = self.resolve_type(v["type"], entity=path)
            if isinstance(token, Tuple) and token.is_unit:
                token = None
            variants.append(
                Variant(name=v["name"], token=token, kind=v.get("kind") if is_event else None)
            )
        st.add_enum(Enum(type_path=path, variants=tuple(variants), is_event=is_event))

    def _function(self, entry: Mapping[str, Any]) -> Function:
        name = entry["name"]
        raw = entry["state_mutability"]
        try:
            mutability = StateMutability(raw)
        except ValueError:
            raise MalformedSource(
                f"function {name!r} has unknown state_mutability {raw!r}",
                function=name,
                state_mutability=raw,
            ) from None
        inputs = tuple(
            Param(name=p["name"], token=self.resolve_type(p["type"], entity=name))
            for p in entry["inputs"]
        )
        outputs = tuple(self.resolve_type(o["type"], entity=name) for o in entry["outputs"])
        # `-> ()` is spelled as a single unit output by some compilers
        outputs = tuple(o for o in outputs if not (isinstance(o, Tuple) and o.is_unit))
        return Function(name=name, state_mutability=mutability, inputs=inputs, outputs=outputs)

    def _interface(self, entry: Mapping[str, Any], index: int, st: "_State") -> None:
        name = entry["name"]
        funcs = st.interfaces.setdefault(name, [])
        for pos, item in enumerate(entry["items"]):
            if item.get("type") != "function":
                raise MalformedSource(
                    f"interface {name!r} may only contain functions",
                    index=index,
                    item=pos,
                    entry_type=item.get("type"),
                )
            err = first_entry_error(item)
            if err is not None:
                raise MalformedSource(
                    f"function #{pos} of interface {name!r} does not match the entry schema: {err.message}",
                    index=index,
                    item=pos,
                )
            funcs.append(self._function(item))

    # -- type paths -----------------------------------------------------------

    def _token(self, tp: TypePath, entity: str) -> TypeToken:
        if tp.is_tuple:
            return Tuple(tuple(self._token(a, entity) for a in tp.args))

        category = classify(tp.text)
        if category is TypeCategory.BASIC:
            return CoreBasic(tp.text)
        if category is TypeCategory.COMPOSITE_BUILTIN:
            return CompositeBuiltin(tp.text)
        if category is TypeCategory.ARRAY_SPAN:
            (inner,) = self._checked_args(tp, entity)
            return Array(type_path=tp.base, inner=self._token(inner, entity), is_span=tp.base == _SPAN)
        if category is TypeCategory.GENERIC_BUILTIN:
            args = self._checked_args(tp, entity)
            if tp.base == _BOUNDED_INT:
                return GenericBuiltin(tp.base, tuple(self._bound(a, tp, entity) for a in args))
            return GenericBuiltin(tp.base, tuple(self._token(a, entity) for a in args))

        # Unclassified: a user struct/enum. Arguments of a user generic are part
        # of its name but must still be well-formed.
        for a in tp.args:
            self._token(a, entity)
        return UserType(tp.text)

    def _checked_args(self, tp: TypePath, entity: str) -> Sequence[TypePath]:
        expected = generic_arity(tp.base)
        if len(tp.args) != expected:
            raise MalformedSource(
                f"{tp.base} expects {expected} type argument(s), got {len(tp.args)}",
                type_path=tp.text,
                entity=entity,
            )
        return tp.args

    @staticmethod
    def _bound(arg: TypePath, tp: TypePath, entity: str) -> CoreBasic:
        if arg.is_tuple or arg.args or not _INT_LITERAL.match(arg.base):
            raise MalformedSource(
                "BoundedInt bounds must be integer literals",
                type_path=tp.text,
                bound=arg.text,
                entity=entity,
            )
        return CoreBasic(arg.base)

    # -- closure --------------------------------------------------------------

    def _check_closure(self, st: "_State") -> None:
        known = set(st.structs) | set(st.enums)

        def check(token: Optional[TypeToken], entity: str) -> None:
            if token is None:
                return
            for path in iter_user_refs(token):
                if path not in known:
                    raise UnresolvedReference(path, entity)

        for s in st.structs.values():
            for f in s.fields:
                check(f.token, s.type_path)
        for e in st.enums.values():
            for v in e.variants:
                if e.is_event and v.token is not None and not isinstance(v.token, UserType):
                    raise UnresolvedReference(
                        _describe(v.token), e.type_path, variant=v.name,
                        reason="event variants must carry a declared struct or enum",
                    )
                check(v.token, e.type_path)
        for fn in st.all_functions():
            for p in fn.inputs:
                check(p.token, fn.name)
            for o in fn.outputs:
                check(o, fn.name)


class _State:
    """Mutable accumulator for one parse; frozen into a TokenizedAbi at the end."""

    def __init__(self) -> None:
        self.structs: Dict[str, Struct] = {}
        self.enums: Dict[str, Enum] = {}
        self.functions: List[Function] = []
        self.interfaces: Dict[str, List[Function]] = {}

    def all_functions(self) -> List[Function]:
        out = list(self.functions)
        for funcs in self.interfaces.values():
            out.extend(funcs)
        return out

    def add_struct(self, new: Struct) -> None:
        if new.type_path in self.enums:
            raise ConflictingDefinition(new.type_path, kind="struct/enum")
        old = self.structs.get(new.type_path)
        merged = _merge(old, new)
        if merged is None:
            raise ConflictingDefinition(new.type_path, kind="struct")
        self.structs[new.type_path] = merged

    def add_enum(self, new: Enum) -> None:
        if new.type_path in self.structs:
            raise ConflictingDefinition(new.type_path, kind="struct/enum")
        old = self.enums.get(new.type_path)
        merged = _merge(old, new)
        if merged is None:
            raise ConflictingDefinition(new.type_path, kind="enum")
        self.enums[new.type_path] = merged


def _merge(old: Any, new: Any) -> Any:
    """
    Result of declaring `new` where `old` already exists, or None on conflict.
    Equal declarations collapse; a plain and an event declaration of the same
    shape merge into the event one.
    """
    if old is None or old == new:
        return new
    if old.is_event != new.is_event and old.same_shape(new):
        return old if old.is_event else new
    return None


def _describe(token: TypeToken) -> str:
    if isinstance(token, Tuple):
        return "(" + ", ".join(_describe(t) for t in token.inners) + ")"
    return token.type_path


def tokens_from_abi_string(
    text: Union[str, bytes], max_type_depth: int = DEFAULT_MAX_TYPE_DEPTH
) -> TokenizedAbi:
    return AbiParser(max_type_depth=max_type_depth).parse(text)
