import itertools
import json
import logging
import sys
import types

import pytest

CA = "core::starknet::contract_address::ContractAddress"
U256 = "core::integer::u256"

# A token-like contract touching every entry kind the tokenizer handles.
SAMPLE_ABI = [
    {"type": "impl", "name": "TokenImpl", "interface_name": "pkg::IToken"},
    {
        "type": "struct",
        "name": U256,
        "members": [
            {"name": "low", "type": "core::integer::u128"},
            {"name": "high", "type": "core::integer::u128"},
        ],
    },
    {
        "type": "enum",
        "name": "core::bool",
        "variants": [{"name": "False", "type": "()"}, {"name": "True", "type": "()"}],
    },
    {
        "type": "struct",
        "name": "core::array::Span::<core::felt252>",
        "members": [{"name": "snapshot", "type": "@core::array::Array::<core::felt252>"}],
    },
    {
        "type": "struct",
        "name": "pkg::Point",
        "members": [
            {"name": "x", "type": "core::integer::u32"},
            {"name": "y", "type": "core::integer::u32"},
        ],
    },
    {
        "type": "enum",
        "name": "pkg::Direction",
        "variants": [
            {"name": "North", "type": "()"},
            {"name": "East", "type": "core::integer::u8"},
            {"name": "Custom", "type": "pkg::Point"},
        ],
    },
    {
        "type": "interface",
        "name": "pkg::IToken",
        "items": [
            {
                "type": "function",
                "name": "balance_of",
                "inputs": [{"name": "account", "type": CA}],
                "outputs": [{"type": U256}],
                "state_mutability": "view",
            },
            {
                "type": "function",
                "name": "transfer",
                "inputs": [{"name": "recipient", "type": CA}, {"name": "amount", "type": U256}],
                "outputs": [{"type": "core::bool"}],
                "state_mutability": "external",
            },
            {
                "type": "function",
                "name": "name",
                "inputs": [],
                "outputs": [{"type": "core::byte_array::ByteArray"}],
                "state_mutability": "view",
            },
        ],
    },
    {
        "type": "function",
        "name": "get_point",
        "inputs": [],
        "outputs": [{"type": "pkg::Point"}],
        "state_mutability": "view",
    },
    {
        "type": "function",
        "name": "set_direction",
        "inputs": [
            {"name": "direction", "type": "pkg::Direction"},
            {"name": "tags", "type": "core::array::Span::<core::felt252>"},
        ],
        "outputs": [],
        "state_mutability": "external",
    },
    {
        "type": "function",
        "name": "maybe_point",
        "inputs": [{"name": "key", "type": "core::felt252"}],
        "outputs": [{"type": "core::option::Option::<pkg::Point>"}],
        "state_mutability": "view",
    },
    {"type": "constructor", "name": "constructor", "inputs": [{"name": "owner", "type": CA}]},
    {
        "type": "event",
        "name": "pkg::Transfer",
        "kind": "struct",
        "members": [
            {"name": "from", "type": CA, "kind": "key"},
            {"name": "to", "type": CA, "kind": "key"},
            {"name": "value", "type": U256, "kind": "data"},
        ],
    },
    {
        "type": "event",
        "name": "pkg::Moved",
        "kind": "struct",
        "members": [{"name": "point", "type": "pkg::Point", "kind": "data"}],
    },
    {
        "type": "event",
        "name": "pkg::Event",
        "kind": "enum",
        "variants": [
            {"name": "Transfer", "type": "pkg::Transfer", "kind": "nested"},
            {"name": "Moved", "type": "pkg::Moved", "kind": "nested"},
        ],
    },
]

POINT_ABI = [
    {
        "type": "struct",
        "name": "pkg::Point",
        "members": [
            {"name": "x", "type": "core::integer::u32"},
            {"name": "y", "type": "core::integer::u32"},
        ],
    },
    {
        "type": "function",
        "name": "get_point",
        "inputs": [],
        "outputs": [{"type": "pkg::Point"}],
        "state_mutability": "view",
    },
]


def fn_entry(name, mutability="view", inputs=(), outputs=()):
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"type": t} for t in outputs],
        "state_mutability": mutability,
    }


def struct_entry(name, *members):
    return {"type": "struct", "name": name, "members": [{"name": n, "type": t} for n, t in members]}


def enum_entry(name, *variants):
    return {"type": "enum", "name": name, "variants": [{"name": n, "type": t} for n, t in variants]}


# ----------------------------------------------------------------------------
# Fake capabilities
# ----------------------------------------------------------------------------


class FakeProvider:
    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def call(self, call, block_id="pending"):
        self.calls.append((call, block_id))
        return list(self.responses.get(call.selector, []))


class FakeAccount:
    def __init__(self, provider=None):
        self.provider = provider or FakeProvider()
        self.executed = []
        self.estimated = []

    def execute_v1(self, calls, *, max_fee=None, nonce=None):
        self.executed.append(("v1", list(calls), {"max_fee": max_fee, "nonce": nonce}))
        return "tx-v1"

    def execute_v3(self, calls, *, l1_resource_bounds=None, nonce=None):
        self.executed.append(("v3", list(calls), {"l1_resource_bounds": l1_resource_bounds, "nonce": nonce}))
        return "tx-v3"

    def estimate_fee_v1(self, calls, *, nonce=None):
        self.estimated.append(("v1", list(calls), nonce))
        return 1000

    def estimate_fee_v3(self, calls, *, nonce=None):
        self.estimated.append(("v3", list(calls), nonce))
        return 2000


# ----------------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------------

_module_ids = itertools.count()


@pytest.fixture
def sample_abi_text():
    return json.dumps(SAMPLE_ABI)


@pytest.fixture
def point_abi_text():
    return json.dumps(POINT_ABI)


@pytest.fixture
def load_module():
    """Execute generated source as a real module and return it."""
    loaded = []

    def _load(source):
        name = f"abigen_generated_{next(_module_ids)}"
        mod = types.ModuleType(name)
        sys.modules[name] = mod
        loaded.append(name)
        exec(compile(source, f"<{name}>", "exec"), mod.__dict__)
        return mod

    yield _load
    for name in loaded:
        sys.modules.pop(name, None)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def account(provider):
    return FakeAccount(provider)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "ABIGEN_CONFIG_FILE",
        "ABIGEN_EXECUTION_VERSION",
        "ABIGEN_RUNTIME_MODULE",
        "ABIGEN_MAX_TYPE_DEPTH",
        "ABIGEN_LOG_FORMAT",
        "ABIGEN_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _restore_abigen_logger():
    logger = logging.getLogger("abigen")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
