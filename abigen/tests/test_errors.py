import json

from abigen.errors import (
    AbigenError,
    AbigenErrorCode,
    ConflictingDefinition,
    GenerationError,
    MalformedSource,
    NameCollision,
    UnresolvedReference,
)


def test_to_dict_is_json_safe():
    e = MalformedSource("bad entry", index=3, path=("a", "b"), kind=AbigenErrorCode.CONFIG)
    d = e.to_dict()
    assert d["code"] == "ABIGEN/MALFORMED_SOURCE"
    assert d["data"] == {"index": 3, "path": ["a", "b"], "kind": "ABIGEN/CONFIG"}
    json.dumps(d)


def test_subclasses_share_the_root():
    for err in (
        MalformedSource(),
        ConflictingDefinition("pkg::A"),
        UnresolvedReference("pkg::A", "f"),
        NameCollision("A", ["x::A", "y::A"]),
    ):
        assert isinstance(err, AbigenError)
        assert str(err).startswith("ABIGEN/")


def test_name_collision_sorts_paths():
    e = NameCollision("A", ["y::A", "x::A", "x::A"])
    assert e.paths == ["x::A", "y::A"]
    assert e.data["identifier"] == "A"


def test_with_context_merges_data():
    e = UnresolvedReference("pkg::A", "f").with_context(index=2)
    assert e.data == {"path": "pkg::A", "entity": "f", "index": 2}


def test_generation_error_wraps_cause():
    inner = UnresolvedReference("pkg::A", "f")
    e = GenerationError("Token", "abi.json", inner)
    assert e.error is inner
    assert e.data["contract"] == "Token"
    assert e.data["source"] == "abi.json"
    assert e.data["error"]["code"] == "ABIGEN/UNRESOLVED_REFERENCE"
    assert "Token" in e.message and "abi.json" in e.message
