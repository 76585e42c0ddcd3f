import importlib
import json
import subprocess
from importlib import metadata

import pytest

import abigen
from abigen import AbigenConfig, GenerationError, generate, tokenize
from abigen.config import MAX_TYPE_DEPTH
from abigen.errors import ConfigError, MalformedSource, NameCollision, UnresolvedReference

from .conftest import fn_entry, struct_entry


def test_generate_returns_named_bindings(sample_abi_text):
    bindings = generate(sample_abi_text, AbigenConfig(contract_name="Token"))
    assert bindings.name == "Token"
    assert bindings.source.startswith("# Generated by abigen")
    compile(bindings.source, "<generated>", "exec")


def test_custom_runtime_module_is_imported(sample_abi_text):
    cfg = AbigenConfig(contract_name="Token", runtime_module="vendor.abigen_runtime")
    source = generate(sample_abi_text, cfg).source
    assert "from vendor.abigen_runtime import contract as _rt" in source
    assert "from vendor.abigen_runtime import serde as _serde" in source


def test_write_to_file(tmp_path, point_abi_text):
    bindings = generate(point_abi_text, AbigenConfig(contract_name="Geometry"))
    out = bindings.write_to_file(tmp_path / "nested" / "geometry.py")
    assert out.read_text(encoding="utf-8") == bindings.source


def test_errors_are_wrapped_with_contract_and_source():
    text = json.dumps([struct_entry("pkg::A", ("b", "pkg::Missing"))])
    cfg = AbigenConfig(contract_name="Token", abi_source="token.json")
    with pytest.raises(GenerationError) as ei:
        generate(text, cfg)
    err = ei.value
    assert err.contract_name == "Token"
    assert err.source == "token.json"
    assert isinstance(err.error, UnresolvedReference)
    assert err.__cause__ is err.error
    assert err.to_dict()["data"]["error"]["data"]["path"] == "pkg::Missing"


def test_name_collision_is_wrapped():
    text = json.dumps([struct_entry("a::P"), struct_entry("b::P")])
    with pytest.raises(GenerationError) as ei:
        generate(text, AbigenConfig(contract_name="Token"))
    assert isinstance(ei.value.error, NameCollision)


def test_invalid_config_is_wrapped(point_abi_text):
    with pytest.raises(GenerationError) as ei:
        generate(point_abi_text, AbigenConfig(contract_name="not valid"))
    assert isinstance(ei.value.error, ConfigError)


def test_tokenize(sample_abi_text):
    abi = tokenize(sample_abi_text, AbigenConfig(contract_name="Token"))
    assert "pkg::Point" in abi.structs
    with pytest.raises(GenerationError):
        tokenize("[1]", AbigenConfig(contract_name="Token"))


def test_package_facade():
    assert abigen.__version__
    assert abigen.load_config is abigen.config.load_config
    with pytest.raises(AttributeError):
        abigen.nothing_here


def _nested_options(depth):
    text = "core::felt252"
    for _ in range(depth):
        text = f"core::option::Option::<{text}>"
    return text


def test_deepest_allowed_nesting_generates():
    text = json.dumps([fn_entry("deep", outputs=[_nested_options(MAX_TYPE_DEPTH)])])
    source = generate(text, AbigenConfig(contract_name="Token", max_type_depth=MAX_TYPE_DEPTH)).source
    assert "def deep(self)" in source


def test_runaway_nesting_is_a_structured_error():
    text = json.dumps([fn_entry("deep", outputs=[_nested_options(600)])])
    with pytest.raises(GenerationError) as ei:
        generate(text, AbigenConfig(contract_name="Token", max_type_depth=MAX_TYPE_DEPTH))
    assert isinstance(ei.value.error, MalformedSource)


def test_version_comes_from_package_metadata(monkeypatch, point_abi_text):
    def no_subprocess(*args, **kwargs):
        raise AssertionError("version lookup must not spawn processes")

    monkeypatch.setattr(subprocess, "Popen", no_subprocess)
    fresh = importlib.reload(abigen.version)
    try:
        assert fresh.__version__ in (fresh.BASE_VERSION, metadata.version("cairo-abigen"))
    except metadata.PackageNotFoundError:
        assert fresh.__version__ == fresh.BASE_VERSION
    header = generate(point_abi_text, AbigenConfig(contract_name="Geometry")).source.splitlines()[0]
    assert header.startswith(f"# Generated by abigen {fresh.get_version()} for contract Geometry")


def test_alias_onto_reserved_name_is_rejected(point_abi_text):
    cfg = AbigenConfig(contract_name="Geometry", types_aliases={"pkg::Point": "List"})
    with pytest.raises(GenerationError) as ei:
        generate(point_abi_text, cfg)
    assert isinstance(ei.value.error, ConfigError)
