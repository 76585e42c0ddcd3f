import pytest

from abigen.config import (
    DEFAULT_MAX_TYPE_DEPTH,
    DEFAULT_RUNTIME_MODULE,
    MAX_TYPE_DEPTH,
    AbigenConfig,
    ExecutionVersion,
    ParseExecutionVersionError,
    load_config,
)
from abigen.errors import ConfigError


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("v1", ExecutionVersion.V1),
        ("V3", ExecutionVersion.V3),
        (" 3 ", ExecutionVersion.V3),
        (1, ExecutionVersion.V1),
        (ExecutionVersion.V3, ExecutionVersion.V3),
    ],
)
def test_parse_execution_version(raw, expected):
    assert ExecutionVersion.parse(raw) is expected


def test_parse_execution_version_rejects_unknown():
    with pytest.raises(ParseExecutionVersionError):
        ExecutionVersion.parse("v2")


def test_defaults():
    cfg = AbigenConfig(contract_name="Erc20")
    assert cfg.execution_version is ExecutionVersion.V1
    assert cfg.types_aliases == {}
    assert cfg.runtime_module == DEFAULT_RUNTIME_MODULE
    assert cfg.max_type_depth == DEFAULT_MAX_TYPE_DEPTH
    assert cfg.reader_name == "Erc20Reader"
    cfg.validate()
    assert cfg.as_dict()["execution_version"] == "v1"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"contract_name": "not valid"},
        {"contract_name": "class"},
        {"contract_name": "C", "types_aliases": {"pkg::A": "1bad"}},
        {"contract_name": "C", "types_aliases": {" ": "Fine"}},
        {"contract_name": "C", "runtime_module": "my-runtime"},
        {"contract_name": "C", "max_type_depth": 0},
        {"contract_name": "C", "max_type_depth": MAX_TYPE_DEPTH + 1},
    ],
)
def test_validate_rejects(kwargs):
    with pytest.raises(ConfigError):
        AbigenConfig(**kwargs).validate()


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "abigen.yaml"
    path.write_text(
        "contract_name: Erc20\n"
        "execution_version: v3\n"
        "types_aliases:\n"
        "  pkg::Event: Erc20Event\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.contract_name == "Erc20"
    assert cfg.execution_version is ExecutionVersion.V3
    assert cfg.types_aliases == {"pkg::Event": "Erc20Event"}


def test_load_config_precedence(tmp_path, monkeypatch):
    path = tmp_path / "abigen.json"
    path.write_text('{"contract_name": "FromFile", "execution_version": "v1", "max_type_depth": 8}')
    monkeypatch.setenv("ABIGEN_CONFIG_FILE", str(path))
    monkeypatch.setenv("ABIGEN_EXECUTION_VERSION", "v3")
    monkeypatch.setenv("ABIGEN_MAX_TYPE_DEPTH", "16")

    cfg = load_config()
    assert cfg.contract_name == "FromFile"
    assert cfg.execution_version is ExecutionVersion.V3
    assert cfg.max_type_depth == 16

    cfg = load_config(contract_name="Override", execution_version="v1", max_type_depth=None)
    assert cfg.contract_name == "Override"
    assert cfg.execution_version is ExecutionVersion.V1
    assert cfg.max_type_depth == 16


def test_alias_overrides_merge_with_file(tmp_path):
    path = tmp_path / "abigen.yaml"
    path.write_text("contract_name: C\ntypes_aliases:\n  a::X: X1\n  b::Y: Y1\n")
    cfg = load_config(path, types_aliases={"b::Y": "Y2", "c::Z": "Z"})
    assert cfg.types_aliases == {"a::X": "X1", "b::Y": "Y2", "c::Z": "Z"}


def test_load_config_errors(tmp_path, monkeypatch):
    with pytest.raises(ConfigError, match="contract_name is required"):
        load_config()
    with pytest.raises(ConfigError) as ei:
        load_config(contract_name="C", colour="blue")
    assert ei.value.data["keys"] == ["colour"]
    with pytest.raises(ConfigError) as ei:
        load_config(contract_name="C", execution_version="v9")
    assert isinstance(ei.value.__cause__, ParseExecutionVersionError)
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml", contract_name="C")

    bad = tmp_path / "list.yaml"
    bad.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(bad, contract_name="C")

    monkeypatch.setenv("ABIGEN_MAX_TYPE_DEPTH", "deep")
    with pytest.raises(ConfigError):
        load_config(contract_name="C")
