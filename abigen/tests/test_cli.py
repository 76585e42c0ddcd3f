import json
import logging

import pytest
from typer.testing import CliRunner

from abigen.cli import app, main

from .conftest import POINT_ABI, SAMPLE_ABI, struct_entry

runner = CliRunner()


@pytest.fixture
def abi_file(tmp_path):
    path = tmp_path / "token.json"
    path.write_text(json.dumps({"abi": json.dumps(SAMPLE_ABI)}), encoding="utf-8")
    return path


def test_generate_to_stdout(abi_file):
    result = runner.invoke(app, ["generate", str(abi_file), "--name", "Token"])
    assert result.exit_code == 0, result.output
    assert "class Token(_rt.ContractBase[_rt.A]):" in result.stdout
    assert "-> _rt.ExecutionV1:" in result.stdout


def test_generate_to_file_with_aliases(abi_file, tmp_path):
    out = tmp_path / "bindings" / "token.py"
    result = runner.invoke(
        app,
        [
            "generate",
            str(abi_file),
            "-n",
            "Token",
            "-o",
            str(out),
            "-a",
            "pkg::Event=TokenEvent",
            "-x",
            "v3",
        ],
    )
    assert result.exit_code == 0, result.output
    source = out.read_text(encoding="utf-8")
    assert "class TokenEvent:" in source
    assert "-> _rt.ExecutionV3:" in source


def test_generate_with_config_file(tmp_path):
    abi = tmp_path / "geometry.json"
    abi.write_text(json.dumps(POINT_ABI))
    cfg = tmp_path / "abigen.yaml"
    cfg.write_text("contract_name: Geometry\n")
    result = runner.invoke(app, ["generate", str(abi), "--config", str(cfg)])
    assert result.exit_code == 0, result.output
    assert "class GeometryReader(" in result.stdout


def test_generate_reports_structured_errors(tmp_path):
    abi = tmp_path / "broken.json"
    abi.write_text(json.dumps([struct_entry("pkg::A", ("b", "pkg::Missing"))]))
    result = runner.invoke(app, ["generate", str(abi), "--name", "Token"])
    assert result.exit_code == 2
    assert "ABIGEN/GENERATION" in result.output
    assert "pkg::Missing" in result.output


def test_generate_rejects_bad_alias(abi_file):
    result = runner.invoke(app, ["generate", str(abi_file), "-n", "Token", "-a", "no-equals"])
    assert result.exit_code == 2
    assert "ABIGEN/CONFIG" in result.output


def test_generate_missing_source(tmp_path):
    result = runner.invoke(app, ["generate", str(tmp_path / "nope.json"), "-n", "Token"])
    assert result.exit_code == 2
    assert "cannot read ABI source" in result.output


def test_inspect_prints_model(abi_file):
    result = runner.invoke(app, ["inspect", str(abi_file)])
    assert result.exit_code == 0, result.output
    model = json.loads(result.stdout)
    assert [s["path"] for s in model["structs"]] == ["pkg::Point", "pkg::Transfer", "pkg::Moved"]
    assert "pkg::IToken" in model["interfaces"]


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("abigen ")


def test_main_returns_exit_codes(tmp_path, capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out.startswith("abigen ")

    abi = tmp_path / "broken.json"
    abi.write_text("not json")
    assert main(["--log-level", "CRITICAL", "generate", str(abi), "-n", "Token"]) == 2
    err = json.loads(capsys.readouterr().err)
    assert err["error"]["data"]["error"]["code"] == "ABIGEN/MALFORMED_SOURCE"


def test_main_reports_usage_errors(capsys):
    assert main(["generate"]) == 2
    assert "SOURCE" in capsys.readouterr().err
    assert main(["--log-format", "yaml", "version"]) == 2


def test_log_level_from_environment():
    result = runner.invoke(app, ["version"], env={"ABIGEN_LOG_LEVEL": "DEBUG"})
    assert result.exit_code == 0
    assert logging.getLogger("abigen").level == logging.DEBUG
