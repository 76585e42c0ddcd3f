"""
abigen.cli
==========

`abigen`: generate typed Python bindings from a Cairo contract ABI.

Examples
--------
    $ abigen generate target/dev/erc20.contract_class.json --name Erc20 --out erc20.py
    $ abigen generate abi.json --name Erc20 -x v3 \\
          --alias openzeppelin::token::erc20::erc20::ERC20Component::Event=Erc20Event
    $ abigen inspect abi.json
    $ abigen version

Configuration
-------------
Options override the config file (``--config`` or env ``ABIGEN_CONFIG_FILE``)
and the ``ABIGEN_*`` environment variables, see `abigen.config`.

Structured errors are printed to stderr as JSON and exit with code 2.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from . import logging as alog
from .config import load_config
from .errors import AbigenError, ConfigError
from .pipeline import generate as _generate
from .pipeline import tokenize as _tokenize
from .version import get_version

app = typer.Typer(
    name="abigen",
    help="Generate typed Python bindings from Cairo contract ABIs.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main"]

EXIT_ABIGEN_ERROR = 2


def _print_json(obj: Any, *, err: bool = False) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False), err=err)


def _fail(e: AbigenError) -> typer.Exit:
    _print_json({"error": e.to_dict()}, err=True)
    return typer.Exit(code=EXIT_ABIGEN_ERROR)


def _read_source(source: Path) -> str:
    try:
        return source.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError("cannot read ABI source", path=str(source), reason=str(e)) from e


def _parse_aliases(items: List[str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for item in items:
        path, sep, alias = item.rpartition("=")
        if not sep or not path.strip() or not alias.strip():
            raise ConfigError("alias must look like PATH=IDENTIFIER", alias=item)
        out[path.strip()] = alias.strip()
    return out


@app.callback()
def _root(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Minimum log level.", envvar="ABIGEN_LOG_LEVEL"
    ),
    log_format: Optional[str] = typer.Option(
        None, "--log-format", help="json | text (default: text on a TTY).", envvar="ABIGEN_LOG_FORMAT"
    ),
) -> None:
    """Configure logging for the whole process."""
    fmt = (log_format or "").strip().lower()
    if fmt not in ("", "json", "text"):
        raise typer.BadParameter("--log-format must be 'json' or 'text'")
    alog.configure(json={"json": True, "text": False}.get(fmt), level=log_level, stream=sys.stderr)


@app.command("generate")
def generate_cmd(
    source: Path = typer.Argument(..., help="ABI JSON or Sierra contract class file."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Contract class name."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write here instead of stdout."),
    alias: List[str] = typer.Option([], "--alias", "-a", help="Type alias PATH=IDENTIFIER (repeatable)."),
    execution_version: Optional[str] = typer.Option(
        None, "--execution-version", "-x", help="v1 (max_fee) or v3 (L1 resource bounds)."
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML/JSON config file."),
) -> None:
    """Generate bindings for one contract."""
    try:
        cfg = load_config(
            config,
            contract_name=name,
            execution_version=execution_version,
            types_aliases=_parse_aliases(alias),
            abi_source=str(source),
        )
        bindings = _generate(_read_source(source), cfg)
    except AbigenError as e:
        raise _fail(e)

    if out is None:
        typer.echo(bindings.source, nl=False)
    else:
        bindings.write_to_file(out)
        typer.echo(f"wrote {bindings.name} bindings to {out}", err=True)


@app.command("inspect")
def inspect_cmd(
    source: Path = typer.Argument(..., help="ABI JSON or Sierra contract class file."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML/JSON config file."),
) -> None:
    """Print the tokenized ABI model as JSON."""
    try:
        cfg = load_config(config, contract_name="Inspect", abi_source=str(source))
        abi = _tokenize(_read_source(source), cfg)
    except AbigenError as e:
        raise _fail(e)
    _print_json(abi.to_dict())


@app.command("version")
def version() -> None:
    """Print the abigen version."""
    typer.echo(f"abigen {get_version()}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI. Returns an integer exit code.
    """
    try:
        app(prog_name="abigen", args=argv)
    except SystemExit as e:
        # typer exits in standalone mode; usage errors and aborts carry their own code
        if e.code is None or isinstance(e.code, int):
            return e.code or 0
        typer.echo(e.code, err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
