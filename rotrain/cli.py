# rotrain/cli.py

from __future__ import annotations

import json
from typing import Optional

import typer
from loguru import logger

from rotrain.core.errors import ConfigValidationError, RoTrainError
from rotrain.core.logger import setup_logging
from rotrain.schemas.simulation import SystemConfig
from rotrain.services.membranes import list_membranes
from rotrain.services.simulation.engine import simulate

app = typer.Typer(help="RO membrane train performance estimator")


def _read_config(json_path: Optional[str]) -> dict:
    if not json_path:
        return {}
    try:
        with open(json_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigValidationError(
            f"Cannot read config file {json_path}: {e}",
            [{"loc": ["json_path"], "msg": str(e)}],
        ) from e


@app.command("simulate")
def simulate_cmd(
    json_path: Optional[str] = typer.Argument(
        None, help="SystemConfig JSON file (defaults are used when omitted)"
    ),
    pretty: bool = True,
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Run one element-by-element calculation and print the result as JSON."""
    setup_logging("DEBUG" if verbose else "WARNING")

    try:
        out = simulate(_read_config(json_path))
    except RoTrainError as e:
        logger.error(f"Simulation failed: {e}")
        typer.echo(json.dumps({"code": e.code, "message": e.message, "detail": e.to_detail()}), err=True)
        raise typer.Exit(code=1)

    typer.echo(out.model_dump_json(indent=2 if pretty else None))


@app.command("defaults")
def defaults_cmd():
    """Print the default SystemConfig."""
    typer.echo(SystemConfig().model_dump_json(indent=2))


@app.command("membranes")
def membranes_cmd(family: Optional[str] = typer.Option(None, help="bwro / swro")):
    """List catalog membranes."""
    try:
        items = list_membranes(family)
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    for m in items:
        typer.echo(f"{m.id:<24} {m.name:<24} {m.salt_rejection_pct:>6}%  {m.flow_m3d} m3/d")


if __name__ == "__main__":
    app()
