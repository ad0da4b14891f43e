from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .models import StyleConfig
from .render.run import render_file, run_batch

app = typer.Typer(help="Render invoices, receipts and payout statements to PDF")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_style(style: Optional[Path]) -> StyleConfig:
    if style is None:
        return StyleConfig()
    return StyleConfig.from_preset(style)


@app.command()
def render(
    spec: Path = typer.Argument(..., exists=True, dir_okay=False, help="Document spec (JSON)"),
    style: Optional[Path] = typer.Option(None, "--style", help="Style preset (JSON)"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    preview: bool = typer.Option(False, "--preview", help="Also write a PNG preview"),
) -> None:
    if out:
        config.set_out_dir(out)
    pdf_path = render_file(spec, _load_style(style), preview=preview)
    typer.echo(f"READY: {pdf_path}")


@app.command()
def batch(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of document specs"),
    style: Optional[Path] = typer.Option(None, "--style", help="Style preset (JSON)"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    preview: bool = typer.Option(False, "--preview", help="Also write PNG previews"),
) -> None:
    if out:
        config.set_out_dir(out)
    specs = sorted(directory.glob("*.json"))
    if not specs:
        typer.echo("No document specs found")
        return
    results = run_batch(specs, _load_style(style), preview=preview)
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for slug in results["FAILED"]:
        typer.echo(f"FAILED: {slug}")
    if results["FAILED"]:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
