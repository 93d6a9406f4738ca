from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from starstruct.config import Settings, load_settings
from starstruct.convert import to_map
from starstruct.errors import StarstructError
from starstruct.flattener import flatten
from starstruct.generate import generate_shape
from starstruct.log import configure_logging
from starstruct.merge import merge_field_lists, merge_fields
from starstruct.records import (
    read_csv_rows,
    read_field_list,
    read_records,
    write_csv,
    write_field_list,
)
from starstruct.table import from_rows, to_table

app = typer.Typer(help="starstruct CLI")

MERGE_POLICIES = {
    "external": merge_field_lists,
    "union": merge_fields,
}


def _settings(config: Optional[Path]) -> Settings:
    try:
        return load_settings(config)
    except (OSError, ValueError) as e:
        raise typer.BadParameter(f"cannot load settings: {e}")


def _fail(e: Exception) -> None:
    typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _emit(lines: List[str], out: Optional[Path]) -> None:
    text = "".join(line + "\n" for line in lines)
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
        typer.secho(f"Wrote {out}", fg=typer.colors.GREEN, err=True)
    else:
        typer.echo(text, nl=False)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    configure_logging(verbose)


@app.command("fields")
def fields_cmd(
    src: Path = typer.Argument(..., help="Records (.json, .jsonl, .yaml)"),
    exclude_absent: bool = typer.Option(False, "--exclude-absent", help="Skip absent branches"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the field list here"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML"),
):
    """Print the union field list of all records, one path per line."""
    settings = _settings(config)
    try:
        records = read_records(src)
        fields = generate_shape(records, exclude_absent=exclude_absent or None, settings=settings)
    except (StarstructError, OSError, ValueError) as e:
        _fail(e)
    _emit(fields, out)


@app.command("flatten")
def flatten_cmd(
    src: Path = typer.Argument(..., help="Records (.json, .jsonl, .yaml)"),
    fields: Optional[Path] = typer.Option(None, "--fields", "-f", help="Field list to select"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write JSONL here"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML"),
):
    """Flatten every record to a path -> text object (JSONL)."""
    settings = _settings(config)
    try:
        records = read_records(src)
        selected = read_field_list(fields) if fields else None
        lines = [json.dumps(flatten(r, selected, settings=settings), ensure_ascii=False) for r in records]
    except (StarstructError, OSError, ValueError) as e:
        _fail(e)
    _emit(lines, out)


@app.command("merge")
def merge_cmd(
    baseline: Path = typer.Argument(..., help="Published field list"),
    candidate: Path = typer.Argument(..., help="Regenerated field list"),
    policy: str = typer.Option("external", "--policy", "-p", help="external | union"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the merged list here"),
):
    """Merge a candidate field list into a baseline without reordering it."""
    fn = MERGE_POLICIES.get(policy)
    if fn is None:
        raise typer.BadParameter(f"Unknown policy '{policy}'. Choose one of {list(MERGE_POLICIES)}")
    try:
        merged = fn(read_field_list(baseline), read_field_list(candidate))
    except (OSError, ValueError) as e:
        _fail(e)
    _emit(merged, out)


@app.command("export")
def export_cmd(
    src: Path = typer.Argument(..., help="Records (.json, .jsonl, .yaml)"),
    out: Path = typer.Option(Path("export.csv"), "--out", "-o", help="Output CSV"),
    header: Optional[Path] = typer.Option(None, "--header", help="Published header to keep column order"),
    write_header: Optional[Path] = typer.Option(None, "--write-header", help="Save the reconciled header"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML"),
):
    """Export records as aligned CSV rows."""
    settings = _settings(config)
    try:
        records = read_records(src)
        published = read_field_list(header) if header else None
        columns, rows = to_table(records, published, settings=settings)
    except (StarstructError, OSError, ValueError) as e:
        _fail(e)

    write_csv(columns, rows, out)
    if write_header:
        write_field_list(columns, write_header)
    typer.secho(f"Wrote {out} ({len(rows)} rows, {len(columns)} columns)", fg=typer.colors.GREEN)


@app.command("import")
def import_cmd(
    csv: Path = typer.Argument(..., help="CSV with a header row"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write JSONL here"),
):
    """Decode CSV rows into records (all values as text)."""
    try:
        records = from_rows(read_csv_rows(csv))
    except (StarstructError, OSError, ValueError) as e:
        _fail(e)
    lines = [json.dumps(to_map(r, include_zero_values=True), ensure_ascii=False) for r in records]
    _emit(lines, out)


if __name__ == "__main__":
    app()
