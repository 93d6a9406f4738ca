from pathlib import Path
import json

from typer.testing import CliRunner

from starstruct.cli import app
from starstruct.flattener import flatten


runner = CliRunner()


def test_export_import_roundtrip(tmp_path: Path):
    """
    records → export CSV → import → every exported cell comes back as text.
    """
    records = [
        {"name": "Ana", "zip": "01234", "tags": ["x"], "address": {"city": "NY"}},
        {"name": "Bo", "tags": ["a", "b"], "manager": None},
    ]
    src = tmp_path / "records.jsonl"
    src.write_text("".join(json.dumps(r) + "\n" for r in records), encoding="utf-8")
    csv = tmp_path / "export.csv"

    result = runner.invoke(app, ["export", str(src), "-o", str(csv)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["import", str(csv)])
    assert result.exit_code == 0, result.output
    decoded = [json.loads(line) for line in result.stdout.splitlines()]

    assert len(decoded) == len(records)
    for rec, dec in zip(records, decoded):
        for key, value in flatten(rec).items():
            assert dec[key] == value
    assert decoded[1]["manager"] == "<nil>"
    assert decoded[0]["manager"] == ""
