"""Tests for the typer CLI."""
from typer.testing import CliRunner
from crewhours.cli import app

runner = CliRunner()


def test_parse_prints_label_totals(tmp_path):
    export = tmp_path / "export.csv"
    export.write_text(
        "Date,Job,Name,Tags,Regular Time,OT\n"
        "01/06/2025,Lorie Scholten,Drew Gipson,,4:30,\n"
        "01/07/2025,Lorie Scholten,Drew Gipson,QC,5:00,1:00\n"
    )
    result = runner.invoke(app, ["parse", str(export)])
    assert result.exit_code == 0
    assert "2 shifts, 1 job labels" in result.stdout
    assert "Lorie Scholten" in result.stdout
    assert "1 special" in result.stdout


def test_parse_empty_export_fails(tmp_path):
    export = tmp_path / "empty.csv"
    export.write_text("Date,Job,Name\n")
    result = runner.invoke(app, ["parse", str(export)])
    assert result.exit_code == 1
