import json
from pathlib import Path

import pytest

from gachaforge.cli import run_checklist, run_simulator, run_validate

EXAMPLE_CATALOG = str(Path(__file__).resolve().parents[1] / "examples" / "catalog.json")


def test_validate_accepts_example_catalog(capsys):
    run_validate([EXAMPLE_CATALOG])
    assert "Catalog is valid." in capsys.readouterr().out


def test_validate_rejects_broken_catalog(tmp_path: Path, capsys):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"cards": [], "packs": []}), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        run_validate([str(path)])
    assert excinfo.value.code == 1
    assert "non-empty 'cards' array" in capsys.readouterr().out


def test_simulator_prints_table(capsys):
    run_simulator([EXAMPLE_CATALOG, "basic", "--rolls", "2000", "--seed", "1"])
    out = capsys.readouterr().out
    assert "common" in out
    assert "Forced rolls:" in out


def test_checklist_runs_on_example(capsys):
    run_checklist([EXAMPLE_CATALOG])
    assert capsys.readouterr().out


def test_simulator_reports_missing_catalog(tmp_path: Path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run_simulator([str(tmp_path / "missing.json"), "basic"])
    assert excinfo.value.code == 1
    assert "Catalog cannot be read" in capsys.readouterr().out


def test_simulator_reports_malformed_json(tmp_path: Path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        run_simulator([str(path), "basic"])
    assert excinfo.value.code == 1
    assert "Catalog is not valid JSON" in capsys.readouterr().out


def test_validate_reports_missing_catalog(tmp_path: Path, capsys):
    with pytest.raises(SystemExit):
        run_validate([str(tmp_path / "missing.json")])
    assert "Catalog cannot be read" in capsys.readouterr().out
