"""Tests for the CLI commands."""

import pytest
from openpyxl import load_workbook
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from week_planner import cli
from week_planner.cli import main
from week_planner.db import init_db, make_engine
from week_planner.db.store import SqlAllocationStore


@pytest.fixture
def cli_db(monkeypatch, engine, seeded):
    """Point the CLI at the seeded in-memory database."""
    monkeypatch.setattr(cli, "init_db", lambda: init_db(engine))
    monkeypatch.setattr(cli, "SessionLocal", seeded)
    monkeypatch.setattr(cli, "SqlAllocationStore", lambda: SqlAllocationStore(seeded))
    return seeded


def test_split_command(capsys):
    main(["split", "23"])
    assert capsys.readouterr().out.strip() == "lundi=5 mardi=5 mercredi=5 jeudi=4 vendredi=4 samedi=0"


def test_distribute_command(capsys):
    main(["distribute", "--policy", "moitie_debut_fin", "--total", "11", "--buckets", "5"])
    out = capsys.readouterr().out
    assert "Target: 11" in out
    assert "[2, 2, 1, 3, 3]" in out


def test_init_db_command(monkeypatch, capsys):
    eng = make_engine("sqlite://", poolclass=StaticPool)
    monkeypatch.setattr(cli, "init_db", lambda: init_db(eng))
    main(["init-db"])
    assert "Tables ready" in capsys.readouterr().out
    assert "planning_hebdo" in inspect(eng).get_table_names()
    eng.dispose()


# ═══════════════════════════════════════════════════════════════════
# Commands backed by the database
# ═══════════════════════════════════════════════════════════════════


def test_quick_then_analyze(cli_db, capsys):
    main(["quick", "--order", "100", "--week", "10", "--year", "2026", "--qty", "100"])
    assert capsys.readouterr().out.startswith("created: planning id=")

    main(["analyze", "--week", "10", "--year", "2026", "--capacity", "20"])
    out = capsys.readouterr().out
    # 20 units/day at 0.5 h on a 20 h day
    assert out.count("50.0% nominal") == 5
    assert "Total 50.0 h / 120.0 h" in out


def test_export_command(cli_db, tmp_path, capsys):
    main(["quick", "--order", "100", "--week", "10", "--year", "2026", "--qty", "10"])
    out_path = tmp_path / "charge.xlsx"
    main(["export", "--week", "10", "--year", "2026", "--capacity", "20", "--out", str(out_path)])
    assert "Exported:" in capsys.readouterr().out
    assert load_workbook(out_path).sheetnames == ["Jours", "Articles", "Grille", "Synthese"]


@pytest.mark.parametrize("argv", [
    ["quick", "--order", "100", "--week", "10", "--year", "2026", "--qty", "0"],
    ["quick", "--order", "100", "--week", "52", "--year", "1999", "--qty", "5"],
    ["quick", "--order", "999", "--week", "10", "--year", "2026", "--qty", "5"],
    ["analyze", "--week", "52", "--year", "1999"],
])
def test_bad_input_goes_through_argparse(cli_db, capsys, argv):
    with pytest.raises(SystemExit) as ei:
        main(argv)
    assert ei.value.code == 2
    assert "error:" in capsys.readouterr().err
