"""Tests for week_planner.export.report."""

from datetime import date

from openpyxl import load_workbook

from week_planner.analysis.load import analyze
from week_planner.export.report import export_week_load
from week_planner.planning.grid import GridRow, WeekGrid
from week_planner.planning.types import Order, Week, WeekBucket


def test_export_week_load(tmp_path):
    order = Order(id=1, article_id=5, article_code="ART-A", quantite=100, lot="L1")
    grid = WeekGrid(
        week=Week(id=1, numero=10, annee=2026, date_debut=date(2026, 3, 2)),
        rows=[GridRow(order=order, bucket=WeekBucket.from_lists(23, [5, 5, 5, 4, 4, 0]), record_id=1)],
    )
    analysis = analyze(grid.day_plans(), {5: 1.5}, 10.0)

    out = export_week_load(analysis, grid, str(tmp_path / "sub" / "charge.xlsx"))

    wb = load_workbook(out)
    assert wb.sheetnames == ["Jours", "Articles", "Grille", "Synthese"]
    ws = wb["Jours"]
    assert ws["A2"].value == "Lundi"
    assert ws["B2"].value == 7.5
    assert ws["D2"].value == "nominal"
    assert wb["Articles"]["C2"].value == 23
    assert wb["Synthese"]["B2"].value == "S10-2026"
