"""Tests for week_planner.planning.conflicts and the grid figures."""

from datetime import date

from week_planner.planning.conflicts import detect_conflicts, suggest
from week_planner.planning.grid import GridRow, WeekGrid
from week_planner.planning.types import Order, Week, WeekBucket


def _types(findings):
    return [f.type for f in findings]


def test_conflicts_flag_over_planning_and_over_packaging():
    bucket = WeekBucket.from_lists(10, [30, 30, 0, 0, 0, 0], [40, 30, 0, 0, 0, 0])
    found = detect_conflicts(bucket, order_quantity=50, stock_actuel=0)
    assert _types(found) == ["surcharge", "stock_insuffisant", "pas_de_stock"]
    assert [f.severity for f in found] == ["error", "error", "warning"]


def test_conflicts_clean_bucket():
    bucket = WeekBucket.from_lists(10, [2, 2, 2, 2, 2, 0], [1, 0, 0, 0, 0, 0])
    assert detect_conflicts(bucket, order_quantity=100, stock_actuel=5) == []


def test_suggest_unbalanced_days_and_low_buffer():
    bucket = WeekBucket.from_lists(100, [100, 0, 0, 0, 0, 0])
    found = suggest(bucket, stock_actuel=3)
    assert _types(found) == ["equilibrage", "stock_tampon"]
    assert "10" in found[1].message


def test_suggest_nothing_for_empty_bucket():
    assert suggest(WeekBucket(), stock_actuel=None) == []


def test_grid_day_plans_and_article_ids():
    week = Week(id=1, numero=10, annee=2026, date_debut=date(2026, 3, 2))
    a = Order(id=1, article_id=5, article_code="A")
    b = Order(id=2, article_id=5, article_code="A")
    c = Order(id=3, article_id=None, article_code="C")
    grid = WeekGrid(week=week, rows=[
        GridRow(order=a, bucket=WeekBucket.from_lists(10, [2, 2, 2, 2, 2, 0]), record_id=11),
        GridRow(order=b, bucket=WeekBucket.from_lists(0, [1, 0, 0, 0, 0, 0], [1, 0, 0, 0, 0, 0])),
        GridRow(order=c, bucket=WeekBucket()),
    ])
    assert grid.day_plans()[a] == [2, 2, 2, 2, 2, 0]
    assert grid.article_ids() == [5]
    assert grid.row_for(2).reste_a_facturer == 0
    assert grid.row_for(2).ecart_planification == 1
    assert grid.row_for(99) is None
    recap = grid.recap()
    assert recap["total_planifie_semaine"] == 11
    assert recap["total_reste_a_facturer"] == 10
    assert recap["ecart_global_planification"] == 1
