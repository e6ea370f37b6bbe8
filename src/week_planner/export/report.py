from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from openpyxl.chart import BarChart, Reference
from openpyxl.formatting.rule import ColorScaleRule
from openpyxl.utils import get_column_letter

from ..analysis.load import LoadAnalysis
from ..planning.grid import WeekGrid
from ..planning.types import DAYS


def days_frame(analysis: LoadAnalysis) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"jour": p.day.capitalize(), "heures": round(p.hours, 2),
             "charge_pct": round(p.utilization, 1), "statut": p.status}
            for p in analysis.per_day
        ],
        columns=["jour", "heures", "charge_pct", "statut"],
    )


def articles_frame(analysis: LoadAnalysis) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"article": a.article, "temps_theorique": a.temps_theorique,
             "planifie": a.planned_units, "temps_total": round(a.total_hours, 2)}
            for a in analysis.by_article
        ],
        columns=["article", "temps_theorique", "planifie", "temps_total"],
    )


def grid_frame(grid: WeekGrid) -> pd.DataFrame:
    records = []
    for r in grid.rows:
        rec = {
            "commande_id": r.order.id,
            "article": r.order.article_code,
            "lot": r.identifiant_lot or r.order.lot,
            "objectif": r.objectif,
        }
        planned = r.bucket.planned()
        for i, d in enumerate(DAYS):
            rec[d] = planned[i]
        rec["total_planifie"] = r.total_planifie
        rec["total_emballe"] = r.total_emballe
        rec["reste_a_facturer"] = r.reste_a_facturer
        records.append(rec)
    cols = ["commande_id", "article", "lot", "objectif", *DAYS, "total_planifie", "total_emballe", "reste_a_facturer"]
    return pd.DataFrame(records, columns=cols)


def export_week_load(analysis: LoadAnalysis, grid: WeekGrid, out_path: str) -> str:
    """Write the week's load analysis to an XLSX workbook and return its path."""
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    df_days = days_frame(analysis)
    df_articles = articles_frame(analysis)
    df_grid = grid_frame(grid)
    s = analysis.synthesis
    df_synth = pd.DataFrame(
        [
            ("semaine", grid.week.label),
            ("heures_totales", round(s.total_hours, 2)),
            ("capacite_totale", round(s.total_capacity, 2)),
            ("charge_moyenne_pct", round(s.average_utilization, 1)),
            ("pic_heures", round(s.peak_hours, 2)),
            ("pic_jour", s.peak_day or "-"),
        ],
        columns=["indicateur", "valeur"],
    )

    with pd.ExcelWriter(out, engine="openpyxl") as xw:
        df_days.to_excel(xw, sheet_name="Jours", index=False)
        df_articles.to_excel(xw, sheet_name="Articles", index=False)
        df_grid.to_excel(xw, sheet_name="Grille", index=False)
        df_synth.to_excel(xw, sheet_name="Synthese", index=False)

        ws = xw.sheets["Jours"]
        n = len(df_days)
        if n:
            ws.conditional_formatting.add(
                f"C2:C{n + 1}",
                ColorScaleRule(start_type="num", start_value=0, start_color="63BE7B",
                               mid_type="num", mid_value=85, mid_color="FFEB84",
                               end_type="num", end_value=100, end_color="F8696B"),
            )
            chart = BarChart()
            chart.title = "Heures par jour"
            chart.y_axis.title = "h"
            data = Reference(ws, min_col=2, min_row=1, max_row=n + 1)
            cats = Reference(ws, min_col=1, min_row=2, max_row=n + 1)
            chart.add_data(data, titles_from_data=True)
            chart.set_categories(cats)
            ws.add_chart(chart, "F2")

        for name, df in (("Jours", df_days), ("Articles", df_articles), ("Grille", df_grid), ("Synthese", df_synth)):
            sheet = xw.sheets[name]
            for idx, col in enumerate(df.columns, start=1):
                lengths = df[col].astype(str).str.len().to_numpy()
                width = int(np.max(lengths)) if lengths.size else 0
                sheet.column_dimensions[get_column_letter(idx)].width = max(len(str(col)), width) + 2

    return str(out)
