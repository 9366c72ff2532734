# clv_dcf/export.py
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from .config import EXPORT_PATH
from .discounting import CLVResult
from .formatting import to_fixed

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Year",
    "Margin ($)",
    "Repeat Prob (%)",
    "Adjusted Margin ($)",
    "Discount Factor",
    "Present Value ($)",
    "Calculation",
]

SUMMARY_LABELS = {
    "Total PV:": "total_pv",
    "Acquisition Cost:": "acquisition_cost",
    "Final CLV:": "clv",
}


def _summary_row(label: str, value: float) -> List[str]:
    return ["", "", "", "", "", label, to_fixed(value, 2)]


def export_rows(result: CLVResult, acquisition_cost: float) -> List[List[str]]:
    """
    Flat table: header, one row per period, then Total PV / Acquisition Cost
    (negated) / Final CLV summary rows. All cells are already-formatted text.
    """
    table = [list(EXPORT_COLUMNS)]
    for row in result.rows:
        table.append([
            row.label,
            to_fixed(row.margin, 2),
            to_fixed(row.repeat_prob, 0),
            to_fixed(row.adjusted_margin, 2),
            to_fixed(row.discount_factor, 4),
            to_fixed(row.present_value, 2),
            row.calculation,
        ])

    table.append(_summary_row("Total PV:", result.total_pv))
    table.append(_summary_row("Acquisition Cost:", -acquisition_cost))
    table.append(_summary_row("Final CLV:", result.clv))
    return table


def export_csv(result: CLVResult, acquisition_cost: float) -> str:
    """Comma-joined export text, '\\n' line endings, no trailing newline, no quoting."""
    table = export_rows(result, acquisition_cost)
    df = pd.DataFrame(table[1:], columns=table[0])
    text = df.to_csv(index=False, lineterminator="\n", quoting=csv.QUOTE_NONE, escapechar="\\")
    return text[:-1] if text.endswith("\n") else text


def write_export(
    result: CLVResult,
    acquisition_cost: float,
    path: Optional[Union[str, Path]] = None,
) -> Path:
    out_path = Path(path) if path is not None else EXPORT_PATH
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(export_csv(result, acquisition_cost), encoding="utf-8")
    logger.info("Wrote CLV export (%d periods) to %s", len(result.rows), out_path)
    return out_path


def parse_export(text: str) -> Tuple[pd.DataFrame, Dict[str, float]]:
    """
    Read export text back.

    Returns (rows, summary):
    - rows: DataFrame with period, label, margin, repeat_prob, adjusted_margin,
      discount_factor, present_value, calculation (numbers at export precision)
    - summary: {'total_pv', 'acquisition_cost', 'clv'}; acquisition_cost is
      returned as the positive cost
    """
    raw = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)

    missing = [c for c in EXPORT_COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"Export is missing columns: {missing}")

    is_summary = raw["Year"].eq("") & raw["Present Value ($)"].isin(list(SUMMARY_LABELS))
    data = raw[~is_summary]

    rows = pd.DataFrame({
        "period": data["Year"].map(lambda s: 0 if s == "Acquisition" else int(s.split()[-1])),
        "label": data["Year"],
        "margin": data["Margin ($)"].map(float),
        "repeat_prob": data["Repeat Prob (%)"].map(float),
        "adjusted_margin": data["Adjusted Margin ($)"].map(float),
        "discount_factor": data["Discount Factor"].map(float),
        "present_value": data["Present Value ($)"].map(float),
        "calculation": data["Calculation"],
    }).reset_index(drop=True)

    summary = {
        SUMMARY_LABELS[label]: float(value)
        for label, value in zip(raw.loc[is_summary, "Present Value ($)"], raw.loc[is_summary, "Calculation"])
    }
    if "acquisition_cost" in summary:
        summary["acquisition_cost"] = -summary["acquisition_cost"]

    return rows, summary


def read_export(path: Union[str, Path]) -> Tuple[pd.DataFrame, Dict[str, float]]:
    return parse_export(Path(path).read_text(encoding="utf-8"))
