# clv_dcf/discounting.py
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Tuple

import numpy as np
import pandas as pd

from .formatting import plain_number, to_fixed
from .parameters import CLVParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearlyBreakdownRow:
    period: int
    margin: float
    repeat_prob: float
    adjusted_margin: float
    discount_factor: float
    present_value: float
    calculation: str

    @property
    def label(self) -> str:
        return "Acquisition" if self.period == 0 else f"Year {self.period}"


@dataclass(frozen=True)
class CLVResult:
    rows: Tuple[YearlyBreakdownRow, ...]
    total_pv: float
    clv: float

    @property
    def profitable(self) -> bool:
        return self.clv >= 0

    @property
    def post_acquisition_years(self) -> int:
        return len(self.rows) - 1


def _calculation_text(
    period: int,
    margin: float,
    repeat_prob: float,
    adjusted_margin: float,
    present_value: float,
    discount_rate: float,
) -> str:
    """
    Human-readable step for one period:
      t = 0 : $margin × r = $adjusted
      t > 0 : $adjusted ÷ (1+i)^t ≈ $pv
    """
    if period == 0:
        return f"${plain_number(margin)} × {plain_number(repeat_prob / 100)} = ${to_fixed(adjusted_margin, 0)}"
    return (
        f"${to_fixed(adjusted_margin, 0)} ÷ (1+{plain_number(discount_rate / 100)})^{period}"
        f" ≈ ${to_fixed(present_value, 0)}"
    )


def compute(params: CLVParameters) -> CLVResult:
    """
    Discounted CLV breakdown, recomputed from scratch:
      adjusted_margin_t = margin * r_t / 100
      discount_factor_t = (1 + i / 100) ** t
      PV_t = adjusted_margin_t / discount_factor_t
      CLV = sum(PV_t) - acquisition_cost

    Float64 division semantics apply: a discount rate of -100% gives a zero
    factor for t >= 1 and the resulting inf/nan values are returned as-is.
    """
    margin = np.float64(params.margin)
    growth = 1 + np.float64(params.discount_rate) / 100

    rows = []
    total_pv = np.float64(0.0)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for t in range(params.time_horizon):
            repeat_prob = np.float64(params.repeat_probability(t))
            adjusted_margin = margin * (repeat_prob / 100)
            discount_factor = growth ** t
            present_value = adjusted_margin / discount_factor

            total_pv += present_value

            rows.append(
                YearlyBreakdownRow(
                    period=t,
                    margin=float(margin),
                    repeat_prob=float(repeat_prob),
                    adjusted_margin=float(adjusted_margin),
                    discount_factor=float(discount_factor),
                    present_value=float(present_value),
                    calculation=_calculation_text(
                        t,
                        float(margin),
                        float(repeat_prob),
                        float(adjusted_margin),
                        float(present_value),
                        float(params.discount_rate),
                    ),
                )
            )

        clv = total_pv - np.float64(params.acquisition_cost)

    if not math.isfinite(float(clv)):
        logger.warning(
            "Non-finite CLV (%s) for discount_rate=%s%%; discount factor reaches zero or below",
            clv, params.discount_rate,
        )

    return CLVResult(rows=tuple(rows), total_pv=float(total_pv), clv=float(clv))


def breakdown_frame(result: CLVResult) -> pd.DataFrame:
    """One row per period, in period order, with a display label column."""
    records = [dict(asdict(r), label=r.label) for r in result.rows]
    cols = [
        "period", "label", "margin", "repeat_prob", "adjusted_margin",
        "discount_factor", "present_value", "calculation",
    ]
    return pd.DataFrame(records, columns=cols)
