# clv_dcf/formatting.py
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal

import numpy as np

# Wide enough to quantize any finite float64 without InvalidOperation
_EXACT = Context(prec=800)


def to_fixed(x: float, digits: int) -> str:
    """
    Fixed-point text with `digits` decimals, rounding half away from zero on the
    exact binary value of `x` (same digits a spreadsheet or browser export shows).

    Non-finite values render as 'NaN' / 'Infinity' / '-Infinity'; negative zero
    renders as zero while small negatives keep their sign (-0.001 -> '-0.00').
    Magnitudes of 1e21 and above switch to exponent form (1e22 -> '1e+22').
    """
    x = float(x)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"

    if x == 0:
        x = 0.0
    if abs(x) >= 1e21:
        return plain_number(x)

    quantum = Decimal(1).scaleb(-digits)
    q = Decimal(x).quantize(quantum, rounding=ROUND_HALF_UP, context=_EXACT)
    return f"{q:.{digits}f}"


def plain_number(x: float) -> str:
    """
    Shortest round-trip text for a number: 60 -> '60', 0.9 -> '0.9', 1e-7 -> '1e-7'.
    """
    x = float(x)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x == 0:
        return "0"

    ax = abs(x)
    if ax >= 1e21 or ax < 1e-6:
        return np.format_float_scientific(x, trim="-", exp_digits=1).replace(".e", "e")
    return np.format_float_positional(x, trim="-")
