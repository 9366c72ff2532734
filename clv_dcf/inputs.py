# clv_dcf/inputs.py
from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Mapping, Optional

import pandas as pd

from .config import MAX_HORIZON, MIN_HORIZON
from .horizon import set_repeat_probability
from .parameters import DEFAULT_PARAMETERS, CLVParameters

logger = logging.getLogger(__name__)


def parse_number(raw: Any, default: float = 0.0) -> float:
    """
    Parse-or-default for raw form/CLI/JSON values.

    - numbers and numeric strings -> float (pd.to_numeric, errors coerced)
    - None, blanks, text, booleans, containers, nan/inf -> `default`

    Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return default
    if not pd.api.types.is_scalar(raw):
        return default

    try:
        value = float(pd.to_numeric(raw, errors="coerce"))
    except (TypeError, ValueError, OverflowError):
        logger.debug("Could not coerce %r to a number; using %s", raw, default)
        return default

    if not math.isfinite(value):
        return default
    return value


# -----------------------
# Field setters (raw input -> new parameters)
# -----------------------
def set_margin(params: CLVParameters, raw: Any) -> CLVParameters:
    return replace(params, margin=parse_number(raw))


def set_acquisition_cost(params: CLVParameters, raw: Any) -> CLVParameters:
    return replace(params, acquisition_cost=parse_number(raw))


def set_discount_rate(params: CLVParameters, raw: Any) -> CLVParameters:
    return replace(params, discount_rate=parse_number(raw))


def set_probability(params: CLVParameters, index: int, raw: Any) -> CLVParameters:
    return set_repeat_probability(params, index, parse_number(raw))


def _pick(raw: Mapping[str, Any], *keys: str) -> Optional[Any]:
    for k in keys:
        if k in raw:
            return raw[k]
    return None


def parameters_from_mapping(raw: Mapping[str, Any]) -> CLVParameters:
    """
    Build parameters from an untyped mapping (JSON body, form fields).

    Keys may be snake_case or camelCase (margin, repeatProbabilities,
    acquisitionCost, discountRate, timeHorizon). Absent keys keep their
    defaults; present but malformed numbers become 0. The horizon is clamped
    into [MIN_HORIZON, MAX_HORIZON].
    """
    base = DEFAULT_PARAMETERS

    margin = _pick(raw, "margin")
    cost = _pick(raw, "acquisition_cost", "acquisitionCost")
    rate = _pick(raw, "discount_rate", "discountRate")
    horizon = _pick(raw, "time_horizon", "timeHorizon")
    probs = _pick(raw, "repeat_probabilities", "repeatProbabilities")

    if probs is None:
        repeat_probabilities = base.repeat_probabilities
    elif isinstance(probs, (list, tuple)):
        repeat_probabilities = tuple(parse_number(p) for p in probs)
    else:
        logger.debug("repeat_probabilities is not a sequence (%r); using an empty series", probs)
        repeat_probabilities = ()

    time_horizon = base.time_horizon
    if horizon is not None:
        time_horizon = int(parse_number(horizon))
        time_horizon = max(MIN_HORIZON, min(MAX_HORIZON, time_horizon))

    return CLVParameters(
        margin=base.margin if margin is None else parse_number(margin),
        repeat_probabilities=repeat_probabilities,
        acquisition_cost=base.acquisition_cost if cost is None else parse_number(cost),
        discount_rate=base.discount_rate if rate is None else parse_number(rate),
        time_horizon=time_horizon,
    )
