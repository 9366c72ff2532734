# clv_dcf/horizon.py
from __future__ import annotations

import logging
from dataclasses import replace

from .config import MAX_HORIZON, MIN_HORIZON, NEW_PERIOD_REPEAT_PROBABILITY
from .parameters import CLVParameters

logger = logging.getLogger(__name__)


def _fit(probs, n: int) -> tuple:
    """First `n` probabilities, zero-padded when the series is short."""
    probs = tuple(probs[:n])
    return probs + (0.0,) * (n - len(probs))


def grow_horizon(params: CLVParameters) -> CLVParameters:
    """
    Add one period, appending NEW_PERIOD_REPEAT_PROBABILITY to the probability series.
    At MAX_HORIZON the parameters are returned unchanged.
    """
    if params.time_horizon >= MAX_HORIZON:
        logger.debug("grow_horizon ignored: already at %d periods", MAX_HORIZON)
        return params

    return replace(
        params,
        time_horizon=params.time_horizon + 1,
        repeat_probabilities=_fit(params.repeat_probabilities, params.time_horizon)
        + (NEW_PERIOD_REPEAT_PROBABILITY,),
    )


def shrink_horizon(params: CLVParameters) -> CLVParameters:
    """
    Drop the last period and its probability. At MIN_HORIZON the parameters are
    returned unchanged.
    """
    if params.time_horizon <= MIN_HORIZON:
        logger.debug("shrink_horizon ignored: already at %d period", MIN_HORIZON)
        return params

    return replace(
        params,
        time_horizon=params.time_horizon - 1,
        repeat_probabilities=_fit(params.repeat_probabilities, params.time_horizon - 1),
    )


def resize_horizon(params: CLVParameters, target: int) -> CLVParameters:
    """Grow or shrink one period at a time until `target` (clamped to the bounds)."""
    target = max(MIN_HORIZON, min(MAX_HORIZON, int(target)))
    while params.time_horizon < target:
        params = grow_horizon(params)
    while params.time_horizon > target:
        params = shrink_horizon(params)
    return params


def set_repeat_probability(params: CLVParameters, index: int, value: float) -> CLVParameters:
    """
    Replace the probability (%) for period `index`, 0 <= index < time_horizon.
    A series shorter than the horizon is zero-padded up to `index` first.
    """
    if not (0 <= index < params.time_horizon):
        raise IndexError(
            f"period index {index} outside horizon [0, {params.time_horizon})"
        )

    probs = list(params.repeat_probabilities)
    if len(probs) <= index:
        probs.extend([0.0] * (index + 1 - len(probs)))
    probs[index] = value
    return replace(params, repeat_probabilities=tuple(probs))
