# clv_dcf/parameters.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .config import MAX_HORIZON, MIN_HORIZON


@dataclass(frozen=True)
class CLVParameters:
    """
    Business inputs of the discounted CLV model.

    - margin: per-period gross margin before probability weighting
    - repeat_probabilities: percent (0..100) per period, index 0 = acquisition period
    - acquisition_cost: one-time cost subtracted from total present value
    - discount_rate: percent per period (10 means 10%)
    - time_horizon: number of periods evaluated, in [MIN_HORIZON, MAX_HORIZON]

    Instances are immutable; mutation helpers return new instances.
    """
    margin: float = 60.0
    repeat_probabilities: Tuple[float, ...] = field(default=(100.0, 90.0, 85.0, 85.0, 60.0, 30.0))
    acquisition_cost: float = 6.0
    discount_rate: float = 10.0
    time_horizon: int = 6

    def __post_init__(self) -> None:
        # Accept any sequence (lists from JSON/CLI) but store a tuple
        object.__setattr__(self, "repeat_probabilities", tuple(self.repeat_probabilities))
        if not (MIN_HORIZON <= int(self.time_horizon) <= MAX_HORIZON):
            raise ValueError(
                f"time_horizon must be within [{MIN_HORIZON}, {MAX_HORIZON}], got {self.time_horizon}"
            )
        object.__setattr__(self, "time_horizon", int(self.time_horizon))

    def repeat_probability(self, period: int) -> float:
        """Probability (%) for a period; entries missing from the sequence read as 0."""
        if 0 <= period < len(self.repeat_probabilities):
            value = self.repeat_probabilities[period]
            return 0.0 if value is None else float(value)
        return 0.0

    def to_dict(self) -> dict:
        return {
            "margin": self.margin,
            "repeat_probabilities": list(self.repeat_probabilities),
            "acquisition_cost": self.acquisition_cost,
            "discount_rate": self.discount_rate,
            "time_horizon": self.time_horizon,
        }


DEFAULT_PARAMETERS = CLVParameters()
