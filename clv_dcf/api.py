# clv_dcf/api.py
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.responses import Response
from pydantic import BaseModel

from .config import EXPORT_FILENAME, MAX_HORIZON, MIN_HORIZON, configure_logging
from .discounting import CLVResult, compute
from .export import export_csv
from .horizon import grow_horizon, shrink_horizon
from .inputs import parameters_from_mapping
from .parameters import DEFAULT_PARAMETERS, CLVParameters

logger = logging.getLogger(__name__)

app = FastAPI(title="Discounted CLV API", version="1.0")


# -----------------------
# Schemas
# -----------------------
class ParametersRequest(BaseModel):
    # Raw values on purpose: malformed numbers are coerced to 0, never rejected.
    margin: Any = None
    repeat_probabilities: Optional[List[Any]] = None
    acquisition_cost: Any = None
    discount_rate: Any = None
    time_horizon: Any = None


class ParametersModel(BaseModel):
    margin: float
    repeat_probabilities: List[float]
    acquisition_cost: float
    discount_rate: float
    time_horizon: int


class BreakdownRow(BaseModel):
    period: int
    label: str
    margin: float
    repeat_prob: float
    adjusted_margin: Optional[float]
    discount_factor: Optional[float]
    present_value: Optional[float]
    calculation: str


class CLVResponse(BaseModel):
    rows: List[BreakdownRow]
    total_pv: Optional[float]
    acquisition_cost: float
    clv: Optional[float]
    profitable: bool
    post_acquisition_years: int


class HorizonResponse(BaseModel):
    parameters: ParametersModel
    result: CLVResponse


# -----------------------
# Utilities
# -----------------------
def _to_params(req: ParametersRequest) -> CLVParameters:
    raw: Dict[str, Any] = req.model_dump(exclude_none=True)
    return parameters_from_mapping(raw)


def _finite(x: float) -> Optional[float]:
    return x if math.isfinite(x) else None


def _result_payload(params: CLVParameters, result: CLVResult) -> Dict[str, Any]:
    # JSON cannot carry inf/nan (e.g. a -100% discount rate); those go out as null
    return {
        "rows": [
            {
                "period": r.period,
                "label": r.label,
                "margin": r.margin,
                "repeat_prob": r.repeat_prob,
                "adjusted_margin": _finite(r.adjusted_margin),
                "discount_factor": _finite(r.discount_factor),
                "present_value": _finite(r.present_value),
                "calculation": r.calculation,
            }
            for r in result.rows
        ],
        "total_pv": _finite(result.total_pv),
        "acquisition_cost": params.acquisition_cost,
        "clv": _finite(result.clv),
        "profitable": result.profitable,
        "post_acquisition_years": result.post_acquisition_years,
    }


# -----------------------
# Endpoints
# -----------------------
@app.get("/")
def root():
    return {
        "service": "Discounted CLV API",
        "version": "1.0",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "openapi": "/openapi.json",
            "defaults": "/defaults",
            "compute": "POST /compute",
            "grow_horizon": "POST /horizon/grow",
            "shrink_horizon": "POST /horizon/shrink",
            "export": "POST /export",
        },
        "horizon_bounds": [MIN_HORIZON, MAX_HORIZON],
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/defaults", response_model=ParametersModel)
def defaults():
    return DEFAULT_PARAMETERS.to_dict()


@app.post("/compute", response_model=CLVResponse)
def compute_clv(req: ParametersRequest):
    """
    Full breakdown for the posted parameters (absent fields take defaults).
    """
    params = _to_params(req)
    result = compute(params)
    logger.info("Computed CLV=%s over %d periods", result.clv, params.time_horizon)
    return _result_payload(params, result)


@app.post("/horizon/grow", response_model=HorizonResponse)
def horizon_grow(req: ParametersRequest):
    """
    Adds one period (probability 20%) and returns the new parameters with the
    recomputed breakdown. At the upper bound the parameters come back unchanged.
    """
    params = grow_horizon(_to_params(req))
    return {"parameters": params.to_dict(), "result": _result_payload(params, compute(params))}


@app.post("/horizon/shrink", response_model=HorizonResponse)
def horizon_shrink(req: ParametersRequest):
    params = shrink_horizon(_to_params(req))
    return {"parameters": params.to_dict(), "result": _result_payload(params, compute(params))}


@app.post("/export")
def export(req: ParametersRequest):
    """
    CSV export of the breakdown, as a downloadable attachment.
    """
    params = _to_params(req)
    body = export_csv(compute(params), params.acquisition_cost)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


def main() -> None:
    """Serve the API with uvicorn (``pip install .[serve]``)."""
    import uvicorn

    configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
