# scripts/run_clv.py
from __future__ import annotations

import sys
from pathlib import Path
import argparse

# Add project root to Python path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from clv_dcf.config import EXPORT_PATH, MAX_HORIZON, MIN_HORIZON, configure_logging
from clv_dcf.discounting import breakdown_frame, compute
from clv_dcf.export import write_export
from clv_dcf.horizon import resize_horizon
from clv_dcf.inputs import (
    parse_number,
    set_acquisition_cost,
    set_discount_rate,
    set_margin,
    set_probability,
)
from clv_dcf.parameters import DEFAULT_PARAMETERS, CLVParameters


def build_parameters(args: argparse.Namespace) -> CLVParameters:
    params = DEFAULT_PARAMETERS

    # Resize first so that --probs can address every period of the new horizon
    if args.horizon is not None:
        params = resize_horizon(params, int(parse_number(args.horizon)))

    if args.margin is not None:
        params = set_margin(params, args.margin)
    if args.acquisition_cost is not None:
        params = set_acquisition_cost(params, args.acquisition_cost)
    if args.discount_rate is not None:
        params = set_discount_rate(params, args.discount_rate)

    if args.probs is not None:
        for idx, raw in enumerate(args.probs[: params.time_horizon]):
            params = set_probability(params, idx, raw)
        if len(args.probs) > params.time_horizon:
            print(f"[warn] Ignoring {len(args.probs) - params.time_horizon} probabilities beyond the horizon")

    return params


def main():
    parser = argparse.ArgumentParser(description="Discounted cash flow CLV for one customer.")
    parser.add_argument("--margin", help="Per-period margin ($)")
    parser.add_argument("--acquisition-cost", help="One-time acquisition cost ($)")
    parser.add_argument("--discount-rate", help="Discount rate per period (%%)")
    parser.add_argument(
        "--probs",
        nargs="+",
        help="Repeat purchase probabilities (%%), one per period starting at acquisition",
    )
    parser.add_argument("--horizon", help=f"Number of periods ({MIN_HORIZON}-{MAX_HORIZON})")
    parser.add_argument("--out", default=str(EXPORT_PATH), help="Export CSV path")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()

    configure_logging(args.log_level)

    params = build_parameters(args)
    result = compute(params)

    print("\n=== DISCOUNTING CALCULATIONS ===")
    print(breakdown_frame(result).drop(columns=["period"]).to_string(index=False))

    print(f"\nTotal PV         : {result.total_pv:,.2f}")
    print(f"Acquisition Cost : {-params.acquisition_cost:,.2f}")
    print(f"Final CLV        : {result.clv:,.2f}")
    print(
        f"[info] {result.post_acquisition_years}-year horizon post acquisition -> "
        f"{'Profitable' if result.profitable else 'Unprofitable'} Customer"
    )

    out_path = write_export(result, params.acquisition_cost, args.out)
    print("\nSaved outputs to:")
    print(f"  {out_path}")


if __name__ == "__main__":
    main()
