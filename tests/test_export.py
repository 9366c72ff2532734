"""
Tests for the flat CSV export and reading it back.
"""
import math

import pytest

from clv_dcf.discounting import compute
from clv_dcf.export import (
    EXPORT_COLUMNS,
    export_csv,
    export_rows,
    parse_export,
    read_export,
    write_export,
)
from clv_dcf.formatting import plain_number, to_fixed
from clv_dcf.parameters import DEFAULT_PARAMETERS, CLVParameters

DEFAULT_EXPORT = "\n".join([
    "Year,Margin ($),Repeat Prob (%),Adjusted Margin ($),Discount Factor,Present Value ($),Calculation",
    "Acquisition,60.00,100,60.00,1.0000,60.00,$60 × 1 = $60",
    "Year 1,60.00,90,54.00,1.1000,49.09,$54 ÷ (1+0.1)^1 ≈ $49",
    "Year 2,60.00,85,51.00,1.2100,42.15,$51 ÷ (1+0.1)^2 ≈ $42",
    "Year 3,60.00,85,51.00,1.3310,38.32,$51 ÷ (1+0.1)^3 ≈ $38",
    "Year 4,60.00,60,36.00,1.4641,24.59,$36 ÷ (1+0.1)^4 ≈ $25",
    "Year 5,60.00,30,18.00,1.6105,11.18,$18 ÷ (1+0.1)^5 ≈ $11",
    ",,,,,Total PV:,225.32",
    ",,,,,Acquisition Cost:,-6.00",
    ",,,,,Final CLV:,219.32",
])


@pytest.mark.unit
class TestFormatting:
    """Number-to-text helpers used by the export."""

    @pytest.mark.parametrize("x,digits,expected", [
        (60, 2, "60.00"),
        (49.0909090909, 2, "49.09"),
        (0.125, 2, "0.13"),
        (1.005, 2, "1.00"),
        (2.5, 0, "3"),
        (-2.5, 0, "-3"),
        (1.61051, 4, "1.6105"),
        (-0.0, 2, "0.00"),
        (-0.001, 2, "-0.00"),
        (float("nan"), 2, "NaN"),
        (float("inf"), 2, "Infinity"),
        (float("-inf"), 0, "-Infinity"),
        (1e22, 2, "1e+22"),
        (-2.5e21, 4, "-2.5e+21"),
        (9.99e20, 0, "999000000000000000000"),
    ])
    def test_to_fixed(self, x, digits, expected):
        assert to_fixed(x, digits) == expected

    @pytest.mark.parametrize("x,expected", [
        (60, "60"),
        (60.0, "60"),
        (0.9, "0.9"),
        (0.85, "0.85"),
        (-1.0, "-1"),
        (0.075, "0.075"),
        (-0.0, "0"),
        (1e-7, "1e-7"),
    ])
    def test_plain_number(self, x, expected):
        assert plain_number(x) == expected


@pytest.mark.unit
class TestExportText:
    """The exact text contract."""

    def test_default_export_text(self):
        result = compute(DEFAULT_PARAMETERS)
        assert export_csv(result, DEFAULT_PARAMETERS.acquisition_cost) == DEFAULT_EXPORT

    def test_header_and_row_count(self):
        params = CLVParameters(repeat_probabilities=(100, 80, 60), time_horizon=3)
        table = export_rows(compute(params), params.acquisition_cost)
        assert table[0] == EXPORT_COLUMNS
        assert len(table) == 1 + 3 + 3
        assert [r[0] for r in table[1:4]] == ["Acquisition", "Year 1", "Year 2"]
        assert all(len(r) == 7 for r in table)

    def test_zero_acquisition_cost_has_no_negative_zero(self):
        params = CLVParameters(acquisition_cost=0)
        text = export_csv(compute(params), params.acquisition_cost)
        assert ",,,,,Acquisition Cost:,0.00" in text.splitlines()

    def test_no_trailing_newline(self):
        text = export_csv(compute(DEFAULT_PARAMETERS), 6)
        assert not text.endswith("\n")
        assert "\r" not in text

    def test_degenerate_rate_renders_non_finite(self):
        params = CLVParameters(discount_rate=-100, repeat_probabilities=(100, 50), time_horizon=2)
        lines = export_csv(compute(params), params.acquisition_cost).splitlines()
        assert lines[2] == "Year 1,60.00,50,30.00,0.0000,Infinity,$30 ÷ (1+-1)^1 ≈ $Infinity"
        assert lines[-1] == ",,,,,Final CLV:,Infinity"


@pytest.mark.unit
class TestRoundTrip:
    """Exported data rows read back within export precision."""

    @pytest.mark.parametrize("params", [
        DEFAULT_PARAMETERS,
        CLVParameters(margin=123.456, repeat_probabilities=(100, 72, 55, 41, 33, 25, 20, 15),
                      acquisition_cost=42.5, discount_rate=8.25, time_horizon=8),
        CLVParameters(margin=10, repeat_probabilities=(100,), acquisition_cost=20,
                      discount_rate=0, time_horizon=1),
    ])
    def test_round_trip(self, params):
        result = compute(params)
        rows, summary = parse_export(export_csv(result, params.acquisition_cost))

        assert len(rows) == len(result.rows)
        for got, want in zip(rows.itertuples(index=False), result.rows):
            assert got.period == want.period
            assert got.label == want.label
            assert got.margin == pytest.approx(want.margin, abs=0.005)
            assert got.repeat_prob == pytest.approx(want.repeat_prob, abs=0.5)
            assert got.adjusted_margin == pytest.approx(want.adjusted_margin, abs=0.005)
            assert got.discount_factor == pytest.approx(want.discount_factor, abs=0.00005)
            assert got.present_value == pytest.approx(want.present_value, abs=0.005)
            assert got.calculation == want.calculation

        assert summary["total_pv"] == pytest.approx(result.total_pv, abs=0.005)
        assert summary["acquisition_cost"] == pytest.approx(params.acquisition_cost, abs=0.005)
        assert summary["clv"] == pytest.approx(result.clv, abs=0.005)

    def test_parse_non_finite(self):
        params = CLVParameters(discount_rate=-100, repeat_probabilities=(100, 0), time_horizon=2)
        rows, summary = parse_export(export_csv(compute(params), params.acquisition_cost))
        assert math.isnan(rows.loc[1, "present_value"])
        assert math.isnan(summary["clv"])

    def test_parse_rejects_foreign_csv(self):
        with pytest.raises(ValueError):
            parse_export("a,b,c\n1,2,3")


@pytest.mark.integration
class TestWriteExport:
    """Writing the export to disk."""

    def test_write_and_read(self, tmp_path):
        result = compute(DEFAULT_PARAMETERS)
        path = write_export(result, 6, tmp_path / "nested" / "clv.csv")

        assert path.exists()
        assert path.read_text(encoding="utf-8") == DEFAULT_EXPORT

        rows, summary = read_export(path)
        assert len(rows) == 6
        assert summary["clv"] == pytest.approx(219.32)
