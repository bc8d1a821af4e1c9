"""Report export and formatting tests."""

import json

import pytest

from export_calc.services.formatting import format_currency, format_percentage
from export_calc.services.pricing_engine import (
    CalculationResult,
    DubaiParams,
    Market,
    ProductBreakdown,
    ProductLine,
    calculate,
)
from export_calc.services.report import LABELS, ReportExporter, labels


def _result(**overrides) -> CalculationResult:
    data = dict(
        total_factory_cost_usd=1700.0,
        total_sale_price_usd=3150.5,
        total_sale_price_secondary_currency=11571.79,
        secondary_currency_code="AED",
        gross_profit_usd=425.0,
        cost_increase_rate=85.32,
        total_expenses=1025.5,
        shipping_and_customs_cost_usd=738.84,
        per_unit_gross_profit_usd=212.5,
        total_gross_margin_usd=1450.5,
        total_quantity=2,
        product_breakdown=(
            ProductBreakdown(name="Sofa", factory_price=1200.0, final_sale_price=2223.88),
            ProductBreakdown(name='Chair "Lux"', factory_price=500.0, final_sale_price=926.62),
        ),
    )
    data.update(overrides)
    return CalculationResult(**data)


class TestFormatCurrency:
    def test_usd(self):
        assert format_currency(1700, "USD") == "$1,700.00"

    def test_aed(self):
        assert format_currency(1234.5, "AED") == "AED 1,234.50"

    def test_rsd(self):
        assert format_currency(1234567.891, "RSD") == "1.234.567,89 RSD"

    def test_negative(self):
        assert format_currency(-5, "USD") == "-$5.00"
        assert format_currency(-1500, "RSD") == "-1.500,00 RSD"

    def test_plain_space_separator(self):
        assert "\u00a0" not in format_currency(1234.5, "AED")
        assert "\u00a0" not in format_currency(1234.5, "RSD")

    def test_lowercase_code(self):
        assert format_currency(1, "aed") == "AED 1.00"

    def test_unsupported_currency(self):
        with pytest.raises(ValueError):
            format_currency(1, "EUR")

    def test_percentage(self):
        assert format_percentage(85.3071) == "%85.31"
        assert format_percentage(0) == "%0.00"


class TestLabels:
    def test_languages_share_keys(self):
        assert set(LABELS["tr"]) == set(LABELS["en"])

    def test_unknown_language(self):
        with pytest.raises(ValueError):
            labels("de")


class TestCSV:
    def test_bom_and_layout(self):
        csv = ReportExporter.to_csv(_result(), "en")
        assert csv.startswith("\ufeff")
        lines = csv.lstrip("\ufeff").split("\n")
        assert lines[0] == "Simulation Results"
        assert lines[1] == ""
        assert lines[2] == "Total Factory Cost,1700"
        assert lines[3] == "Total Shipping & Customs Cost,738.84"
        assert lines[4] == "Per-Unit Gross Profit,212.5"
        assert lines[5] == "Total Gross Profit,425"
        assert lines[6] == "Total Gross Margin,1450.5"
        assert lines[7] == "Total Gross Margin (%),85.32"
        assert lines[8] == ""
        assert lines[9] == "Product Name,Factory Cost,Sale Price"
        assert lines[10] == '"Sofa",1200,2223.88'

    def test_quotes_escaped(self):
        csv = ReportExporter.to_csv(_result(), "en")
        assert '"Chair ""Lux""",500,926.62' in csv

    def test_turkish_default(self):
        csv = ReportExporter.to_csv(_result())
        assert "Toplam Fabrika Maliyeti,1700" in csv

    def test_empty_breakdown(self):
        csv = ReportExporter.to_csv(_result(product_breakdown=()), "en")
        assert csv.rstrip().endswith("Product Name,Factory Cost,Sale Price")

    def test_small_values_written_as_decimals(self):
        csv = ReportExporter.to_csv(_result(per_unit_gross_profit_usd=0.00005), "en")
        assert "Per-Unit Gross Profit,0.00005\n" in csv

    def test_exponent_only_outside_decimal_range(self):
        csv = ReportExporter.to_csv(
            _result(per_unit_gross_profit_usd=1e-7, total_gross_margin_usd=1e21), "en"
        )
        assert "Per-Unit Gross Profit,1e-7\n" in csv
        assert "Total Gross Margin,1e+21\n" in csv

    def test_large_integral_value(self):
        csv = ReportExporter.to_csv(_result(total_gross_margin_usd=1e20), "en")
        assert "Total Gross Margin,100000000000000000000\n" in csv

    def test_non_finite_values(self):
        csv = ReportExporter.to_csv(
            _result(total_factory_cost_usd=float("inf"), per_unit_gross_profit_usd=float("nan")),
            "en",
        )
        assert "Total Factory Cost,Infinity\n" in csv
        assert "Per-Unit Gross Profit,NaN\n" in csv


class TestText:
    def test_summary_order(self):
        text = ReportExporter.to_text(_result(), "en")
        lines = text.split("\n")
        assert lines[0] == "Export Price Simulation Report"
        assert lines[2] == "Total Factory Cost: $1,700.00"
        assert lines[3] == "Total Shipping & Customs Cost: $738.84"
        assert lines[4] == "Per-Unit Gross Profit: $212.50"
        assert lines[5] == "Total Gross Profit: $425.00"
        assert lines[6] == "Total Gross Margin: $1,450.50 (%85.32)"

    def test_product_rows(self):
        text = ReportExporter.to_text(_result(), "en")
        row = next(line for line in text.split("\n") if line.startswith("Sofa"))
        assert "$1,200.00" in row
        assert row.endswith("$2,223.88")


class TestJSON:
    def test_round_trip_fields(self):
        data = json.loads(ReportExporter.to_json(_result()))
        assert data["secondary_currency_code"] == "AED"
        assert data["product_breakdown"][1]["name"] == 'Chair "Lux"'
        assert data["total_quantity"] == 2

    def test_pretty(self):
        assert "\n" in ReportExporter.to_json(_result(), pretty=True)


class TestCostComposition:
    def test_percentages(self):
        chart = ReportExporter.cost_composition(_result(), "en")
        assert chart["labels"] == ["Factory Cost", "Profit", "Expenses & Taxes"]
        assert chart["values"] == [1700.0, 425.0, 1025.5]
        assert sum(chart["percentages"]) == pytest.approx(100, abs=0.02)

    def test_components_add_to_sale_price(self):
        lines = [ProductLine(name="Sofa", quantity="1", price="1700")]
        result = calculate(Market.DUBAI, lines, DubaiParams(25, 5, 2323.5, 3.673, 10))
        chart = ReportExporter.cost_composition(result)
        assert sum(chart["values"]) == pytest.approx(result.total_sale_price_usd)

    def test_zero_total(self):
        chart = ReportExporter.cost_composition(
            _result(total_factory_cost_usd=0.0, gross_profit_usd=0.0, total_expenses=0.0)
        )
        assert chart["percentages"] == [0.0, 0.0, 0.0]


class TestUnitSalePrice:
    def test_usd(self):
        assert ReportExporter.unit_sale_price(_result(), "USD") == pytest.approx(1575.25)

    def test_secondary(self):
        assert ReportExporter.unit_sale_price(_result(), "AED") == pytest.approx(5785.895)

    def test_zero_quantity(self):
        assert ReportExporter.unit_sale_price(_result(total_quantity=0)) == 0
