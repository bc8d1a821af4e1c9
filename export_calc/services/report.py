"""Report export for calculation results: CSV, text, JSON and chart data.

Field order is fixed: factory cost, shipping + customs, per-unit gross
profit, gross profit, gross margin (with cost increase rate), then one row
per product. Consumers only read the result; nothing here mutates it.
"""

from __future__ import annotations

import dataclasses
import json
import math
import re
from decimal import Decimal

from export_calc.services.formatting import format_currency, format_percentage
from export_calc.services.pricing_engine import CalculationResult

LABELS: dict[str, dict[str, str]] = {
    "tr": {
        "results_title": "Simülasyon Sonuçları",
        "report_title": "İhracat Fiyat Simülasyonu Raporu",
        "total_factory_cost": "Toplam Fabrika Maliyeti",
        "total_shipping_and_customs_cost": "Toplam Nakliye ve Gümrük Maliyeti",
        "per_unit_gross_profit": "Birim Başına Brüt Kâr",
        "total_gross_profit": "Toplam Brüt Kâr",
        "total_gross_margin": "Toplam Brüt Marj",
        "price_breakdown_title": "Ürün Bazlı Fiyat Dağılımı",
        "product_name": "Ürün Adı",
        "factory_cost": "Fabrika Maliyeti",
        "unit_sale_price": "Satış Fiyatı",
        "profit": "Kâr",
        "expenses_and_taxes": "Giderler ve Vergiler",
        "cost_composition_title": "Maliyet Dağılımı",
        "alert_message": "Lütfen tüm alanları geçerli sayısal değerlerle doldurun.",
    },
    "en": {
        "results_title": "Simulation Results",
        "report_title": "Export Price Simulation Report",
        "total_factory_cost": "Total Factory Cost",
        "total_shipping_and_customs_cost": "Total Shipping & Customs Cost",
        "per_unit_gross_profit": "Per-Unit Gross Profit",
        "total_gross_profit": "Total Gross Profit",
        "total_gross_margin": "Total Gross Margin",
        "price_breakdown_title": "Price Breakdown by Product",
        "product_name": "Product Name",
        "factory_cost": "Factory Cost",
        "unit_sale_price": "Sale Price",
        "profit": "Profit",
        "expenses_and_taxes": "Expenses & Taxes",
        "cost_composition_title": "Cost Composition",
        "alert_message": "Please fill in all fields with valid numeric values.",
    },
}

LANGUAGES = tuple(LABELS)

_EXPONENT = re.compile(r"e([+-])0*(\d)")


def labels(language: str = "tr") -> dict[str, str]:
    try:
        return LABELS[language]
    except KeyError:
        raise ValueError(f"Unsupported language: {language}") from None


def _number(value: float) -> str:
    """Render a CSV number: plain decimals in [1e-6, 1e21), exponent form outside."""
    if not isinstance(value, float):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(repr(value)), "f")
    # 1e-07 -> 1e-7
    return _EXPONENT.sub(r"e\1\2", repr(value))


def _usd(value: float) -> str:
    return format_currency(value, "USD")


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


class ReportExporter:
    """Export a calculation result in various formats."""

    @staticmethod
    def summary_rows(result: CalculationResult, language: str = "tr") -> list[tuple[str, float]]:
        """Label / raw value pairs in report order."""
        t = labels(language)
        return [
            (t["total_factory_cost"], result.total_factory_cost_usd),
            (t["total_shipping_and_customs_cost"], result.shipping_and_customs_cost_usd),
            (t["per_unit_gross_profit"], result.per_unit_gross_profit_usd),
            (t["total_gross_profit"], result.gross_profit_usd),
            (t["total_gross_margin"], result.total_gross_margin_usd),
            (f"{t['total_gross_margin']} (%)", result.cost_increase_rate),
        ]

    @staticmethod
    def to_csv(result: CalculationResult, language: str = "tr") -> str:
        """CSV export with a UTF-8 BOM, summary block first, then the breakdown."""
        t = labels(language)
        lines = [t["results_title"], ""]
        lines += [
            f"{label},{_number(value)}"
            for label, value in ReportExporter.summary_rows(result, language)
        ]
        lines.append("")
        lines.append(",".join([t["product_name"], t["factory_cost"], t["unit_sale_price"]]))
        for item in result.product_breakdown:
            lines.append(",".join([
                _quote(item.name),
                _number(item.factory_price),
                _number(item.final_sale_price),
            ]))
        return "\ufeff" + "\n".join(lines)

    @staticmethod
    def to_text(result: CalculationResult, language: str = "tr") -> str:
        """Printable report; the same layout as the PDF export."""
        t = labels(language)
        out = [t["report_title"], ""]
        out.append(f"{t['total_factory_cost']}: {_usd(result.total_factory_cost_usd)}")
        out.append(
            f"{t['total_shipping_and_customs_cost']}: {_usd(result.shipping_and_customs_cost_usd)}"
        )
        out.append(f"{t['per_unit_gross_profit']}: {_usd(result.per_unit_gross_profit_usd)}")
        out.append(f"{t['total_gross_profit']}: {_usd(result.gross_profit_usd)}")
        out.append(
            f"{t['total_gross_margin']}: {_usd(result.total_gross_margin_usd)} "
            f"({format_percentage(result.cost_increase_rate)})"
        )
        out += ["", t["price_breakdown_title"], ""]

        header = f"{t['product_name']:<40} {t['factory_cost']:>18} {t['unit_sale_price']:>18}"
        out.append(header)
        out.append("-" * len(header))
        for item in result.product_breakdown:
            out.append(
                f"{item.name:<40} {_usd(item.factory_price):>18} {_usd(item.final_sale_price):>18}"
            )
        return "\n".join(out)

    @staticmethod
    def to_dict(result: CalculationResult) -> dict:
        data = dataclasses.asdict(result)
        data["product_breakdown"] = list(data["product_breakdown"])
        return data

    @staticmethod
    def to_json(result: CalculationResult, pretty: bool = False) -> str:
        indent = 2 if pretty else None
        return json.dumps(ReportExporter.to_dict(result), ensure_ascii=False, indent=indent)

    @staticmethod
    def cost_composition(result: CalculationResult, language: str = "tr") -> dict:
        """Pie chart dataset: factory cost, profit, expenses and taxes."""
        t = labels(language)
        values = [result.total_factory_cost_usd, result.gross_profit_usd, result.total_expenses]
        total = sum(values)
        return {
            "title": t["cost_composition_title"],
            "labels": [t["factory_cost"], t["profit"], t["expenses_and_taxes"]],
            "values": values,
            "percentages": [round(v / total * 100, 2) if total else 0.0 for v in values],
        }

    @staticmethod
    def unit_sale_price(result: CalculationResult, currency: str = "USD") -> float:
        """Sale price per unit in USD, or in the secondary currency for any other code."""
        if result.total_quantity <= 0:
            return 0.0
        if currency.upper() == "USD":
            return result.total_sale_price_usd / result.total_quantity
        return result.total_sale_price_secondary_currency / result.total_quantity
