"""Calculator session: the caller-owned state around the pricing engine."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from export_calc.config import Settings, get_settings
from export_calc.services.formatting import format_currency
from export_calc.services.pricing_engine import (
    CalculationResult,
    Market,
    ProductLine,
    calculate,
    get_model,
)
from export_calc.services.presets import MarketInputs, default_inputs
from export_calc.services.report import LANGUAGES, ReportExporter
from export_calc.services.validation import validate_inputs

logger = logging.getLogger(__name__)


class CalculatorSession:
    """In-memory calculator state for one user.

    Holds raw inputs for every market, the active market, the last result
    and display preferences. The pricing engine sees only a snapshot of the
    active inputs.
    """

    DISPLAY_CURRENCIES = ("USD", "SECONDARY")
    PRODUCT_FIELDS = {"name", "quantity", "price"}

    def __init__(
        self,
        market: str = Market.DUBAI.value,
        language: str = "tr",
        delay_ms: int = 0,
    ):
        if language not in LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        self.inputs: dict[Market, MarketInputs] = {m: default_inputs(m) for m in Market}
        self.active_market: Market = get_model(market).market
        self.language = language
        self.delay_ms = delay_ms
        self.result: Optional[CalculationResult] = None
        self.display_currency = "USD"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CalculatorSession":
        s = settings or get_settings()
        return cls(
            market=s.default_market,
            language=s.default_language,
            delay_ms=s.calculation_delay_ms,
        )

    @property
    def active_inputs(self) -> MarketInputs:
        return self.inputs[self.active_market]

    # ── Inputs ───────────────────────────────────────────

    def set_param(self, name: str, value: str) -> None:
        if name not in get_model(self.active_market).param_names():
            raise ValueError(f"Unknown parameter for {self.active_market.value}: {name}")
        self.active_inputs.params[name] = value

    def add_product(self) -> ProductLine:
        line = ProductLine(name="", quantity="1", price="")
        self.active_inputs.products.append(line)
        return line

    def update_product(self, product_id: str, field: str, value: str) -> ProductLine:
        if field not in self.PRODUCT_FIELDS:
            raise ValueError(f"Invalid product field: {field}")
        for line in self.active_inputs.products:
            if line.id == product_id:
                setattr(line, field, value)
                return line
        raise ValueError(f"Product not found: {product_id}")

    def remove_product(self, product_id: str) -> bool:
        """Remove a line; the last remaining line is never removed."""
        products = self.active_inputs.products
        if len(products) <= 1:
            return False
        remaining = [p for p in products if p.id != product_id]
        if len(remaining) == len(products):
            return False
        self.active_inputs.products = remaining
        return True

    # ── View state ───────────────────────────────────────

    def switch_market(self, market: str) -> None:
        self.active_market = get_model(market).market

    def toggle_language(self) -> str:
        self.language = "en" if self.language == "tr" else "tr"
        return self.language

    def toggle_display_currency(self) -> str:
        self.display_currency = "SECONDARY" if self.display_currency == "USD" else "USD"
        return self.display_currency

    def reset(self) -> None:
        """Restore the active market's preset inputs and drop the result."""
        self.inputs[self.active_market] = default_inputs(self.active_market)
        self.result = None

    # ── Calculation ──────────────────────────────────────

    def calculate(self) -> CalculationResult:
        """Run the input gate and the engine for the active market.

        Raises InvalidInputError when the gate rejects; the previous
        result is kept in that case.
        """
        market = self.active_market
        products = [
            ProductLine(name=p.name, quantity=p.quantity, price=p.price, id=p.id)
            for p in self.active_inputs.products
        ]
        params = validate_inputs(market, products, self.active_inputs.params)

        result = calculate(market, products, params)
        self.result = result
        self.display_currency = "USD"
        logger.info(
            "Calculated %s: %d line(s), sale price %.2f USD",
            market.value, len(products), result.total_sale_price_usd,
        )
        return result

    async def calculate_async(self) -> CalculationResult:
        if self.delay_ms > 0:
            await asyncio.sleep(self.delay_ms / 1000)
        return self.calculate()

    def display_values(self) -> dict[str, str]:
        """Formatted unit sale price and total revenue in the display currency."""
        r = self.result
        if r is None:
            return {}
        code = "USD" if self.display_currency == "USD" else r.secondary_currency_code
        total = r.total_sale_price_usd if code == "USD" else r.total_sale_price_secondary_currency
        if r.total_quantity > 0:
            unit = format_currency(ReportExporter.unit_sale_price(r, code), code)
        else:
            unit = format_currency(0, "USD")
        return {
            "currency": code,
            "unit_sale_price": unit,
            "total_sale_revenue": format_currency(total, code),
        }
