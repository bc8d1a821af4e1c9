"""Export pricing engine.

Derives the full cost / sale price breakdown for a list of purchased
products in one of the supported export markets. Every function here is
pure: nothing is cached and inputs are never mutated or retained.
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]

# ASCII digits only; other scripts' digits coerce to 0 like any garbage
_INT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")


def parse_quantity(value) -> int:
    """Lenient integer parse: leading digits only, anything else is 0."""
    if value is None or isinstance(value, bool):
        return 0
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else 0


def match_amount(value) -> Optional[float]:
    """Leading decimal literal of ``value`` as a float, or None."""
    if value is None or isinstance(value, bool):
        return None
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else None


def parse_amount(value) -> float:
    """Lenient float parse: leading decimal literal only, anything else is 0."""
    amount = match_amount(value)
    return 0.0 if amount is None else amount


def _div(numerator: float, denominator: float) -> float:
    # IEEE semantics: x/0 is +-inf, 0/0 is nan
    try:
        return numerator / denominator
    except ZeroDivisionError:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def _multiplier(pct: float) -> float:
    return 1 + pct / 100


# ── Data model ───────────────────────────────────────────

class Market(str, Enum):
    """Supported export markets."""
    DUBAI = "dubai"
    SERBIA = "serbia"


class UnknownMarketError(ValueError):
    """Raised when a market identifier has no pricing model."""


@dataclass
class ProductLine:
    """One purchased item as entered by the caller (text or numbers)."""
    name: str = ""
    quantity: Union[str, Number] = "1"
    price: Union[str, Number] = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def parsed_quantity(self) -> int:
        return parse_quantity(self.quantity)

    @property
    def parsed_price(self) -> float:
        return parse_amount(self.price)

    @property
    def factory_price(self) -> float:
        return self.parsed_quantity * self.parsed_price


@dataclass(frozen=True)
class DubaiParams:
    """Model A parameters (USD → AED)."""
    profit_margin: float
    customs_duty_rate: float
    fixed_shipping_cost_aed: float
    exchange_rate: float         # AED per USD
    risk_rate: float


@dataclass(frozen=True)
class SerbiaParams:
    """Model B parameters (USD → RSD)."""
    profit_margin: float
    customs_duty_rate: float
    fixed_shipping_cost_rsd: float
    exchange_rate_rsd: float     # RSD per USD
    vat_rate: float


PricingParams = Union[DubaiParams, SerbiaParams]


@dataclass(frozen=True)
class ProductBreakdown:
    name: str
    factory_price: float
    final_sale_price: float


@dataclass(frozen=True)
class CalculationCore:
    """Market formula output, before quantity and breakdown are attached."""
    total_factory_cost_usd: float
    total_sale_price_usd: float
    total_sale_price_secondary_currency: float
    secondary_currency_code: str
    gross_profit_usd: float
    cost_increase_rate: float
    total_expenses: float
    shipping_and_customs_cost_usd: float
    total_gross_margin_usd: float
    per_unit_gross_profit_usd: float = 0.0


@dataclass(frozen=True)
class CalculationResult:
    """Complete result of one calculation run."""
    total_factory_cost_usd: float
    total_sale_price_usd: float
    total_sale_price_secondary_currency: float
    secondary_currency_code: str
    gross_profit_usd: float
    cost_increase_rate: float
    total_expenses: float
    shipping_and_customs_cost_usd: float
    per_unit_gross_profit_usd: float
    total_gross_margin_usd: float
    total_quantity: int
    product_breakdown: tuple[ProductBreakdown, ...] = ()


# ── Shared aggregation ───────────────────────────────────

def compute_factory_cost(lines: Iterable[ProductLine]) -> float:
    """Sum of quantity × unit price; unparseable values count as 0."""
    return sum((line.factory_price for line in lines), 0.0)


def compute_total_quantity(lines: Iterable[ProductLine]) -> int:
    return sum(line.parsed_quantity for line in lines)


def compute_breakdown(
    lines: Sequence[ProductLine],
    factory_cost: float,
    total_sale_price_usd: float,
) -> list[ProductBreakdown]:
    """Allocate the sale price to each line by its share of factory cost."""
    breakdown = []
    for line in lines:
        item_factory_price = line.factory_price
        sale_price = (
            (item_factory_price / factory_cost) * total_sale_price_usd
            if factory_cost > 0 else 0.0
        )
        breakdown.append(ProductBreakdown(
            name=line.name,
            factory_price=item_factory_price,
            final_sale_price=sale_price,
        ))
    return breakdown


def _core(
    factory_cost: float,
    sale_price: float,
    exchange_rate: float,
    currency_code: str,
    gross_profit: float,
    shipping_and_customs: float,
) -> CalculationCore:
    return CalculationCore(
        total_factory_cost_usd=factory_cost,
        total_sale_price_usd=sale_price,
        total_sale_price_secondary_currency=sale_price * exchange_rate,
        secondary_currency_code=currency_code,
        gross_profit_usd=gross_profit,
        cost_increase_rate=(
            (sale_price - factory_cost) / factory_cost * 100
            if factory_cost > 0 else 0.0
        ),
        total_expenses=sale_price - factory_cost - gross_profit,
        shipping_and_customs_cost_usd=shipping_and_customs,
        total_gross_margin_usd=sale_price - factory_cost,
    )


# ── Market models ────────────────────────────────────────

class MarketModel(ABC):
    """Pricing formula for a single market."""

    market: Market
    currency_code: str
    params_type: type
    rate_field: str

    @abstractmethod
    def calculate(self, lines: Sequence[ProductLine], params) -> CalculationCore:
        ...

    @classmethod
    def param_names(cls) -> list[str]:
        return [f.name for f in fields(cls.params_type)]


class DubaiModel(MarketModel):
    """Model A: profit and customs compound, shipping added, risk applied last."""

    market = Market.DUBAI
    currency_code = "AED"
    rate_field = "exchange_rate"
    params_type = DubaiParams

    def calculate(self, lines: Sequence[ProductLine], params: DubaiParams) -> CalculationCore:
        factory_cost = compute_factory_cost(lines)

        profit_mult = _multiplier(params.profit_margin)
        customs_mult = _multiplier(params.customs_duty_rate)
        risk_mult = _multiplier(params.risk_rate)

        shipping_usd = _div(params.fixed_shipping_cost_aed, params.exchange_rate)
        after_profit_and_customs = factory_cost * profit_mult * customs_mult
        with_shipping = after_profit_and_customs + shipping_usd
        sale_price = with_shipping * risk_mult

        gross_profit = factory_cost * (profit_mult - 1)
        customs_cost = factory_cost * profit_mult * (customs_mult - 1)

        logger.debug(
            "dubai: factory=%.4f shipping_usd=%.4f after_customs=%.4f sale=%.4f",
            factory_cost, shipping_usd, after_profit_and_customs, sale_price,
        )
        return _core(
            factory_cost, sale_price, params.exchange_rate, self.currency_code,
            gross_profit, shipping_usd + customs_cost,
        )


class SerbiaModel(MarketModel):
    """Model B: customs added on the profit price, VAT on the loaded price."""

    market = Market.SERBIA
    currency_code = "RSD"
    rate_field = "exchange_rate_rsd"
    params_type = SerbiaParams

    def calculate(self, lines: Sequence[ProductLine], params: SerbiaParams) -> CalculationCore:
        factory_cost = compute_factory_cost(lines)

        profit_mult = _multiplier(params.profit_margin)
        customs_mult = _multiplier(params.customs_duty_rate)
        vat_mult = _multiplier(params.vat_rate)

        shipping_usd = _div(params.fixed_shipping_cost_rsd, params.exchange_rate_rsd)
        price_with_profit = factory_cost * profit_mult
        customs_cost = price_with_profit * (customs_mult - 1)
        pre_vat = price_with_profit + customs_cost + shipping_usd
        sale_price = pre_vat * vat_mult

        gross_profit = factory_cost * (profit_mult - 1)

        logger.debug(
            "serbia: factory=%.4f shipping_usd=%.4f customs=%.4f pre_vat=%.4f sale=%.4f",
            factory_cost, shipping_usd, customs_cost, pre_vat, sale_price,
        )
        return _core(
            factory_cost, sale_price, params.exchange_rate_rsd, self.currency_code,
            gross_profit, shipping_usd + customs_cost,
        )


MARKET_MODELS: dict[Market, MarketModel] = {
    Market.DUBAI: DubaiModel(),
    Market.SERBIA: SerbiaModel(),
}


def get_model(market: Union[Market, str]) -> MarketModel:
    if not isinstance(market, Market):
        market = str(market).strip().lower()
    try:
        return MARKET_MODELS[Market(market)]
    except ValueError:
        raise UnknownMarketError(f"Unknown market: {market!r}") from None


def calculate_model_a(lines: Sequence[ProductLine], params: DubaiParams) -> CalculationCore:
    return MARKET_MODELS[Market.DUBAI].calculate(lines, params)


def calculate_model_b(lines: Sequence[ProductLine], params: SerbiaParams) -> CalculationCore:
    return MARKET_MODELS[Market.SERBIA].calculate(lines, params)


def calculate(
    market: Union[Market, str],
    lines: Sequence[ProductLine],
    params: PricingParams,
) -> CalculationResult:
    """Run the market formula and attach quantity, per-unit profit and breakdown."""
    model = get_model(market)
    if not isinstance(params, model.params_type):
        raise TypeError(
            f"{model.market.value} expects {model.params_type.__name__}, "
            f"got {type(params).__name__}"
        )
    lines = list(lines)
    core = model.calculate(lines, params)

    total_quantity = compute_total_quantity(lines)
    per_unit_profit = core.gross_profit_usd / total_quantity if total_quantity > 0 else 0.0
    breakdown = compute_breakdown(lines, core.total_factory_cost_usd, core.total_sale_price_usd)

    return CalculationResult(
        total_factory_cost_usd=core.total_factory_cost_usd,
        total_sale_price_usd=core.total_sale_price_usd,
        total_sale_price_secondary_currency=core.total_sale_price_secondary_currency,
        secondary_currency_code=core.secondary_currency_code,
        gross_profit_usd=core.gross_profit_usd,
        cost_increase_rate=core.cost_increase_rate,
        total_expenses=core.total_expenses,
        shipping_and_customs_cost_usd=core.shipping_and_customs_cost_usd,
        per_unit_gross_profit_usd=per_unit_profit,
        total_gross_margin_usd=core.total_gross_margin_usd,
        total_quantity=total_quantity,
        product_breakdown=tuple(breakdown),
    )
