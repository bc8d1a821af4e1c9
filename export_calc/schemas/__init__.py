"""Pydantic schemas for the calculator API."""

from typing import Optional, Union

from pydantic import BaseModel, Field


# ── Inputs ───────────────────────────────────────────────
class ProductLineIn(BaseModel):
    id: Optional[str] = None
    name: str = ""
    quantity: Union[str, int, float] = "1"
    price: Union[str, int, float] = ""


class CalculationRequest(BaseModel):
    products: list[ProductLineIn] = Field(default_factory=list)
    params: dict[str, Union[str, int, float]] = Field(default_factory=dict)


class MarketInputsOut(BaseModel):
    products: list[ProductLineIn]
    params: dict[str, str]


class MarketInfo(BaseModel):
    market: str
    currency_code: str
    params: list[str]


# ── Results ──────────────────────────────────────────────
class ProductBreakdownOut(BaseModel):
    name: str
    factory_price: float
    final_sale_price: float


class CostComposition(BaseModel):
    title: str
    labels: list[str]
    values: list[float]
    percentages: list[float]


class CalculationOut(BaseModel):
    market: str
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
    product_breakdown: list[ProductBreakdownOut]
    cost_composition: CostComposition
    form_complete: bool


class InputHints(BaseModel):
    profit_hint: Optional[str] = None
    customs_hint: Optional[str] = None
    shipping_hint: Optional[str] = None
