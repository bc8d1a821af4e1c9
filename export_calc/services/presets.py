"""Default calculator inputs for each market."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field

from export_calc.services.pricing_engine import Market, ProductLine, get_model


@dataclass
class MarketInputs:
    """Raw, caller-owned inputs for one market: product lines plus parameter text."""
    products: list[ProductLine] = field(default_factory=list)
    params: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "products": [
                {"id": p.id, "name": p.name, "quantity": str(p.quantity), "price": str(p.price)}
                for p in self.products
            ],
            "params": dict(self.params),
        }


_PRESETS: dict[Market, MarketInputs] = {
    Market.DUBAI: MarketInputs(
        products=[ProductLine(name="Üçlü Koltuk", quantity="1", price="1700")],
        params={
            "profit_margin": "25",
            "customs_duty_rate": "5",
            "fixed_shipping_cost_aed": "2323.5",
            "exchange_rate": "3.673",
            "risk_rate": "10",
        },
    ),
    Market.SERBIA: MarketInputs(
        products=[ProductLine(name="Ofis Sandalyesi", quantity="10", price="150")],
        params={
            "profit_margin": "30",
            "customs_duty_rate": "10",
            "fixed_shipping_cost_rsd": "55000",
            "exchange_rate_rsd": "109.5",
            "vat_rate": "20",
        },
    ),
}


def default_inputs(market) -> MarketInputs:
    """Fresh copy of the preset inputs; product ids are regenerated."""
    model = get_model(market)
    preset = copy.deepcopy(_PRESETS[model.market])
    for product in preset.products:
        product.id = uuid.uuid4().hex
    return preset
