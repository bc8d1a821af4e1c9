"""Input gate run by callers before invoking the pricing engine.

The engine itself never validates; callers convert raw form text into typed
parameters here and must not calculate when the gate rejects the input.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Mapping, Optional, Sequence

from export_calc.services.formatting import format_currency
from export_calc.services.pricing_engine import (
    Market,
    PricingParams,
    ProductLine,
    compute_factory_cost,
    compute_total_quantity,
    get_model,
    match_amount,
)

logger = logging.getLogger(__name__)

ALERT_MESSAGE_KEY = "alertMessage"

# Plain ASCII decimal literal: no underscores, inf/nan words or non-ASCII digits
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class InvalidInputError(ValueError):
    """Inputs rejected by the gate; ``fields`` lists the offending names."""

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = fields or []
        self.message_key = ALERT_MESSAGE_KEY


def parse_strict(value) -> Optional[float]:
    """Full numeric parse of a config field; None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        text = str(value).strip()
        if not _DECIMAL_LITERAL.fullmatch(text):
            return None
        number = float(text)
    if not math.isfinite(number):
        return None
    return number


def validate_inputs(
    market,
    products: Sequence[ProductLine],
    raw_params: Mapping[str, object],
) -> PricingParams:
    """Convert raw parameter text into the market's typed params.

    Raises InvalidInputError when factory cost is 0, or any parameter is
    missing, empty or not fully numeric.
    """
    model = get_model(market)

    empty, non_numeric, values = [], [], {}
    for name in model.param_names():
        raw = raw_params.get(name)
        if raw is None or (isinstance(raw, str) and raw == ""):
            empty.append(name)
            continue
        number = parse_strict(raw)
        if number is None:
            non_numeric.append(name)
        else:
            values[name] = number

    factory_cost = compute_factory_cost(products)
    problems = []
    if factory_cost == 0:
        problems.append("total factory cost is zero")
    if empty:
        problems.append(f"empty fields: {', '.join(empty)}")
    if non_numeric:
        problems.append(f"non-numeric fields: {', '.join(non_numeric)}")

    if problems:
        message = "; ".join(problems)
        logger.warning("Rejected %s inputs: %s", model.market.value, message)
        fields = empty + non_numeric
        if factory_cost == 0:
            fields.insert(0, "products")
        raise InvalidInputError(message, fields)

    return model.params_type(**values)


def is_form_complete(products: Sequence[ProductLine]) -> bool:
    """True when every line has a name, a positive quantity and a positive price."""
    for p in products:
        if not p.name or p.quantity in ("", None) or p.price in ("", None):
            return False
        if not (p.parsed_price > 0 and p.parsed_quantity > 0):
            return False
    return True


def input_hints(
    market,
    products: Sequence[ProductLine],
    raw_params: Mapping[str, object],
) -> dict[str, Optional[str]]:
    """Live hints shown under the parameter fields while the form is edited.

    Only the Dubai form has hints. Values are lenient-parsed, so partially
    typed numbers still produce a hint.
    """
    model = get_model(market)
    if model.market is not Market.DUBAI:
        return {}

    factory_cost = compute_factory_cost(products)
    total_quantity = compute_total_quantity(products)
    profit = match_amount(raw_params.get("profit_margin"))
    customs = match_amount(raw_params.get("customs_duty_rate"))
    shipping_aed = match_amount(raw_params.get("fixed_shipping_cost_aed"))
    rate = match_amount(raw_params.get("exchange_rate"))

    if not rate:
        return {}

    with_profit = factory_cost * (1 + profit / 100) if profit is not None else None
    with_customs = (
        with_profit * (1 + customs / 100)
        if with_profit and customs is not None else None
    )
    per_unit_shipping = (
        shipping_aed / rate / total_quantity
        if shipping_aed is not None and total_quantity > 0 else None
    )

    def _pair(usd):
        return f"{format_currency(usd, 'USD')} / {format_currency(usd * rate, 'AED')}"

    return {
        "profit_hint": _pair(with_profit) if with_profit else None,
        "customs_hint": _pair(with_customs) if with_customs else None,
        "shipping_hint": format_currency(per_unit_shipping, "USD") if per_unit_shipping else None,
    }
