"""Calculation API: market presets, price calculation, live hints and exports."""

import dataclasses
import logging
import math
import uuid

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from export_calc.schemas import (
    CalculationOut,
    CalculationRequest,
    InputHints,
    MarketInfo,
    MarketInputsOut,
)
from export_calc.services.presets import default_inputs
from export_calc.services.pricing_engine import (
    MARKET_MODELS,
    CalculationResult,
    MarketModel,
    ProductLine,
    UnknownMarketError,
    calculate,
    get_model,
)
from export_calc.services.report import ReportExporter
from export_calc.services.validation import (
    InvalidInputError,
    input_hints,
    is_form_complete,
    validate_inputs,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calculations"])

EXPORT_MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
    "text": "text/plain; charset=utf-8",
}


def _resolve_model(market: str) -> MarketModel:
    try:
        return get_model(market)
    except UnknownMarketError as e:
        raise HTTPException(404, str(e))


def _to_lines(data: CalculationRequest) -> list[ProductLine]:
    return [
        ProductLine(
            name=p.name,
            quantity=p.quantity,
            price=p.price,
            id=p.id or uuid.uuid4().hex,
        )
        for p in data.products
    ]


def _non_finite_fields(model: MarketModel, params, result: CalculationResult) -> list[str]:
    """Inputs behind a non-finite sale price: products, non-finite values or a zero rate."""
    values = dataclasses.asdict(params)
    fields = [] if math.isfinite(result.total_factory_cost_usd) else ["products"]
    fields += [name for name, value in values.items() if not math.isfinite(value)]
    if values[model.rate_field] == 0 and model.rate_field not in fields:
        fields.append(model.rate_field)
    # Finite inputs that overflow together
    return fields or list(values)


def _run(model: MarketModel, data: CalculationRequest) -> tuple[list[ProductLine], CalculationResult]:
    lines = _to_lines(data)
    try:
        params = validate_inputs(model.market, lines, data.params)
    except InvalidInputError as e:
        raise HTTPException(
            422,
            {"message": e.message, "message_key": e.message_key, "fields": e.fields},
        )

    result = calculate(model.market, lines, params)
    if not math.isfinite(result.total_sale_price_usd):
        fields = _non_finite_fields(model, params, result)
        logger.warning("Non-finite %s result from %s", model.market.value, ", ".join(fields))
        raise HTTPException(
            422,
            {
                "message": f"calculation produced a non-finite price; check {', '.join(fields)}",
                "message_key": "alertMessage",
                "fields": fields,
            },
        )
    return lines, result


@router.get("/markets", response_model=list[MarketInfo])
async def list_markets():
    return [
        MarketInfo(
            market=model.market.value,
            currency_code=model.currency_code,
            params=model.param_names(),
        )
        for model in MARKET_MODELS.values()
    ]


@router.get("/markets/{market}/defaults", response_model=MarketInputsOut)
async def market_defaults(market: str):
    model = _resolve_model(market)
    return default_inputs(model.market).to_dict()


@router.post("/calculations/{market}", response_model=CalculationOut)
async def run_calculation(
    market: str,
    data: CalculationRequest,
    lang: str = Query("tr", pattern="^(tr|en)$"),
):
    model = _resolve_model(market)
    lines, result = _run(model, data)
    logger.info(
        "API calculation %s: %d line(s), sale price %.2f USD",
        model.market.value, len(lines), result.total_sale_price_usd,
    )
    return CalculationOut(
        market=model.market.value,
        cost_composition=ReportExporter.cost_composition(result, lang),
        form_complete=is_form_complete(lines),
        **ReportExporter.to_dict(result),
    )


@router.post("/calculations/{market}/hints", response_model=InputHints)
async def calculation_hints(market: str, data: CalculationRequest):
    model = _resolve_model(market)
    return input_hints(model.market, _to_lines(data), data.params)


@router.post("/calculations/{market}/export")
async def export_calculation(
    market: str,
    data: CalculationRequest,
    format: str = Query("csv", pattern="^(csv|json|text)$"),
    lang: str = Query("tr", pattern="^(tr|en)$"),
):
    """Calculate and return the report as a downloadable file."""
    model = _resolve_model(market)
    _, result = _run(model, data)

    if format == "csv":
        content = ReportExporter.to_csv(result, lang)
        filename = "simulation-results.csv"
    elif format == "json":
        content = ReportExporter.to_json(result, pretty=True)
        filename = "simulation-results.json"
    else:
        content = ReportExporter.to_text(result, lang)
        filename = "simulation-results.txt"

    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
