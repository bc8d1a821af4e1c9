"""Export-Calculator CLI.

Usage:
    python -m cli markets
    python -m cli defaults dubai
    python -m cli calc dubai
    python -m cli calc dubai --product "Sofa:2:1700" --profit-margin 30
    python -m cli calc serbia --product "Chair:10:150" --vat-rate 20 --format csv -o out.csv
    python -m cli hints dubai --exchange-rate 3.673
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from export_calc.config import get_settings
from export_calc.logging_setup import configure_logging
from export_calc.services.presets import default_inputs
from export_calc.services.pricing_engine import (
    MARKET_MODELS,
    Market,
    ProductLine,
    UnknownMarketError,
    calculate,
    get_model,
)
from export_calc.services.report import LANGUAGES, ReportExporter
from export_calc.services.validation import InvalidInputError, input_hints, validate_inputs

# CLI option -> parameter name, per market
PARAM_OPTIONS = {
    Market.DUBAI: {
        "profit_margin": "profit_margin",
        "customs_duty_rate": "customs_duty_rate",
        "shipping": "fixed_shipping_cost_aed",
        "exchange_rate": "exchange_rate",
        "risk_rate": "risk_rate",
    },
    Market.SERBIA: {
        "profit_margin": "profit_margin",
        "customs_duty_rate": "customs_duty_rate",
        "shipping": "fixed_shipping_cost_rsd",
        "exchange_rate": "exchange_rate_rsd",
        "vat_rate": "vat_rate",
    },
}


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="export-calc",
        description="Export-Calculator CLI",
    )
    parser.add_argument("--log-level", default=None, help="Logging level")
    sub = parser.add_subparsers(dest="command", help="Top-level command")

    sub.add_parser("markets", help="List supported markets")

    defaults = sub.add_parser("defaults", help="Show preset inputs for a market")
    defaults.add_argument("market", help="Market id (dubai, serbia)")

    # ── Calculation ──────────────────────────────────────
    calc = sub.add_parser("calc", help="Calculate sale price")
    _add_input_args(calc)
    calc.add_argument("--format", choices=["text", "json", "csv"], default="text")
    calc.add_argument("--lang", choices=list(LANGUAGES), default=None, help="Report language")
    calc.add_argument("--output", "-o", help="Write the report to a file")

    hints = sub.add_parser("hints", help="Show live input hints")
    _add_input_args(hints)

    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    if not args.command:
        parser.print_help()
        return

    handlers = {
        "markets": handle_markets,
        "defaults": handle_defaults,
        "calc": handle_calc,
        "hints": handle_hints,
    }
    try:
        handlers[args.command](args)
    except (InvalidInputError, UnknownMarketError) as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)


def _add_input_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("market", help="Market id (dubai, serbia)")
    p.add_argument(
        "--product", action="append", type=parse_product, default=None,
        metavar="NAME:QTY:PRICE",
        help="Product line (repeatable); presets are used when omitted",
    )
    p.add_argument("--profit-margin", help="Profit margin %%")
    p.add_argument("--customs-duty-rate", help="Customs duty %%")
    p.add_argument("--shipping", help="Fixed shipping cost in the local currency")
    p.add_argument("--exchange-rate", help="Local currency per USD")
    p.add_argument("--risk-rate", help="Risk surcharge %% (dubai)")
    p.add_argument("--vat-rate", help="VAT %% (serbia)")


def parse_product(spec: str) -> ProductLine:
    parts = spec.rsplit(":", 2)
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"Expected NAME:QTY:PRICE, got {spec!r}")
    name, qty, price = parts
    return ProductLine(name=name, quantity=qty, price=price)


def _collect_inputs(args) -> tuple[Market, list[ProductLine], dict[str, str]]:
    """Presets overlaid with whatever was given on the command line."""
    model = get_model(args.market)
    inputs = default_inputs(model.market)

    products = inputs.products
    if args.product:
        products = list(args.product)

    params = dict(inputs.params)
    for option, name in PARAM_OPTIONS[model.market].items():
        value = getattr(args, option, None)
        if value is not None:
            params[name] = value
    return model.market, products, params


# ── Command Handlers ────────────────────────────────────

def handle_markets(args):
    print(f"{'Market':<10} {'Currency':<10} {'Parameters'}")
    print("-" * 70)
    for model in MARKET_MODELS.values():
        print(f"{model.market.value:<10} {model.currency_code:<10} {', '.join(model.param_names())}")


def handle_defaults(args):
    inputs = default_inputs(args.market)
    print(json.dumps(inputs.to_dict(), indent=2, ensure_ascii=False))


def handle_calc(args):
    market, products, params = _collect_inputs(args)
    typed = validate_inputs(market, products, params)
    result = calculate(market, products, typed)

    lang = args.lang or get_settings().default_language
    if args.format == "json":
        content = ReportExporter.to_json(result, pretty=True)
    elif args.format == "csv":
        content = ReportExporter.to_csv(result, lang)
    else:
        content = ReportExporter.to_text(result, lang)

    if args.output:
        Path(args.output).write_text(content, encoding="utf-8")
        print(f"Report saved to {args.output}")
    else:
        print(content)


def handle_hints(args):
    market, products, params = _collect_inputs(args)
    hints = input_hints(market, products, params)
    if not hints:
        print(f"No hints available for {market.value}.")
        return
    for key, value in hints.items():
        print(f"  {key:<15} {value or '-'}")


if __name__ == "__main__":
    main()
