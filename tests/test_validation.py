"""Input gate tests."""

import pytest

from export_calc.services.presets import default_inputs
from export_calc.services.pricing_engine import DubaiParams, ProductLine, SerbiaParams
from export_calc.services.validation import (
    InvalidInputError,
    input_hints,
    is_form_complete,
    parse_strict,
    validate_inputs,
)


class TestParseStrict:
    def test_numbers(self):
        assert parse_strict("25") == 25.0
        assert parse_strict(" 3.673 ") == 3.673
        assert parse_strict(10) == 10.0

    def test_rejects_partial_numbers(self):
        assert parse_strict("12abc") is None
        assert parse_strict("abc") is None
        assert parse_strict("") is None
        assert parse_strict("nan") is None

    def test_rejects_python_only_literals(self):
        assert parse_strict("1_000") is None
        assert parse_strict("inf") is None
        assert parse_strict("-Infinity") is None
        assert parse_strict("0x10") is None

    def test_rejects_overflow(self):
        assert parse_strict("1e999") is None
        assert parse_strict(float("inf")) is None
        assert parse_strict(10 ** 400) is None

    def test_rejects_non_ascii_digits(self):
        assert parse_strict("\u0663") is None
        assert parse_strict("\u0661\u0660\u0660") is None

    def test_accepts_decimal_forms(self):
        assert parse_strict("-2.5") == -2.5
        assert parse_strict(".5") == 0.5
        assert parse_strict("5.") == 5.0
        assert parse_strict("2e3") == 2000.0


class TestValidateInputs:
    def test_dubai_preset_passes(self):
        inputs = default_inputs("dubai")
        params = validate_inputs("dubai", inputs.products, inputs.params)
        assert isinstance(params, DubaiParams)
        assert params.exchange_rate == 3.673
        assert params.fixed_shipping_cost_aed == 2323.5

    def test_serbia_preset_passes(self):
        inputs = default_inputs("serbia")
        params = validate_inputs("serbia", inputs.products, inputs.params)
        assert isinstance(params, SerbiaParams)
        assert params.vat_rate == 20

    def test_zero_factory_cost_rejected(self):
        inputs = default_inputs("dubai")
        products = [ProductLine(name="Free", quantity="1", price="0")]
        with pytest.raises(InvalidInputError) as exc:
            validate_inputs("dubai", products, inputs.params)
        assert "products" in exc.value.fields
        assert exc.value.message_key == "alertMessage"

    def test_empty_field_rejected(self):
        inputs = default_inputs("dubai")
        inputs.params["risk_rate"] = ""
        with pytest.raises(InvalidInputError) as exc:
            validate_inputs("dubai", inputs.products, inputs.params)
        assert exc.value.fields == ["risk_rate"]

    def test_missing_field_rejected(self):
        inputs = default_inputs("serbia")
        del inputs.params["vat_rate"]
        with pytest.raises(InvalidInputError) as exc:
            validate_inputs("serbia", inputs.products, inputs.params)
        assert "vat_rate" in exc.value.fields

    def test_non_numeric_field_rejected(self):
        inputs = default_inputs("serbia")
        inputs.params["exchange_rate_rsd"] = "109,5"
        with pytest.raises(InvalidInputError) as exc:
            validate_inputs("serbia", inputs.products, inputs.params)
        assert exc.value.fields == ["exchange_rate_rsd"]

    def test_infinite_field_rejected(self):
        inputs = default_inputs("dubai")
        inputs.params["profit_margin"] = "inf"
        with pytest.raises(InvalidInputError) as exc:
            validate_inputs("dubai", inputs.products, inputs.params)
        assert exc.value.fields == ["profit_margin"]

    def test_collects_all_problems(self):
        products = [ProductLine(name="A", quantity="x", price="10")]
        params = {"profit_margin": "", "customs_duty_rate": "abc"}
        with pytest.raises(InvalidInputError) as exc:
            validate_inputs("dubai", products, params)
        fields = exc.value.fields
        assert fields[0] == "products"
        assert "profit_margin" in fields
        assert "customs_duty_rate" in fields
        assert "risk_rate" in fields

    def test_lenient_products_still_count(self):
        inputs = default_inputs("dubai")
        products = [ProductLine(name="A", quantity="2 pcs", price="10$")]
        params = validate_inputs("dubai", products, inputs.params)
        assert params.profit_margin == 25


class TestFormComplete:
    def test_preset_complete(self):
        assert is_form_complete(default_inputs("dubai").products)

    def test_missing_name(self):
        assert not is_form_complete([ProductLine(name="", quantity="1", price="10")])

    def test_zero_quantity(self):
        assert not is_form_complete([ProductLine(name="A", quantity="0", price="10")])

    def test_empty_price(self):
        assert not is_form_complete([ProductLine(name="A", quantity="1", price="")])

    def test_one_bad_line_fails_all(self):
        lines = [
            ProductLine(name="A", quantity="1", price="10"),
            ProductLine(name="B", quantity="1", price="-5"),
        ]
        assert not is_form_complete(lines)


class TestInputHints:
    def test_dubai_preset_hints(self):
        inputs = default_inputs("dubai")
        hints = input_hints("dubai", inputs.products, inputs.params)
        assert hints["profit_hint"].startswith("$2,125.00 / AED 7,805.1")
        assert hints["customs_hint"].startswith("$2,231.25 / AED ")
        assert hints["shipping_hint"] == "$632.59"

    def test_per_unit_shipping(self):
        inputs = default_inputs("dubai")
        products = [ProductLine(name="A", quantity="4", price="100")]
        hints = input_hints("dubai", products, inputs.params)
        assert hints["shipping_hint"] == "$158.15"

    def test_missing_exchange_rate(self):
        inputs = default_inputs("dubai")
        inputs.params["exchange_rate"] = ""
        assert input_hints("dubai", inputs.products, inputs.params) == {}

    def test_missing_profit_margin(self):
        inputs = default_inputs("dubai")
        inputs.params["profit_margin"] = ""
        hints = input_hints("dubai", inputs.products, inputs.params)
        assert hints["profit_hint"] is None
        assert hints["customs_hint"] is None
        assert hints["shipping_hint"] == "$632.59"

    def test_serbia_has_no_hints(self):
        inputs = default_inputs("serbia")
        assert input_hints("serbia", inputs.products, inputs.params) == {}
