"""Currency and percentage formatting for reports (2 decimal places)."""

import math

CURRENCY_CODES = ("USD", "AED", "RSD")


def _grouped(value: float, thousands: str = ",", decimal: str = ".") -> str:
    text = f"{value:,.2f}"
    if thousands == ",":
        return text
    return text.replace(",", "\0").replace(".", decimal).replace("\0", thousands)


def format_currency(value: float, currency: str = "USD") -> str:
    """Format an amount the way each market displays it.

    USD ``$1,700.00``, AED ``AED 1,700.00``, RSD ``1.700,00 RSD``. The code
    and the amount are separated by a plain ASCII space.
    """
    code = currency.upper()
    if code not in CURRENCY_CODES:
        raise ValueError(f"Unsupported currency: {currency}")
    if not math.isfinite(value):
        return f"{value} {code}"

    sign = "-" if value < 0 and round(abs(value), 2) != 0 else ""
    amount = abs(value)
    if code == "USD":
        return f"{sign}${_grouped(amount)}"
    if code == "AED":
        return f"{sign}AED {_grouped(amount)}"
    return f"{sign}{_grouped(amount, thousands='.', decimal=',')} RSD"


def format_percentage(value: float) -> str:
    return f"%{value:.2f}"
