# metrics/formatting.py
from decimal import Decimal

from metrics.config import MetricsConfigHelper
from utils import round_half_up, to_decimal


def _fixed(value: Decimal, places: int) -> str:
    return f"{round_half_up(value, places):.{places}f}"


def _plain(value: Decimal) -> str:
    if value == value.to_integral_value():
        return str(int(value))
    text = _fixed(value, 2)
    return text.rstrip("0").rstrip(".")


def format_number(value) -> str:
    """
    999 -> '999', 1500 -> '1.5K', 2500000 -> '2.5M'.
    A value that rounds up to the next unit is shown in that unit (999999 -> '1.0M').
    """
    number = to_decimal(value)
    if abs(round_half_up(number, 2)) < MetricsConfigHelper.THOUSAND:
        return _plain(number)
    thousands = round_half_up(number / MetricsConfigHelper.THOUSAND, 1)
    if abs(thousands) < MetricsConfigHelper.THOUSAND:
        return f"{thousands:.1f}K"
    return f"{_fixed(number / MetricsConfigHelper.MILLION, 1)}M"


def format_currency(value) -> str:
    """
    Rupee amounts: K below a lakh, then L (lakh) below a million, then M.
    150000 is '1.50L', never '150.0K'; 999999 rounds into '10.00L' so it becomes '1.00M'.
    """
    number = to_decimal(value)
    symbol = MetricsConfigHelper.CURRENCY_SYMBOL
    if abs(round_half_up(number, 2)) < MetricsConfigHelper.THOUSAND:
        return f"{symbol}{_plain(number)}"
    thousands = round_half_up(number / MetricsConfigHelper.THOUSAND, 1)
    if abs(thousands) < MetricsConfigHelper.LAKH / MetricsConfigHelper.THOUSAND:
        return f"{symbol}{thousands:.1f}K"
    lakhs = round_half_up(number / MetricsConfigHelper.LAKH, 2)
    if abs(lakhs) < MetricsConfigHelper.MILLION / MetricsConfigHelper.LAKH:
        return f"{symbol}{lakhs:.2f}L"
    return f"{symbol}{_fixed(number / MetricsConfigHelper.MILLION, 2)}M"


def pagination_range(pagination, page_size=None):
    """(first, last, total) row numbers shown on the current page."""
    size = page_size or pagination.limit or 10
    total = max(pagination.total, 0)
    if total == 0:
        return 0, 0, 0
    first = (max(pagination.current, 1) - 1) * size + 1
    last = min(pagination.current * size, total)
    return first, last, total


def pagination_summary(pagination, page_size=None) -> str:
    first, last, total = pagination_range(pagination, page_size)
    return f"Showing {first} to {last} of {total}"
