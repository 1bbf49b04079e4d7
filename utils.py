import re
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation


def validate_email(email):
    return re.match(r'^[\w\.-]+@[\w\.-]+\.\w+$', email or "")


def is_blank(value):
    """True for None, empty or whitespace-only strings."""
    return value is None or not str(value).strip()


def clean_reason(value):
    """The stripped reason, or None unless it is a non-blank string."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def clean_params(params):
    """Drop query parameters that are None or empty so they never reach the URL as 'None'."""
    if not params:
        return {}
    return {k: v for k, v in params.items() if v is not None and v != ""}


def to_decimal(value, default="0"):
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(default)


def round_half_up(value, places=0):
    """Half away from zero, not banker's rounding."""
    quant = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(quant, rounding=ROUND_HALF_UP)


def parse_datetime(value):
    """Parse the API's ISO-8601 timestamps (``...Z`` included) into aware datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def utcnow():
    return datetime.now(timezone.utc)
