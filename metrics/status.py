# metrics/status.py
from utils import parse_datetime, to_decimal, utcnow


def is_credit(tx_type, amount) -> bool:
    """A ledger row reads as an addition when it is typed credit or carries a positive amount."""
    return tx_type == "credit" or to_decimal(amount) > 0


def is_expired(valid_until, now=None) -> bool:
    """Promo codes expire once ``validUntil`` is in the past; no end date never expires."""
    valid_until = parse_datetime(valid_until)
    if valid_until is None:
        return False
    return valid_until < (now or utcnow())
