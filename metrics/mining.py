# metrics/mining.py
import math
from decimal import Decimal
from typing import Any, Dict

from metrics.config import MetricsConfigHelper
from utils import parse_datetime, round_half_up, to_decimal, utcnow


class MiningMetricsHelper:
    """Cycle progress, remaining time and the per-user speed breakdown."""

    @staticmethod
    def elapsed_seconds(start_time, now=None) -> int:
        """Whole seconds since ``start_time``, floored; 0 without a start."""
        start = parse_datetime(start_time)
        if start is None:
            return 0
        return math.floor(((now or utcnow()) - start).total_seconds())

    @staticmethod
    def elapsed_hours(start_time, now=None) -> Decimal:
        return Decimal(MiningMetricsHelper.elapsed_seconds(start_time, now)) / Decimal("3600")

    @staticmethod
    def format_seconds(seconds) -> str:
        h, rest = divmod(max(int(seconds), 0), 3600)
        m, s = divmod(rest, 60)
        return f"{h:02d}:{m:02d}:{s:02d}"

    @staticmethod
    def format_remaining(hours) -> str:
        """HH:MM:SS, flooring hours, then minutes, then seconds."""
        remaining = max(to_decimal(hours), Decimal("0"))
        return MiningMetricsHelper.format_seconds(math.floor(remaining * 3600))

    @staticmethod
    def progress(start_time, cycle_hours=None, now=None) -> Dict[str, Any]:
        """
        Progress through the current mining cycle.

        A session past the end of its cycle reports 100% and 00:00:00 but is not
        marked completed here; status only changes on an explicit cancel or when
        the API says so.
        """
        cycle = to_decimal(cycle_hours or MetricsConfigHelper.DEFAULT_CYCLE_HOURS)
        if cycle <= 0:
            cycle = Decimal(MetricsConfigHelper.DEFAULT_CYCLE_HOURS)
        cycle_seconds = math.floor(cycle * 3600)

        elapsed = MiningMetricsHelper.elapsed_seconds(start_time, now)
        elapsed = min(max(elapsed, 0), cycle_seconds)
        remaining = cycle_seconds - elapsed

        percent = int(round_half_up(Decimal(elapsed) / cycle_seconds * 100))
        percent = max(0, min(100, percent))

        return {
            "progress": percent,
            "elapsed_hours": elapsed / 3600,
            "remaining_hours": remaining / 3600,
            "remaining": MiningMetricsHelper.format_seconds(remaining),
            "cycle_complete": remaining == 0,
        }

    @staticmethod
    def for_session(session, cycle_hours=None, now=None) -> Dict[str, Any]:
        return MiningMetricsHelper.progress(session.start_time, cycle_hours, now)

    @staticmethod
    def speed_breakdown(base_rate, active_referrals) -> Dict[str, float]:
        """
        base: the global base rate.
        referral: every active referral adds 20% of the base rate, rounded to 2 places.
        boost: always 0 until purchased boosts exist in the schema.
        """
        base = to_decimal(base_rate)
        active = max(int(active_referrals or 0), 0)
        referral = round_half_up(active * base * MetricsConfigHelper.REFERRAL_RATE_SHARE, 2)
        boost = Decimal(MetricsConfigHelper.BOOST_LEVEL)
        return {
            "base_level": float(base),
            "referral_level": float(referral),
            "boost_level": float(boost),
            "total_rate": float(base + referral + boost),
        }
