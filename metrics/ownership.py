# metrics/ownership.py
from decimal import Decimal

from metrics.config import MetricsConfigHelper
from utils import round_half_up, to_decimal


class OwnershipHelper:

    @staticmethod
    def _capped_component(done, required) -> Decimal:
        if required <= 0:
            return Decimal("100")
        ratio = to_decimal(done) / Decimal(required)
        ratio = max(Decimal("0"), min(ratio, Decimal("1")))
        return ratio * 100

    @staticmethod
    def percentage(days_active, mining_sessions, kyc_invited) -> int:
        """
        Average of three components, each capped at 100 before averaging:
        days active out of 30, mining sessions out of 20, and the KYC invite flag.
        Always an integer in [0, 100].
        """
        days = OwnershipHelper._capped_component(days_active, MetricsConfigHelper.OWNERSHIP_DAYS_REQUIRED)
        sessions = OwnershipHelper._capped_component(
            mining_sessions, MetricsConfigHelper.OWNERSHIP_SESSIONS_REQUIRED
        )
        kyc = Decimal("100") if kyc_invited else Decimal("0")
        average = (days + sessions + kyc) / MetricsConfigHelper.OWNERSHIP_COMPONENTS
        return int(round_half_up(average))

    @staticmethod
    def for_user(user) -> int:
        progress = user.ownership_progress
        return OwnershipHelper.percentage(progress.days_active, progress.mining_sessions, progress.kyc_invited)
