# metrics/config.py
from decimal import Decimal


class MetricsConfigHelper:
    """
    Fixed constants behind every number the console derives from raw API data.
    Ownership: 30 active days, 20 mining sessions and a KYC invite, each worth a third.
    Referral speed: each active referral adds 20% of the base mining rate.
    """

    DEFAULT_CYCLE_HOURS = 24
    DEFAULT_BASE_RATE = 0.25

    OWNERSHIP_DAYS_REQUIRED = 30
    OWNERSHIP_SESSIONS_REQUIRED = 20
    OWNERSHIP_COMPONENTS = 3

    REFERRAL_RATE_SHARE = Decimal("0.20")

    # Boost purchases have no field in the user schema yet
    BOOST_LEVEL = 0

    MILLION = Decimal("1000000")
    LAKH = Decimal("100000")
    THOUSAND = Decimal("1000")
    CURRENCY_SYMBOL = "₹"

    DEFAULT_CHECKIN_BONUSES = (5, 10, 15, 20, 30, 40, 50)
    CHECKIN_SLOTS = 7

    DASHBOARD_PERIODS = ("today", "week", "month", "year")
