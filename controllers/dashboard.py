# controllers/dashboard.py
import logging

from admin_api.errors import ApiError, ValidationError
from admin_api.normalizers import pick
from controllers.base import fetch_executor
from metrics.config import MetricsConfigHelper
from metrics.formatting import format_currency, format_number
from shell import navigation, stat_card

logger = logging.getLogger(__name__)


class DashboardController:
    """Headline numbers for the selected period plus the API's health report."""

    def __init__(self, client, period="week", executor=None):
        if period not in MetricsConfigHelper.DASHBOARD_PERIODS:
            raise ValidationError(f"Unknown dashboard period: {period}")
        self.client = client
        self.period = period
        self.executor = executor or fetch_executor
        self.stats = {}
        self.health = {}
        self.error = None
        self.last_exception = None

    def set_period(self, period):
        if period not in MetricsConfigHelper.DASHBOARD_PERIODS:
            raise ValidationError(f"Unknown dashboard period: {period}")
        self.period = period
        return self.load()

    def load(self):
        self.error = None
        stats_future = self.executor.submit(self.client.get_dashboard_stats, self.period)
        health_future = self.executor.submit(self.client.get_system_health)
        try:
            stats = pick(stats_future.result(), "stats") or {}
            self.stats = stats if isinstance(stats, dict) else {}
        except ApiError as e:
            logger.error(f"Failed to load dashboard stats: {e}")
            self.error = f"Failed to load dashboard stats: {e}"
            self.last_exception = e
        try:
            health = pick(health_future.result(), "health") or {}
            self.health = health if isinstance(health, dict) else {}
        except ApiError as e:
            logger.error(f"Failed to load system health: {e}")
            self.error = self.error or f"Failed to load system health: {e}"
            self.last_exception = e
        return self

    @property
    def unauthorized(self):
        return self.last_exception is not None and self.last_exception.is_unauthorized

    def _section(self, name):
        section = self.stats.get(name)
        return section if isinstance(section, dict) else {}

    def badges(self):
        return {
            "kyc": int(self._section("kyc").get("pending") or 0),
            "payments": int(self._section("payments").get("pending") or 0),
        }

    def cards(self):
        users = self._section("users")
        mining = self._section("mining")
        transactions = self._section("transactions")
        referrals = self._section("referrals")

        new_users = users.get("new") or 0
        return [
            stat_card("Total Users", format_number(users.get("total") or 0),
                      change=f"+{format_number(new_users)} new" if new_users else None,
                      icon_color="blue"),
            stat_card("Active Miners", format_number(mining.get("activeSessions") or 0),
                      change=f"{format_number(mining.get('totalSessions') or 0)} sessions total",
                      icon_color="orange"),
            stat_card("Total Mined", format_number(mining.get("totalMinedCoins") or 0), icon_color="purple"),
            stat_card("Revenue", format_currency(transactions.get("totalRevenue") or 0), icon_color="green"),
            stat_card("Pending Withdrawals", format_number(transactions.get("pendingWithdrawals") or 0),
                      change_type="negative", icon_color="red"),
            stat_card("Referrals", format_number(referrals.get("total") or 0),
                      change=f"{format_number(referrals.get('active') or 0)} active",
                      icon_color="green"),
        ]

    def to_dict(self):
        return {
            "period": self.period,
            "cards": self.cards(),
            "stats": self.stats,
            "health": self.health,
            "navigation": navigation(self.badges(), "/admin/dashboard"),
            "error": self.error,
        }
