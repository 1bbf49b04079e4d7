# controllers/mining.py
from admin_api.normalizers import normalize_mining_sessions, normalize_mining_settings, normalize_stats
from controllers.base import ListController
from metrics.config import MetricsConfigHelper
from metrics.mining import MiningMetricsHelper
from models import MiningStatus
from utils import clean_reason, is_blank, to_decimal

MINING_SETTING_KEYS = ("baseRate", "cycleDuration", "maxSessionsPerDay", "referralBonus", "isEnabled")
DEFAULT_CANCEL_REASON = "Cancelled by admin"


class MiningController(ListController):
    entity_name = "mining"
    search_fields = ("user.name", "user.email")

    def __init__(self, client, page_size=10, cycle_hours=None, **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.settings = {
            "baseRate": MetricsConfigHelper.DEFAULT_BASE_RATE,
            "cycleDuration": cycle_hours or MetricsConfigHelper.DEFAULT_CYCLE_HOURS,
        }
        self.now = None

    def fetch_list(self):
        return normalize_mining_sessions(self.client.get_mining_sessions(**self.query_params()))

    def fetch_stats(self):
        return normalize_stats(self.client.get_mining_stats())

    def fetch_settings(self):
        return normalize_mining_settings(self.client.get_mining_settings())

    def _apply_settings(self, settings):
        self.settings = settings

    def fetchers(self):
        return super().fetchers() + [(self.fetch_settings, self._apply_settings)]

    @property
    def cycle_hours(self):
        return self.settings.get("cycleDuration") or MetricsConfigHelper.DEFAULT_CYCLE_HOURS

    def session_progress(self, session):
        return MiningMetricsHelper.for_session(session, self.cycle_hours, self.now)

    def serialize_item(self, session):
        data = session.to_dict()
        # progress only means something while the cycle is running
        if session.status == MiningStatus.ACTIVE:
            data.update(self.session_progress(session))
        return data

    def cancel(self, session_id, reason=DEFAULT_CANCEL_REASON):
        session = self.find(session_id)
        if session is not None and session.status != MiningStatus.ACTIVE:
            return self._fail(f"Mining session is already {session.status.value}")
        if reason is None or (isinstance(reason, str) and is_blank(reason)):
            reason = DEFAULT_CANCEL_REASON
        reason = clean_reason(reason)
        if reason is None:
            return self._fail("Cancellation reason must be text")
        return self._run_action(
            lambda: self.client.cancel_mining_session(session_id, reason),
            success_message="Mining session cancelled",
            failure_message="Failed to cancel mining session",
            patch=lambda _: self._patch_item(session_id, status=MiningStatus.CANCELLED),
        )

    def update_settings(self, changes):
        changes = {k: v for k, v in (changes or {}).items() if k in MINING_SETTING_KEYS}
        if not changes:
            return self._fail("No mining settings to update")
        if "baseRate" in changes and to_decimal(changes["baseRate"], "-1") <= 0:
            return self._fail("Base rate must be greater than 0")
        if "cycleDuration" in changes and to_decimal(changes["cycleDuration"], "-1") <= 0:
            return self._fail("Cycle duration must be greater than 0")

        return self._run_action(
            lambda: self.client.update_mining_settings(changes),
            success_message="Mining settings updated successfully!",
            failure_message="Failed to update mining settings",
            patch=lambda _: self.settings.update(changes),
            refresh=False,
        )

    def extra_state(self):
        return {"settings": self.settings}
