# controllers/settings.py
import logging

from admin_api.errors import ApiError
from admin_api.normalizers import normalize_checkin_slots, normalize_settings, pick
from metrics.config import MetricsConfigHelper
from utils import to_decimal

logger = logging.getLogger(__name__)

SOCIAL_PLATFORMS = ("twitter", "instagram", "facebook", "youtube", "telegram", "website")
NON_NEGATIVE_KEYS = (
    "minWithdrawal", "maxWithdrawal", "withdrawalFee", "transferFee", "minTransfer",
    "signupBonus", "referralBonus", "baseMiningRate",
)


class SettingsController:
    """The flat settings bundle and the social links, each read and written as a whole."""

    def __init__(self, client):
        self.client = client
        self.settings = normalize_settings({})
        self.social_links = {}
        self.error = None
        self.toast = None
        self.last_exception = None

    def _record_failure(self, message, exc):
        logger.error(f"{message}: {exc}")
        self.last_exception = exc
        self.error = f"{message}: {exc}"
        return False, self.error

    def _fail(self, message):
        self.error = message
        return False, message

    @property
    def unauthorized(self):
        return self.last_exception is not None and self.last_exception.is_unauthorized

    def load(self):
        self.error = None
        try:
            self.settings = normalize_settings(self.client.get_settings())
        except ApiError as e:
            self._record_failure("Failed to load settings", e)
        return self

    def load_social_links(self):
        try:
            links = pick(self.client.get_social_links(), "socialLinks") or {}
            self.social_links = links if isinstance(links, dict) else {}
        except ApiError as e:
            self._record_failure("Failed to load social links", e)
        return self

    def update(self, changes):
        if not changes:
            return self._fail("No settings to update")
        changes = dict(changes)
        for key in NON_NEGATIVE_KEYS:
            if key in changes and to_decimal(changes[key], "-1") < 0:
                return self._fail(f"{key} cannot be negative")
        if "dailyCheckinBonuses" in changes:
            slots = changes["dailyCheckinBonuses"]
            if not isinstance(slots, (list, tuple)) or len(slots) != MetricsConfigHelper.CHECKIN_SLOTS:
                return self._fail(f"Daily check-in needs exactly {MetricsConfigHelper.CHECKIN_SLOTS} rewards")
            changes["dailyCheckinBonuses"] = normalize_checkin_slots(slots)

        try:
            self.client.update_settings(changes)
        except ApiError as e:
            return self._record_failure("Failed to update settings", e)

        self.settings.values.update(changes)
        self.error = None
        self.toast = "Settings saved successfully!"
        logger.info("Settings updated: %s", ", ".join(sorted(changes)))
        return True, self.toast

    def update_social_links(self, links):
        links = {k: (v or "").strip() for k, v in (links or {}).items() if k in SOCIAL_PLATFORMS}
        if not links:
            return self._fail("No social links to update")
        for platform, url in links.items():
            if url and not url.startswith(("http://", "https://")):
                return self._fail(f"{platform} link must start with http:// or https://")
        try:
            self.client.update_social_links(links)
        except ApiError as e:
            return self._record_failure("Failed to update social links", e)

        self.social_links.update(links)
        self.error = None
        self.toast = "Social links updated successfully!"
        logger.info(self.toast)
        return True, self.toast

    def to_dict(self):
        return {
            "settings": self.settings.values,
            "social_links": self.social_links,
            "error": self.error,
            "toast": self.toast,
        }
