# controllers/referrals.py
from admin_api.normalizers import normalize_referrals, normalize_stats, pick
from controllers.base import ListController
from metrics.referrals import ReferralAggregationHelper
from utils import to_decimal

REFERRAL_SETTING_KEYS = ("directBonus", "indirectBonus", "maxLevels", "rateBoostPercent", "isEnabled")


class ReferralsController(ListController):
    """
    Referral edges plus the per-referrer leaderboard folded from them.
    Search narrows the leaderboard by referrer name or email.
    """

    entity_name = "referral"
    search_fields = ("referrer.name", "referrer.email", "referred.name", "referred.email")

    def __init__(self, client, page_size=10, **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.settings = {}
        self.tree = None

    def fetch_list(self):
        return normalize_referrals(self.client.get_referrals(**self.query_params()))

    def fetch_stats(self):
        return normalize_stats(self.client.get_referral_stats())

    def fetch_settings(self):
        settings = pick(self.client.get_referral_settings(), "settings") or {}
        return settings if isinstance(settings, dict) else {}

    def _apply_settings(self, settings):
        self.settings = settings

    def fetchers(self):
        return super().fetchers() + [(self.fetch_settings, self._apply_settings)]

    def leaderboard(self):
        summaries = ReferralAggregationHelper.aggregate(self.items)
        return ReferralAggregationHelper.search(summaries, self.search)

    def load_tree(self, user_id):
        self.tree = pick(self.client.get_user_referral_tree(user_id), "tree", "referrals")
        return self.tree

    def update_settings(self, changes):
        changes = {k: v for k, v in (changes or {}).items() if k in REFERRAL_SETTING_KEYS}
        if not changes:
            return self._fail("No referral settings to update")
        for key in ("directBonus", "indirectBonus", "rateBoostPercent"):
            if key in changes and to_decimal(changes[key], "-1") < 0:
                return self._fail(f"{key} cannot be negative")
        return self._run_action(
            lambda: self.client.update_referral_settings(changes),
            success_message="Referral settings updated successfully!",
            failure_message="Failed to update referral settings",
            patch=lambda _: self.settings.update(changes),
            refresh=False,
        )

    def extra_state(self):
        return {
            "settings": self.settings,
            "leaderboard": [summary.to_dict() for summary in self.leaderboard()],
            "tree": self.tree,
        }
