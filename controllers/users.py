# controllers/users.py
from admin_api.normalizers import (
    normalize_mining_settings, normalize_single_user, normalize_stats, normalize_users,
)
from controllers.base import ListController
from metrics.config import MetricsConfigHelper
from metrics.mining import MiningMetricsHelper
from metrics.ownership import OwnershipHelper
from models import UserStatus
from utils import clean_reason, is_blank, to_decimal, validate_email


class UsersController(ListController):
    """
    User directory. Alongside stats and the page of users it loads the mining
    settings, because every row shows a speed breakdown built from the global
    base rate.
    """

    entity_name = "user"
    search_fields = ("name", "email", "phone", "referral_code")

    def __init__(self, client, page_size=10, **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.mining_settings = {
            "baseRate": MetricsConfigHelper.DEFAULT_BASE_RATE,
            "cycleDuration": MetricsConfigHelper.DEFAULT_CYCLE_HOURS,
        }

    def fetch_list(self):
        params = self.query_params()
        # the user search goes to the API, the other lists filter locally
        if self.search.strip():
            params["search"] = self.search.strip()
        return normalize_users(self.client.get_users(**params))

    def fetch_stats(self):
        return normalize_stats(self.client.get_user_stats())

    def fetch_mining_settings(self):
        return normalize_mining_settings(self.client.get_mining_settings())

    def _apply_mining_settings(self, settings):
        self.mining_settings = settings

    def fetchers(self):
        return super().fetchers() + [(self.fetch_mining_settings, self._apply_mining_settings)]

    def serialize_item(self, user):
        data = user.to_dict()
        data["ownership"] = OwnershipHelper.for_user(user)
        data.update(MiningMetricsHelper.speed_breakdown(
            self.mining_settings.get("baseRate"), user.referral_stats.active_count
        ))
        return data

    def open(self, user_id):
        user = normalize_single_user(self.client.get_user(user_id))
        self.selected = user or self.find(user_id)
        return self.selected

    # ---------------------------------------------------------------
    # actions
    # ---------------------------------------------------------------
    def create(self, user_data):
        if is_blank(user_data.get("name")) or is_blank(user_data.get("email")):
            return self._fail("Name and email are required")
        if not validate_email(user_data["email"]):
            return self._fail("Please enter a valid email address")

        def patch(response):
            user = normalize_single_user(response)
            if user is not None:
                self.items.insert(0, user)

        return self._run_action(
            lambda: self.client.create_user(user_data),
            success_message=f"User {user_data['name']} created successfully!",
            failure_message="Failed to create user",
            patch=patch,
        )

    def update(self, user_id, changes):
        def patch(response):
            user = normalize_single_user(response)
            if user is not None:
                self._replace(user)

        return self._run_action(
            lambda: self.client.update_user(user_id, changes),
            success_message="User updated successfully!",
            failure_message="Failed to update user",
            patch=patch,
        )

    def _replace(self, user):
        self.items = [user if item.id == user.id else item for item in self.items]
        if self.selected is not None and self.selected.id == user.id:
            self.selected = user

    def suspend(self, user_id, reason):
        reason = clean_reason(reason)
        if reason is None:
            return self._fail("Please provide a reason for suspension")
        return self._run_action(
            lambda: self.client.suspend_user(user_id, reason),
            success_message="User suspended",
            failure_message="Failed to suspend user",
            patch=lambda _: self._patch_item(user_id, status=UserStatus.SUSPENDED),
        )

    def activate(self, user_id):
        return self._run_action(
            lambda: self.client.activate_user(user_id),
            success_message="User activated",
            failure_message="Failed to activate user",
            patch=lambda _: self._patch_item(user_id, status=UserStatus.ACTIVE),
        )

    def delete(self, user_id):
        return self._run_action(
            lambda: self.client.delete_user(user_id),
            success_message="User deleted",
            failure_message="Failed to delete user",
            patch=lambda _: self._remove_item(user_id),
        )

    def change_coins(self, user_id, amount, action, reason):
        """Add or deduct coins; the local balance moves before the refresh lands."""
        if action not in ("add", "deduct"):
            return self._fail("Action must be 'add' or 'deduct'")
        value = to_decimal(amount)
        if value <= 0:
            return self._fail("Please enter a valid amount")
        reason = clean_reason(reason)
        if reason is None:
            return self._fail("Please provide a reason")

        user = self.find(user_id)
        if action == "deduct" and user is not None and value > to_decimal(user.coin_balance):
            return self._fail("Cannot deduct more coins than the user holds")

        def patch(response):
            new_balance = response.get("newBalance") if isinstance(response, dict) else None
            if new_balance is None and user is not None:
                delta = value if action == "add" else -value
                new_balance = float(to_decimal(user.coin_balance) + delta)
            if new_balance is not None:
                self._patch_item(user_id, coin_balance=float(new_balance))

        verb = "added to" if action == "add" else "deducted from"
        name = user.name if user is not None else user_id
        return self._run_action(
            lambda: self.client.update_user_coins(user_id, float(value), action, reason),
            success_message=f"{float(value):g} coins {verb} {name}",
            failure_message="Failed to update user coins",
            patch=patch,
        )

    def extra_state(self):
        return {"mining_settings": self.mining_settings}
