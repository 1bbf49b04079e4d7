# controllers/coins.py
from admin_api.normalizers import normalize_stats, normalize_transactions, pick
from controllers.base import ListController
from utils import clean_reason, is_blank, to_decimal


class CoinManagementController(ListController):
    """Coin ledger, coin stats, manual balance changes and the coin packages on sale."""

    entity_name = "coin"
    search_fields = ("user.name", "user.email", "reason", "type")

    def __init__(self, client, page_size=10, **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.packages = []

    def fetch_list(self):
        return normalize_transactions(self.client.get_transactions(**self.query_params()))

    def fetch_stats(self):
        return normalize_stats(self.client.get_coin_stats())

    def fetch_packages(self):
        packages = pick(self.client.get_coin_packages(), "packages", default=[])
        return [p for p in packages if isinstance(p, dict)] if isinstance(packages, list) else []

    def _apply_packages(self, packages):
        self.packages = packages

    def fetchers(self):
        return super().fetchers() + [(self.fetch_packages, self._apply_packages)]

    def adjust(self, user_id, amount, action, reason):
        if is_blank(user_id):
            return self._fail("Please select a user")
        if action not in ("add", "deduct"):
            return self._fail("Action must be 'add' or 'deduct'")
        value = to_decimal(amount)
        if value <= 0:
            return self._fail("Please enter a valid amount")
        reason = clean_reason(reason)
        if reason is None:
            return self._fail("Please provide a reason")
        verb = "added" if action == "add" else "deducted"
        return self._run_action(
            lambda: self.client.update_user_coins(user_id, float(value), action, reason),
            success_message=f"{float(value):g} coins {verb} successfully",
            failure_message="Failed to update coins",
        )

    # ==================== PACKAGES ====================

    def _package_id(self, package):
        return str(package.get("_id") or package.get("id"))

    def _validate_package(self, data):
        if is_blank(data.get("name")):
            return "Package name is required"
        if to_decimal(data.get("coins")) <= 0:
            return "Coins must be greater than 0"
        if to_decimal(data.get("price"), "-1") < 0:
            return "Price cannot be negative"
        return None

    def create_package(self, data):
        problem = self._validate_package(data)
        if problem:
            return self._fail(problem)

        def patch(response):
            package = pick(response, "package")
            if isinstance(package, dict):
                self.packages.append(package)

        return self._run_action(
            lambda: self.client.create_coin_package(data),
            success_message=f"Package {data['name']} created",
            failure_message="Failed to create package",
            patch=patch,
        )

    def update_package(self, package_id, data):
        problem = self._validate_package(data)
        if problem:
            return self._fail(problem)

        def patch(_):
            for package in self.packages:
                if self._package_id(package) == str(package_id):
                    package.update(data)

        return self._run_action(
            lambda: self.client.update_coin_package(package_id, data),
            success_message="Package updated",
            failure_message="Failed to update package",
            patch=patch,
        )

    def delete_package(self, package_id):
        def patch(_):
            self.packages = [p for p in self.packages if self._package_id(p) != str(package_id)]

        return self._run_action(
            lambda: self.client.delete_coin_package(package_id),
            success_message="Package deleted",
            failure_message="Failed to delete package",
            patch=patch,
        )

    def extra_state(self):
        return {"packages": self.packages}
