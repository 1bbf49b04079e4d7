# admin_api/client.py
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from admin_api.errors import ApiError, ApiConnectionError
from admin_api.session import AdminSession
from utils import clean_params

logger = logging.getLogger(__name__)


class AdminApiClient:
    """
    Thin wrapper over the mining-app admin REST API (``/api/admin``).

    Every domain method builds its query/body, picks a verb and goes through
    ``request``. The decoded JSON body is returned as-is; normalization into
    typed records happens in ``admin_api.normalizers``.
    """

    def __init__(self, session: AdminSession, base_url: str, timeout: int = 30,
                 max_retries: int = 0, http: Optional[requests.Session] = None):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or self._build_http(max_retries)

    @staticmethod
    def _build_http(max_retries: int) -> requests.Session:
        http = requests.Session()
        if max_retries:
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=1,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            http.mount("http://", adapter)
            http.mount("https://", adapter)
        return http

    @classmethod
    def from_config(cls, config, session: AdminSession, http=None) -> "AdminApiClient":
        return cls(
            session,
            base_url=config["ADMIN_API_BASE_URL"],
            timeout=config.get("REQUEST_TIMEOUT_SECONDS", 30),
            max_retries=config.get("API_MAX_RETRIES", 0),
            http=http,
        )

    # ==================== CORE ====================

    def _headers(self, multipart: bool = False) -> Dict[str, str]:
        headers = {}
        # multipart bodies need requests to write the boundary itself
        if not multipart:
            headers["Content-Type"] = "application/json"
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    def request(self, path: str, method: str = "GET", params: Optional[Dict[str, Any]] = None,
                json: Any = None, files: Any = None, data: Any = None,
                error_message: Optional[str] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        multipart = files is not None
        try:
            response = self.http.request(
                method,
                url,
                params=clean_params(params),
                json=None if multipart else json,
                data=data,
                files=files,
                headers=self._headers(multipart),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed before a response: {e}")
            raise ApiConnectionError(error_message or f"Could not reach admin API: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"success": response.ok, "data": body}

        if not response.ok or not body.get("success"):
            message = body.get("message") or error_message or "Request failed"
            logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code, payload=body)

        return body

    # ==================== AUTH ====================

    def login(self, email, password):
        data = self.request("/auth/login", "POST", json={"email": email, "password": password},
                            error_message="Login failed")
        token = data.get("token") or (data.get("data") or {}).get("token")
        admin = data.get("admin") or (data.get("data") or {}).get("admin")
        if token:
            self.session.login(token, admin)
        return data

    def get_me(self):
        return self.request("/auth/me", error_message="Failed to get admin info")

    def logout(self):
        try:
            return self.request("/auth/logout", "POST", error_message="Logout failed")
        finally:
            self.session.clear()

    def change_password(self, current_password, new_password):
        return self.request("/auth/change-password", "PUT",
                            json={"currentPassword": current_password, "newPassword": new_password},
                            error_message="Failed to change password")

    # ==================== DASHBOARD ====================

    def get_dashboard_stats(self, period="week"):
        return self.request("/dashboard/stats", params={"period": period},
                            error_message="Failed to get dashboard stats")

    def get_system_health(self):
        return self.request("/dashboard/health", error_message="Failed to get system health")

    # ==================== USERS ====================

    def get_users(self, **params):
        return self.request("/users", params=params, error_message="Failed to get users")

    def get_user_stats(self):
        return self.request("/users/stats", error_message="Failed to get user stats")

    def create_user(self, user_data):
        return self.request("/users", "POST", json=user_data, error_message="Failed to create user")

    def get_user(self, user_id):
        return self.request(f"/users/{user_id}", error_message="Failed to get user")

    def update_user(self, user_id, user_data):
        return self.request(f"/users/{user_id}", "PUT", json=user_data,
                            error_message="Failed to update user")

    def suspend_user(self, user_id, reason):
        return self.request(f"/users/{user_id}/suspend", "PUT", json={"reason": reason},
                            error_message="Failed to suspend user")

    def activate_user(self, user_id):
        return self.request(f"/users/{user_id}/activate", "PUT", error_message="Failed to activate user")

    def adjust_user_coins(self, user_id, amount, wallet_type, reason):
        return self.request(f"/users/{user_id}/adjust-coins", "POST",
                            json={"amount": amount, "walletType": wallet_type, "reason": reason},
                            error_message="Failed to adjust coins")

    def delete_user(self, user_id):
        return self.request(f"/users/{user_id}", "DELETE", error_message="Failed to delete user")

    def update_user_coins(self, user_id, amount, action, reason):
        endpoint = "add-coins" if action == "add" else "deduct-coins"
        return self.request(f"/users/{user_id}/{endpoint}", "POST",
                            json={"amount": amount, "reason": reason},
                            error_message="Failed to update user coins")

    # ==================== KYC ====================

    def get_kyc_stats(self):
        return self.request("/kyc/stats", error_message="Failed to get KYC stats")

    def get_kyc_list(self, **params):
        return self.request("/kyc", params=params, error_message="Failed to get KYC list")

    def get_kyc(self, kyc_id):
        return self.request(f"/kyc/{kyc_id}", error_message="Failed to get KYC")

    def approve_kyc(self, kyc_id):
        return self.request(f"/kyc/{kyc_id}/approve", "PUT", error_message="Failed to approve KYC")

    def reject_kyc(self, kyc_id, reason):
        return self.request(f"/kyc/{kyc_id}/reject", "PUT", json={"reason": reason},
                            error_message="Failed to reject KYC")

    # ==================== MINING ====================

    def get_mining_sessions(self, **params):
        return self.request("/mining/sessions", params=params, error_message="Failed to get mining sessions")

    def get_mining_stats(self):
        return self.request("/mining/stats", error_message="Failed to get mining stats")

    def get_mining_settings(self):
        return self.request("/mining/settings", error_message="Failed to get mining settings")

    def update_mining_settings(self, settings):
        return self.request("/mining/settings", "PUT", json=settings,
                            error_message="Failed to update mining settings")

    def cancel_mining_session(self, session_id, reason):
        return self.request(f"/mining/sessions/{session_id}/cancel", "PUT", json={"reason": reason},
                            error_message="Failed to cancel mining session")

    # ==================== TRANSACTIONS ====================

    def get_transactions(self, **params):
        return self.request("/transactions", params=params, error_message="Failed to get transactions")

    def get_transaction(self, transaction_id):
        return self.request(f"/transactions/{transaction_id}", error_message="Failed to get transaction")

    # ==================== PAYMENTS ====================

    def get_payment_stats(self):
        return self.request("/payments/stats", error_message="Failed to get payment stats")

    def get_payments(self, **params):
        return self.request("/payments", params=params, error_message="Failed to get payments")

    def approve_payment(self, payment_id):
        return self.request(f"/payments/{payment_id}/approve", "PUT", error_message="Failed to approve payment")

    def reject_payment(self, payment_id, reason):
        return self.request(f"/payments/{payment_id}/reject", "PUT", json={"reason": reason},
                            error_message="Failed to reject payment")

    def get_payment_settings(self):
        return self.request("/payments/settings", error_message="Failed to get payment settings")

    def update_payment_settings(self, settings):
        return self.request("/payments/settings", "PUT", json=settings,
                            error_message="Failed to update payment settings")

    def upload_qr_code(self, filename, stream, content_type="image/png"):
        return self.request("/payments/upload-qr", "POST",
                            files={"qrCode": (filename, stream, content_type)},
                            error_message="Failed to upload QR code")

    # ==================== COIN PACKAGES ====================

    def get_coin_stats(self):
        return self.request("/coins/stats", error_message="Failed to get coin stats")

    def get_coin_packages(self):
        return self.request("/coins/packages", error_message="Failed to get coin packages")

    def create_coin_package(self, package_data):
        return self.request("/coins/packages", "POST", json=package_data,
                            error_message="Failed to create coin package")

    def update_coin_package(self, package_id, package_data):
        return self.request(f"/coins/packages/{package_id}", "PUT", json=package_data,
                            error_message="Failed to update coin package")

    def delete_coin_package(self, package_id):
        return self.request(f"/coins/packages/{package_id}", "DELETE",
                            error_message="Failed to delete coin package")

    # ==================== BANNERS ====================

    def get_banners(self):
        return self.request("/banners", error_message="Failed to get banners")

    def create_banner(self, fields, image=None):
        return self.request("/banners", "POST", data=fields, files=image or {},
                            error_message="Failed to create banner")

    def update_banner(self, banner_id, fields, image=None):
        return self.request(f"/banners/{banner_id}", "PUT", data=fields, files=image or {},
                            error_message="Failed to update banner")

    def delete_banner(self, banner_id):
        return self.request(f"/banners/{banner_id}", "DELETE", error_message="Failed to delete banner")

    # ==================== REFERRALS ====================

    def get_referrals(self, **params):
        return self.request("/referrals", params=params, error_message="Failed to get referrals")

    def get_referral_stats(self):
        return self.request("/referrals/stats", error_message="Failed to get referral stats")

    def get_referral_settings(self):
        return self.request("/referrals/settings", error_message="Failed to get referral settings")

    def update_referral_settings(self, settings):
        return self.request("/referrals/settings", "PUT", json=settings,
                            error_message="Failed to update referral settings")

    def get_user_referral_tree(self, user_id):
        return self.request(f"/referrals/user/{user_id}/tree", error_message="Failed to get user referral tree")

    # ==================== NOTIFICATIONS ====================

    def get_notifications(self, **params):
        return self.request("/notifications", params=params, error_message="Failed to get notifications")

    def get_notification_stats(self):
        return self.request("/notifications/stats", error_message="Failed to get notification stats")

    def get_notification_templates(self):
        return self.request("/notifications/templates", error_message="Failed to get notification templates")

    def delete_notification(self, notification_id):
        return self.request(f"/notifications/{notification_id}", "DELETE",
                            error_message="Failed to delete notification")

    def send_notification(self, notification):
        return self.request("/notifications", "POST", json=notification,
                            error_message="Failed to send notification")

    def send_bulk_notification(self, notification):
        return self.request("/notifications/bulk", "POST", json=notification,
                            error_message="Failed to send bulk notification")

    # ==================== SETTINGS ====================

    def get_settings(self):
        return self.request("/settings", error_message="Failed to get settings")

    def update_settings(self, settings):
        return self.request("/settings/bulk", "PUT", json={"settings": settings},
                            error_message="Failed to update settings")

    def get_social_links(self):
        return self.request("/settings/social", error_message="Failed to get social links")

    def update_social_links(self, links):
        return self.request("/settings/social", "PUT", json={"socialLinks": links},
                            error_message="Failed to update social links")

    # ==================== PROMO CODES ====================

    def get_promo_codes(self, **params):
        return self.request("/settings/promo-codes", params=params, error_message="Failed to get promo codes")

    def get_promo_code_stats(self):
        return self.request("/settings/promo-codes/stats", error_message="Failed to get promo code stats")

    def create_promo_code(self, promo):
        return self.request("/settings/promo-codes", "POST", json=promo,
                            error_message="Failed to create promo code")

    def update_promo_code(self, promo_id, promo):
        return self.request(f"/settings/promo-codes/{promo_id}", "PUT", json=promo,
                            error_message="Failed to update promo code")

    def toggle_promo_code_status(self, promo_id):
        return self.request(f"/settings/promo-codes/{promo_id}/toggle-status", "PUT",
                            error_message="Failed to toggle promo code status")

    def delete_promo_code(self, promo_id):
        return self.request(f"/settings/promo-codes/{promo_id}", "DELETE",
                            error_message="Failed to delete promo code")
