import threading
from datetime import datetime, timezone

import pytest

from admin_api.errors import ValidationError
from controllers.banners import BannersController
from controllers.base import Debouncer, ListController
from controllers.coins import CoinManagementController
from controllers.dashboard import DashboardController
from controllers.kyc import KYCController
from controllers.mining import MiningController
from controllers.notifications import NotificationsController
from controllers.payments import PaymentsController
from controllers.promo_codes import CODE_ALPHABET, PromoCodesController, SearchGate, generate_code
from controllers.referrals import ReferralsController
from controllers.settings import SettingsController
from controllers.users import UsersController
from models import BannerStatus, MiningStatus, Pagination, ReviewStatus, UserStatus


def _kyc(kyc_id, name, status="pending"):
    return {"_id": kyc_id, "status": status, "user": {"_id": f"u-{kyc_id}", "name": name, "email": f"{kyc_id}@x.io"}}


PAGE = {"current": 1, "pages": 1, "total": 2}


# ==================== KYC ====================

@pytest.fixture
def kyc_routes(http):
    http.routes.update({
        ("GET", "/kyc/stats"): [{"success": True, "stats": {"pending": 2}}, {"success": True, "stats": {"pending": 1}}],
        ("GET", "/kyc"): [
            {"success": True, "kycRequests": [_kyc("k1", "Asha"), _kyc("k2", "Bilal")], "pagination": PAGE},
            {"success": True, "kycRequests": [_kyc("k2", "Bilal")], "pagination": {"current": 1, "pages": 1, "total": 1}},
        ],
        ("PUT", "/kyc/k1/approve"): {"success": True, "message": "KYC approved"},
    })
    return http


def test_approving_kyc_flips_locally_before_the_refresh(client, kyc_routes, deferred):
    controller = KYCController(client, background=deferred).load()
    assert [k.status for k in controller.items] == [ReviewStatus.PENDING, ReviewStatus.PENDING]

    ok, message = controller.approve("k1")

    assert ok
    assert kyc_routes.calls[-1]["method"] == "PUT"
    assert kyc_routes.calls[-1]["path"] == "/kyc/k1/approve"
    assert controller.find("k1").status == ReviewStatus.APPROVED
    assert controller.find("k2").status == ReviewStatus.PENDING
    assert "Asha" in controller.toast
    # refresh has been scheduled but has not hit the API yet
    assert len(deferred.pending) == 1
    assert kyc_routes.paths("GET").count("/kyc") == 1

    controller.settle()
    assert kyc_routes.paths("GET").count("/kyc") == 2
    assert [k.id for k in controller.items] == ["k2"]
    assert controller.stats == {"pending": 1}


def test_blank_reject_reason_never_calls_the_api(client, kyc_routes):
    controller = KYCController(client).load()
    calls_before = len(kyc_routes.calls)

    for reason in ("   ", None, 123, ["x"]):
        assert controller.reject("k1", reason) == (False, "Please provide a rejection reason")
    assert len(kyc_routes.calls) == calls_before


def test_reject_records_reason(client, kyc_routes, deferred):
    kyc_routes.routes[("PUT", "/kyc/k2/reject")] = {"success": True}
    controller = KYCController(client, background=deferred).load()

    ok, message = controller.reject("k2", " blurry photo ")

    assert ok
    assert kyc_routes.calls[-1]["json"] == {"reason": "blurry photo"}
    assert controller.find("k2").status == ReviewStatus.REJECTED
    assert controller.find("k2").rejection_reason == "blurry photo"
    assert message == "KYC for Bilal has been rejected."


def test_decided_records_are_refused_locally(client, http):
    http.routes[("GET", "/kyc")] = {"success": True, "kycRequests": [_kyc("k1", "Asha", "approved")]}
    controller = KYCController(client, status="approved").load()
    ok, message = controller.approve("k1")
    assert not ok
    assert message == "KYC is already approved"
    assert http.paths("PUT") == []


def test_failed_approve_keeps_record_pending(client, kyc_routes, deferred):
    kyc_routes.routes[("PUT", "/kyc/k1/approve")] = ({"success": False, "message": "Token expired"}, 401)
    controller = KYCController(client, background=deferred).load()

    ok, message = controller.approve("k1")

    assert not ok
    assert message == "Failed to approve kyc: Token expired"
    assert controller.find("k1").status == ReviewStatus.PENDING
    assert controller.unauthorized
    assert deferred.pending == []


def test_status_tab_and_client_side_search(client, kyc_routes):
    controller = KYCController(client, status="pending")
    controller.set_filter("status", "all")
    list_call = next(c for c in kyc_routes.calls if c["path"] == "/kyc")
    assert "status" not in list_call["params"]
    assert controller.page == 1

    controller.set_search("bil")
    assert [k.id for k in controller.visible_items()] == ["k2"]


def test_to_dict_carries_summary(client, kyc_routes):
    state = KYCController(client).load().to_dict()
    assert state["summary"] == "Showing 1 to 2 of 2"
    assert state["items"][0]["status"] == "pending"


# ==================== STALE RESPONSES ====================

class _Row:
    def __init__(self, row_id):
        self.id = row_id


class _RacingController(ListController):
    """The first list fetch resolves only after a newer load has started."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.list_calls = 0

    def fetch_list(self):
        self.list_calls += 1
        if self.list_calls == 1:
            self._next_generation()
            return [_Row("stale")], Pagination(total=1)
        return [_Row("fresh")], Pagination(total=1)


def test_superseded_response_is_discarded():
    controller = _RacingController(client=None)
    controller.load()
    assert controller.items == []

    controller.load()
    assert [row.id for row in controller.items] == ["fresh"]
    assert controller.loading is False


# ==================== DEBOUNCER ====================

def test_debouncer_fires_once_with_latest_args():
    fired = []
    done = threading.Event()

    def callback(value):
        fired.append(value)
        done.set()

    debouncer = Debouncer(0.05, callback)
    for value in ("a", "ab", "abc"):
        debouncer.trigger(value)

    assert done.wait(2)
    assert fired == ["abc"]
    assert not debouncer.pending


def test_debouncer_flush_and_cancel():
    fired = []
    debouncer = Debouncer(60, fired.append)
    debouncer.trigger("x")
    assert debouncer.pending
    debouncer.flush()
    assert fired == ["x"]

    debouncer.trigger("y")
    debouncer.cancel()
    debouncer.flush()
    assert fired == ["x"]


# ==================== USERS ====================

@pytest.fixture
def user_routes(http):
    http.routes.update({
        ("GET", "/users"): {"success": True, "users": [
            {"_id": "u1", "name": "Asha", "email": "asha@x.io", "coinBalance": 100,
             "referralStats": {"activeCount": 2},
             "ownershipProgress": {"daysActive": 30, "miningSessions": 20, "kycInvited": False}},
        ], "pagination": {"current": 1, "pages": 1, "total": 1}},
        ("GET", "/users/stats"): {"success": True, "stats": {"total": 1}},
        ("GET", "/mining/settings"): {"success": True, "settings": {"baseRate": 0.5}},
    })
    return http


def test_user_rows_carry_ownership_and_speed(client, user_routes):
    row = UsersController(client).load().to_dict()["items"][0]
    assert row["ownership"] == 67
    assert row["base_level"] == 0.5
    assert row["referral_level"] == 0.2
    assert row["boost_level"] == 0


def test_user_search_goes_to_the_api(client, user_routes):
    controller = UsersController(client)
    controller.search = "asha"
    controller.load()
    list_call = next(c for c in user_routes.calls if c["path"] == "/users")
    assert list_call["params"]["search"] == "asha"


@pytest.mark.parametrize("amount,reason,expected", [
    (0, "bonus", "Please enter a valid amount"),
    (-5, "bonus", "Please enter a valid amount"),
    ("abc", "bonus", "Please enter a valid amount"),
    (10, "  ", "Please provide a reason"),
])
def test_coin_change_validation_happens_before_any_request(client, user_routes, amount, reason, expected):
    controller = UsersController(client).load()
    calls = len(user_routes.calls)
    assert controller.change_coins("u1", amount, "add", reason) == (False, expected)
    assert len(user_routes.calls) == calls


def test_coin_add_patches_balance(client, user_routes, deferred):
    user_routes.routes[("POST", "/users/u1/add-coins")] = {"success": True}
    controller = UsersController(client, background=deferred).load()

    ok, message = controller.change_coins("u1", "25", "add", "goodwill")

    assert ok
    assert controller.find("u1").coin_balance == 125
    assert message == "25 coins added to Asha"


def test_coin_deduct_cannot_overdraw(client, user_routes):
    controller = UsersController(client).load()
    ok, message = controller.change_coins("u1", 500, "deduct", "fraud")
    assert not ok
    assert user_routes.paths("POST") == []


def test_suspend_requires_reason_and_patches_status(client, user_routes, deferred):
    controller = UsersController(client, background=deferred).load()
    assert controller.suspend("u1", "") == (False, "Please provide a reason for suspension")

    ok, _ = controller.suspend("u1", "spam")
    assert ok
    assert controller.find("u1").status == UserStatus.SUSPENDED
    assert user_routes.calls[-1]["path"] == "/users/u1/suspend"


def test_delete_removes_user_locally(client, user_routes, deferred):
    controller = UsersController(client, background=deferred).load()
    ok, _ = controller.delete("u1")
    assert ok
    assert controller.items == []


def test_create_user_validates_email(client, user_routes):
    controller = UsersController(client)
    assert controller.create({"name": "X", "email": "nope"}) == (False, "Please enter a valid email address")


# ==================== PAYMENTS ====================

def test_payment_approve_message_names_user_and_utr(client, http, deferred):
    http.routes[("GET", "/payments")] = {"success": True, "payments": [
        {"_id": "p1", "utr": "UTR123", "amount": 150000, "status": "pending", "user": {"name": "Asha"}},
    ]}
    controller = PaymentsController(client, background=deferred).load()
    ok, message = controller.approve("p1")
    assert ok
    assert message == "Payment from Asha (₹1.50L, UTR UTR123) approved!"


def test_payment_settings_reject_empty_upi(client, http):
    controller = PaymentsController(client)
    assert controller.update_settings({"paymentUpiId": " "}) == (False, "UPI ID cannot be empty")
    assert http.calls == []


def test_qr_upload_updates_settings(client, http):
    http.routes[("POST", "/payments/upload-qr")] = {"success": True, "qrCodeUrl": "https://cdn/qr.png"}
    controller = PaymentsController(client)
    ok, _ = controller.upload_qr("qr.png", b"png")
    assert ok
    assert controller.payment_settings["paymentUpiQrCode"] == "https://cdn/qr.png"


# ==================== MINING ====================

def test_mining_cancel_sets_cancelled(client, http, deferred):
    http.routes[("GET", "/mining/sessions")] = {"success": True, "sessions": [
        {"_id": "s1", "status": "active", "startTime": "2024-05-01T00:00:00Z"},
    ]}
    controller = MiningController(client, background=deferred).load()
    ok, _ = controller.cancel("s1", "")
    assert ok
    assert http.calls[-1]["json"] == {"reason": "Cancelled by admin"}
    assert controller.find("s1").status == MiningStatus.CANCELLED
    assert controller.cancel("s1") == (False, "Mining session is already cancelled")
    assert controller.cancel("s9", 123) == (False, "Cancellation reason must be text")


def test_active_session_rows_include_progress(client, http):
    http.routes[("GET", "/mining/sessions")] = {"success": True, "sessions": [
        {"_id": "s1", "status": "active", "startTime": "2024-05-01T00:00:00Z"},
        {"_id": "s2", "status": "completed", "startTime": "2024-04-01T00:00:00Z"},
    ]}
    http.routes[("GET", "/mining/settings")] = {"success": True, "settings": {"cycleDuration": 24}}
    controller = MiningController(client).load()
    controller.now = datetime(2024, 5, 1, 6, 0, tzinfo=timezone.utc)
    rows = controller.to_dict()["items"]
    assert rows[0]["progress"] == 25
    assert rows[0]["remaining"] == "18:00:00"
    assert "progress" not in rows[1]


def test_mining_settings_validation(client, http):
    controller = MiningController(client)
    assert controller.update_settings({"baseRate": 0}) == (False, "Base rate must be greater than 0")
    ok, _ = controller.update_settings({"baseRate": 0.3, "unknown": 1})
    assert ok
    assert http.calls[-1]["json"] == {"baseRate": 0.3}
    assert controller.settings["baseRate"] == 0.3


# ==================== REFERRALS ====================

def test_referral_leaderboard_from_loaded_edges(client, http):
    http.routes[("GET", "/referrals")] = {"success": True, "referrals": [
        {"_id": "r1", "type": "direct", "coinsEarned": 5, "referrer": {"_id": "a", "name": "Asha"}, "referred": {"_id": "x"}},
        {"_id": "r2", "type": "indirect", "coinsEarned": 2, "referrer": {"_id": "a", "name": "Asha"}, "referred": {"_id": "y"}},
        {"_id": "r3", "type": "direct", "coinsEarned": 1, "referrer": {"_id": "b", "name": "Bilal"}, "referred": {"_id": "z"}},
    ]}
    controller = ReferralsController(client).load()
    board = controller.to_dict()["leaderboard"]
    assert [row["referrer"]["name"] for row in board] == ["Asha", "Bilal"]
    assert board[0]["direct_referrals"] == 1 and board[0]["indirect_referrals"] == 1
    assert board[0]["coins_earned"] == 7

    controller.set_search("bil")
    assert [s.referrer.name for s in controller.leaderboard()] == ["Bilal"]


# ==================== COINS ====================

def test_coin_adjust_and_packages(client, http, deferred):
    controller = CoinManagementController(client, background=deferred)
    assert controller.adjust("u1", 10, "steal", "x") == (False, "Action must be 'add' or 'deduct'")
    assert controller.create_package({"name": "", "coins": 10}) == (False, "Package name is required")

    http.routes[("POST", "/coins/packages")] = {"success": True, "package": {"_id": "pk1", "name": "Gold", "coins": 100}}
    ok, _ = controller.create_package({"name": "Gold", "coins": 100, "price": 99})
    assert ok
    assert controller.packages[0]["_id"] == "pk1"

    ok, _ = controller.delete_package("pk1")
    assert ok
    assert controller.packages == []


# ==================== NOTIFICATIONS ====================

def test_notification_send_and_delete(client, http, deferred):
    http.routes[("GET", "/notifications")] = {"success": True, "notifications": [{"_id": "n1", "title": "Hi", "message": "x"}]}
    controller = NotificationsController(client, background=deferred).load()

    assert controller.send({"title": "", "message": "x"}) == (False, "Title and message are required")
    assert controller.send_bulk({"title": "T", "message": "M", "userIds": []}) == (False, "Please select at least one user")

    ok, _ = controller.delete("n1")
    assert ok
    assert controller.items == []


# ==================== BANNERS ====================

@pytest.fixture
def banner_routes(http):
    http.routes[("GET", "/banners")] = {"success": True, "banners": [
        {"_id": "b1", "order": 1, "status": "active"},
        {"_id": "b2", "order": 2, "status": "active"},
        {"_id": "b3", "order": 3, "status": "inactive"},
    ]}
    return http


def test_banner_active_cap(client, banner_routes, deferred):
    controller = BannersController(client, max_active=2, background=deferred).load()

    ok, message = controller.activate("b3")
    assert not ok
    assert message == "Only 2 banners can be active at a time"

    image = {"image": ("b.png", b"png", "image/png")}
    assert not controller.create({"title": "New"}, image)[0]
    assert banner_routes.paths("PUT") == [] and banner_routes.paths("POST") == []

    ok, _ = controller.deactivate("b1")
    assert ok
    assert controller.find("b1").status == BannerStatus.INACTIVE
    assert controller.active_count() == 1


def test_banner_create_needs_image(client, banner_routes):
    controller = BannersController(client).load()
    assert controller.create({"title": "New", "status": "inactive"}) == (False, "Please select a banner image")


# ==================== PROMO CODES ====================

def test_generated_codes_are_eight_upper_alphanumerics():
    code = generate_code()
    assert len(code) == 8
    assert all(ch in CODE_ALPHABET for ch in code)


def test_promo_search_is_sent_to_the_api(client, http):
    controller = PromoCodesController(client)
    controller.search = " welcome "
    controller.load()
    list_call = next(c for c in http.calls if c["path"] == "/settings/promo-codes")
    assert list_call["params"]["search"] == "welcome"


def test_search_gate_lets_only_the_last_search_through():
    gate = SearchGate()
    results = {}

    def search(name):
        results[name] = gate.wait("a1", 0.3)

    first = threading.Thread(target=search, args=("wel",))
    first.start()
    # the first search is queued before the second replaces it
    while not gate._debouncers.get("a1") or not gate._debouncers["a1"].pending:
        pass
    search("welcome")
    first.join(2)

    assert results == {"wel": False, "welcome": True}


def test_search_gate_keeps_operators_apart():
    gate = SearchGate()
    assert gate.wait("a1", 0)
    assert gate.wait("a2", 0)


def test_promo_create_uppercases_code(client, http, deferred):
    controller = PromoCodesController(client, background=deferred)
    assert controller.create({"code": "abc"}) == (False, "Code and value are required")

    ok, message = controller.create({"code": "welcome10", "value": "50", "maxUses": "", "type": "coins"})
    assert ok
    payload = http.calls[-1]["json"]
    assert payload["code"] == "WELCOME10"
    assert payload["value"] == 50.0
    assert payload["maxUses"] is None
    assert message == "Promo code WELCOME10 created successfully!"


def test_promo_toggle_flips_active(client, http, deferred):
    http.routes[("GET", "/settings/promo-codes")] = {"success": True, "promoCodes": [{"_id": "p1", "code": "A1", "isActive": True}]}
    controller = PromoCodesController(client, background=deferred).load()
    ok, message = controller.toggle("p1")
    assert ok
    assert not controller.find("p1").is_active
    assert message == "Promo code A1 deactivated"


# ==================== SETTINGS ====================

def test_settings_checkin_needs_seven_slots(client, http):
    controller = SettingsController(client)
    ok, message = controller.update({"dailyCheckinBonuses": [1, 2, 3]})
    assert not ok
    assert message == "Daily check-in needs exactly 7 rewards"
    assert http.calls == []

    ok, _ = controller.update({"dailyCheckinBonuses": [1, 2, 3, 4, 5, 6, 7], "appName": "Miner"})
    assert ok
    assert controller.settings.get("appName") == "Miner"


def test_social_links_must_be_urls(client, http):
    controller = SettingsController(client)
    assert not controller.update_social_links({"twitter": "twitter.com/x"})[0]
    ok, _ = controller.update_social_links({"twitter": "https://x.com/miner", "myspace": "https://m"})
    assert ok
    assert http.calls[-1]["json"] == {"socialLinks": {"twitter": "https://x.com/miner"}}


# ==================== DASHBOARD ====================

def test_dashboard_cards_and_badges(client, http):
    http.routes[("GET", "/dashboard/stats")] = {"success": True, "stats": {
        "users": {"total": 1500, "new": 20},
        "kyc": {"pending": 12},
        "mining": {"activeSessions": 300, "totalSessions": 2500000},
        "transactions": {"totalRevenue": 150000},
    }}
    controller = DashboardController(client, period="month").load()
    assert http.calls[0]["params"] == {"period": "month"} or http.calls[1]["params"] == {"period": "month"}

    cards = {card["title"]: card for card in controller.cards()}
    assert cards["Total Users"]["value"] == "1.5K"
    assert cards["Revenue"]["value"] == "₹1.50L"
    assert controller.badges()["kyc"] == 12

    nav = controller.to_dict()["navigation"]
    kyc_item = next(i for s in nav for i in s["items"] if i["name"] == "KYC Requests")
    assert kyc_item["badge"] == 12


def test_dashboard_rejects_unknown_period(client):
    with pytest.raises(ValidationError):
        DashboardController(client, period="decade")
