from datetime import datetime, timezone

from admin_api.normalizers import (
    normalize_banners, normalize_checkin_slots, normalize_kyc_list, normalize_mining_settings,
    normalize_pagination, normalize_promo_codes, normalize_settings, normalize_transactions, normalize_users,
    pick,
)
from metrics.ownership import OwnershipHelper
from models import BannerStatus, KycStatus, PromoRewardType, ReviewStatus, UserStatus


def test_pick_prefers_top_level_then_data():
    assert pick({"users": [1]}, "users") == [1]
    assert pick({"data": {"users": [2]}}, "users") == [2]
    assert pick({"data": [3]}, "users") == [3]
    assert pick({"success": True}, "users", default=[]) == []


def test_users_from_either_shape():
    record = {
        "_id": "u1", "name": "Asha", "email": "asha@example.com", "status": "suspended",
        "kycStatus": "approved", "coinBalance": "12.5",
        "referralStats": {"activeCount": 2},
        "ownershipProgress": {"daysActive": 3, "miningSessions": 4, "kycInvited": True},
    }
    top, _ = normalize_users({"success": True, "users": [record]})
    nested, _ = normalize_users({"success": True, "data": {"users": [record]}})
    for users in (top, nested):
        user = users[0]
        assert user.id == "u1"
        assert user.status == UserStatus.SUSPENDED
        assert user.kyc_status == KycStatus.APPROVED
        assert user.coin_balance == 12.5
        assert user.referral_stats.active_count == 2
        assert user.ownership_progress.kyc_invited is True


def test_fractional_ownership_counts_are_kept():
    record = {"_id": "u1", "ownershipProgress": {"daysActive": 14.5, "miningSessions": "9.5"}}
    users, _ = normalize_users({"success": True, "users": [record]})
    progress = users[0].ownership_progress
    assert progress.days_active == 14.5
    assert progress.mining_sessions == 9.5
    # (48.33 + 47.5 + 0) / 3 rounds to 32; truncating to 14 and 9 would give 31
    assert OwnershipHelper.for_user(users[0]) == 32


def test_pagination_aliases():
    pagination = normalize_pagination({"data": {"pagination": {"currentPage": 3, "totalPages": 7, "total": 65}}})
    assert (pagination.current, pagination.pages, pagination.total) == (3, 7, 65)


def test_kyc_reads_nested_document_and_personal_info():
    body = {"kycs": [{
        "_id": "k1", "status": "pending", "user": "u9",
        "personalInfo": {"fullName": "Ravi Kumar"},
        "document": {"type": "aadhaar", "number": "1234"},
    }]}
    items, _ = normalize_kyc_list(body)
    kyc = items[0]
    assert kyc.user.id == "u9"
    assert kyc.user.name == "Ravi Kumar"
    assert kyc.document_type == "aadhaar"
    assert kyc.status == ReviewStatus.PENDING


def test_mining_settings_always_has_rate_and_cycle():
    assert normalize_mining_settings({"success": True}) == {"baseRate": 0.25, "cycleDuration": 24.0}
    settings = normalize_mining_settings({"settings": {"miningRate": "0.5", "miningCycleDuration": 12}})
    assert settings["baseRate"] == 0.5
    assert settings["cycleDuration"] == 12


def test_transactions_flag_additions():
    items, _ = normalize_transactions({"transactions": [
        {"_id": "t1", "type": "credit", "amount": -1},
        {"_id": "t2", "type": "bonus", "amount": 5},
        {"_id": "t3", "type": "withdrawal", "amount": -5, "processedBy": {"name": "Ops"}},
    ]})
    assert [t.is_add for t in items] == [True, True, False]
    assert items[2].admin == "Ops"


def test_promo_codes_uppercase_and_expiry():
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    items, _ = normalize_promo_codes({"promoCodes": [
        {"_id": "p1", "code": "welcome10", "rewardType": "boost", "rewardValue": 10,
         "endDate": "2024-04-01T00:00:00Z", "status": "inactive"},
        {"_id": "p2", "code": "FOREVER", "value": 5},
    ]}, now=now)
    assert items[0].code == "WELCOME10"
    assert items[0].type == PromoRewardType.BOOST
    assert items[0].is_expired and not items[0].is_active
    assert not items[1].is_expired and items[1].is_active


def test_banners_sorted_by_order_with_is_active_fallback():
    banners = normalize_banners({"banners": [
        {"_id": "b2", "order": 2, "isActive": False},
        {"_id": "b1", "order": 1, "status": "active"},
    ]})
    assert [b.id for b in banners] == ["b1", "b2"]
    assert banners[1].status == BannerStatus.INACTIVE


def test_checkin_slots_are_exactly_seven():
    assert normalize_checkin_slots([1, 2]) == [1, 2, 15, 20, 30, 40, 50]
    assert len(normalize_checkin_slots(list(range(10)))) == 7
    assert normalize_settings({"settings": {"appName": "X"}}).get("dailyCheckinBonuses") == [5, 10, 15, 20, 30, 40, 50]
