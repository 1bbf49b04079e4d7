# admin_api/normalizers.py
"""
One normalizer per entity. Each takes the decoded response body and returns
typed records from ``models``.

The admin API has shifted shape over time: payloads sometimes sit at the top
level (``body["users"]``) and sometimes under ``data`` (``body["data"]["users"]``
or ``body["data"]`` itself being the list). All of that fallback logic lives
here so controllers never have to look in two places.
"""
from typing import Any, Dict, List, Optional, Tuple

from metrics.config import MetricsConfigHelper
from metrics.status import is_credit, is_expired
from models import (
    Banner, BannerStatus, KYCRequest, KycStatus, MiningSession, MiningStats, MiningStatus,
    Notification, OwnershipProgress, Pagination, PaymentProof, PromoAudience, PromoCode,
    PromoRewardType, ReferralEdge, ReferralStats, ReferralType, ReviewStatus, SettingsBundle,
    Transaction, User, UserRef, UserStatus, coerce_enum,
)
from utils import parse_datetime


def pick(body: Dict[str, Any], *keys, default=None):
    """Return the first payload found under ``keys``, top level first, then under ``data``."""
    if not isinstance(body, dict):
        return default
    nested = body.get("data")
    for key in keys:
        if body.get(key) is not None:
            return body[key]
        if isinstance(nested, dict) and nested.get(key) is not None:
            return nested[key]
    if isinstance(nested, list):
        return nested
    return default


def _first(record: Dict[str, Any], *keys, default=None):
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


def _record_id(record: Dict[str, Any]) -> Optional[str]:
    value = _first(record, "_id", "id")
    return str(value) if value is not None else None


def _number(value, default=0):
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _int(value, default=0):
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def normalize_user_ref(value) -> UserRef:
    """Populated refs arrive as dicts, unpopulated ones as bare ids."""
    if isinstance(value, dict):
        return UserRef(
            id=_record_id(value),
            name=value.get("name") or value.get("fullName") or "",
            email=value.get("email") or "",
            phone=value.get("phone") or "",
        )
    if value is None:
        return UserRef()
    return UserRef(id=str(value))


def normalize_pagination(body: Dict[str, Any]) -> Pagination:
    raw = pick(body, "pagination") or {}
    if not isinstance(raw, dict):
        raw = {}
    return Pagination(
        current=_int(_first(raw, "current", "currentPage", "page"), 1),
        pages=_int(_first(raw, "pages", "totalPages"), 1),
        total=_int(raw.get("total"), 0),
        limit=_int(raw.get("limit"), None) if raw.get("limit") is not None else None,
    )


def _list(body, *keys) -> List[Dict[str, Any]]:
    items = pick(body, *keys, default=[])
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []


def normalize_stats(body: Dict[str, Any]) -> Dict[str, Any]:
    stats = pick(body, "stats")
    return stats if isinstance(stats, dict) else {}


# ==================== USERS ====================

def normalize_user(record: Dict[str, Any]) -> User:
    mining = record.get("miningStats") or {}
    referral = record.get("referralStats") or {}
    ownership = record.get("ownershipProgress") or {}
    return User(
        id=_record_id(record),
        name=record.get("name") or "",
        email=record.get("email") or "",
        phone=record.get("phone") or "",
        status=coerce_enum(UserStatus, record.get("status"), UserStatus.ACTIVE),
        kyc_status=coerce_enum(KycStatus, record.get("kycStatus"), KycStatus.NONE),
        coin_balance=_number(record.get("coinBalance")),
        referral_code=record.get("referralCode") or "",
        mining_stats=MiningStats(
            total_mined=_number(mining.get("totalMined")),
            streak=_int(mining.get("streak")),
            level=_int(mining.get("level"), 1),
        ),
        referral_stats=ReferralStats(
            total_count=_int(referral.get("totalCount")),
            active_count=_int(referral.get("activeCount")),
            total_earned=_number(referral.get("totalEarned")),
        ),
        ownership_progress=OwnershipProgress(
            days_active=_number(ownership.get("daysActive")),
            mining_sessions=_number(ownership.get("miningSessions")),
            kyc_invited=bool(ownership.get("kycInvited")),
        ),
        created_at=parse_datetime(record.get("createdAt")),
        raw=record,
    )


def normalize_users(body) -> Tuple[List[User], Pagination]:
    return [normalize_user(r) for r in _list(body, "users")], normalize_pagination(body)


def normalize_single_user(body) -> Optional[User]:
    record = pick(body, "user")
    return normalize_user(record) if isinstance(record, dict) else None


# ==================== KYC ====================

def normalize_kyc(record: Dict[str, Any]) -> KYCRequest:
    document = record.get("document") or {}
    if not isinstance(document, dict):
        document = {}
    user = normalize_user_ref(record.get("user"))
    personal = record.get("personalInfo") or {}
    if not user.name and personal.get("fullName"):
        user.name = personal["fullName"]
    return KYCRequest(
        id=_record_id(record),
        user=user,
        status=coerce_enum(ReviewStatus, record.get("status"), ReviewStatus.PENDING),
        document_type=_first(record, "documentType", default=document.get("type") or ""),
        document_number=_first(record, "documentNumber", default=document.get("number") or ""),
        front_image=_first(record, "frontImage", default=document.get("frontImage")),
        back_image=_first(record, "backImage", default=document.get("backImage")),
        selfie=record.get("selfie"),
        rejection_reason=record.get("rejectionReason"),
        submitted_at=parse_datetime(_first(record, "submittedAt", "createdAt")),
        raw=record,
    )


def normalize_kyc_list(body) -> Tuple[List[KYCRequest], Pagination]:
    return [normalize_kyc(r) for r in _list(body, "kycRequests", "kycs", "kyc")], normalize_pagination(body)


# ==================== PAYMENTS ====================

def normalize_payment(record: Dict[str, Any]) -> PaymentProof:
    return PaymentProof(
        id=_record_id(record),
        user=normalize_user_ref(record.get("user")),
        utr=record.get("utr") or "",
        amount=_number(record.get("amount")),
        upi_id=record.get("upiId") or "",
        status=coerce_enum(ReviewStatus, record.get("status"), ReviewStatus.PENDING),
        screenshot=record.get("screenshot"),
        coins_to_credit=_number(record.get("coinsToCredit")),
        rejection_reason=record.get("rejectionReason"),
        created_at=parse_datetime(record.get("createdAt")),
        raw=record,
    )


def normalize_payments(body) -> Tuple[List[PaymentProof], Pagination]:
    items = _list(body, "payments", "paymentProofs")
    return [normalize_payment(r) for r in items], normalize_pagination(body)


# ==================== MINING ====================

def normalize_mining_session(record: Dict[str, Any]) -> MiningSession:
    return MiningSession(
        id=_record_id(record),
        user=normalize_user_ref(record.get("user")),
        start_time=parse_datetime(record.get("startTime")),
        status=coerce_enum(MiningStatus, record.get("status"), MiningStatus.ACTIVE),
        earned_coins=_number(_first(record, "earnedCoins", "coinsEarned")),
        rate=_number(_first(record, "rate", "totalRate", "baseRate")),
        raw=record,
    )


def normalize_mining_sessions(body) -> Tuple[List[MiningSession], Pagination]:
    return [normalize_mining_session(r) for r in _list(body, "sessions")], normalize_pagination(body)


def normalize_mining_settings(body) -> Dict[str, Any]:
    """Returns the settings dict with ``baseRate`` and ``cycleDuration`` always present."""
    settings = pick(body, "settings") or {}
    if not isinstance(settings, dict):
        settings = {}
    settings = dict(settings)
    settings["baseRate"] = _number(
        _first(settings, "baseRate", "miningRate", "baseMiningRate"),
        MetricsConfigHelper.DEFAULT_BASE_RATE,
    )
    settings["cycleDuration"] = _number(
        _first(settings, "cycleDuration", "miningCycleDuration"),
        MetricsConfigHelper.DEFAULT_CYCLE_HOURS,
    )
    return settings


# ==================== TRANSACTIONS ====================

def normalize_transaction(record: Dict[str, Any]) -> Transaction:
    tx_type = record.get("type") or ""
    amount = _number(record.get("amount"))
    admin = record.get("processedBy") or record.get("admin")
    if isinstance(admin, dict):
        admin = admin.get("name") or admin.get("email") or _record_id(admin)
    return Transaction(
        id=_record_id(record),
        user=normalize_user_ref(record.get("user")),
        type=tx_type,
        amount=amount,
        reason=_first(record, "reason", "description", default=""),
        admin=admin,
        created_at=parse_datetime(record.get("createdAt")),
        is_add=is_credit(tx_type, amount),
        raw=record,
    )


def normalize_transactions(body) -> Tuple[List[Transaction], Pagination]:
    return [normalize_transaction(r) for r in _list(body, "transactions")], normalize_pagination(body)


# ==================== REFERRALS ====================

def normalize_referral(record: Dict[str, Any]) -> ReferralEdge:
    return ReferralEdge(
        id=_record_id(record),
        referrer=normalize_user_ref(record.get("referrer")),
        referred=normalize_user_ref(record.get("referred")),
        type=coerce_enum(ReferralType, record.get("type"), ReferralType.DIRECT),
        coins_earned=_number(record.get("coinsEarned")),
        created_at=parse_datetime(_first(record, "joinedAt", "createdAt")),
        raw=record,
    )


def normalize_referrals(body) -> Tuple[List[ReferralEdge], Pagination]:
    return [normalize_referral(r) for r in _list(body, "referrals")], normalize_pagination(body)


# ==================== PROMO CODES ====================

def normalize_promo_code(record: Dict[str, Any], now=None) -> PromoCode:
    valid_until = parse_datetime(_first(record, "validUntil", "endDate"))
    if "isActive" in record:
        active = bool(record["isActive"])
    else:
        active = record.get("status", "active") == "active"
    return PromoCode(
        id=_record_id(record),
        code=(record.get("code") or "").upper(),
        description=record.get("description") or "",
        type=coerce_enum(PromoRewardType, _first(record, "type", "rewardType"), PromoRewardType.COINS),
        value=_number(_first(record, "value", "rewardValue")),
        max_uses=_int(record.get("maxUses"), None) if record.get("maxUses") is not None else None,
        uses_per_user=_int(_first(record, "usesPerUser", "maxUsesPerUser"), 1),
        used_count=_int(record.get("usedCount")),
        valid_from=parse_datetime(_first(record, "validFrom", "startDate")),
        valid_until=valid_until,
        is_active=active,
        target_audience=coerce_enum(PromoAudience, _first(record, "targetAudience", "targetUsers"),
                                    PromoAudience.ALL),
        is_expired=is_expired(valid_until, now),
        raw=record,
    )


def normalize_promo_codes(body, now=None) -> Tuple[List[PromoCode], Pagination]:
    items = _list(body, "promoCodes", "promos")
    return [normalize_promo_code(r, now) for r in items], normalize_pagination(body)


# ==================== NOTIFICATIONS ====================

def normalize_notification(record: Dict[str, Any]) -> Notification:
    target = _first(record, "target", "userId", "user", default="all")
    if isinstance(target, dict):
        target = _record_id(target) or "all"
    return Notification(
        id=_record_id(record),
        title=record.get("title") or "",
        message=record.get("message") or "",
        type=record.get("type") or "info",
        target=str(target),
        is_read=bool(_first(record, "isRead", "read", default=False)),
        created_at=parse_datetime(record.get("createdAt")),
        raw=record,
    )


def normalize_notifications(body) -> Tuple[List[Notification], Pagination]:
    return [normalize_notification(r) for r in _list(body, "notifications")], normalize_pagination(body)


# ==================== BANNERS ====================

def normalize_banner(record: Dict[str, Any]) -> Banner:
    if "isActive" in record and "status" not in record:
        status = BannerStatus.ACTIVE if record["isActive"] else BannerStatus.INACTIVE
    else:
        status = coerce_enum(BannerStatus, record.get("status"), BannerStatus.ACTIVE)
    return Banner(
        id=_record_id(record),
        title=record.get("title") or "",
        description=record.get("description") or "",
        image=record.get("image"),
        link=record.get("link"),
        status=status,
        order=_int(record.get("order")),
        views=_int(record.get("views")),
        raw=record,
    )


def normalize_banners(body) -> List[Banner]:
    banners = [normalize_banner(r) for r in _list(body, "banners")]
    return sorted(banners, key=lambda b: b.order)


# ==================== SETTINGS ====================

def normalize_settings(body) -> SettingsBundle:
    values = pick(body, "settings") or {}
    if not isinstance(values, dict):
        values = {}
    values = dict(values)
    slots = values.get("dailyCheckinBonuses")
    values["dailyCheckinBonuses"] = normalize_checkin_slots(slots)
    return SettingsBundle(values=values)


def normalize_checkin_slots(slots) -> List[float]:
    """Exactly seven daily check-in rewards; missing days take the backend default."""
    defaults = MetricsConfigHelper.DEFAULT_CHECKIN_BONUSES
    slots = list(slots) if isinstance(slots, (list, tuple)) else []
    result = []
    for day, default in enumerate(defaults):
        value = slots[day] if day < len(slots) else default
        result.append(_number(value, default))
    return result
