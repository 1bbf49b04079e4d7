# ===========================================================
# Typed projections of the records the admin API returns.
# Nothing here is persisted; records live for one view.
# ===========================================================
import enum
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask_login import UserMixin


class UserStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"
    DELETED = "deleted"


class KycStatus(enum.Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewStatus(enum.Enum):
    """Shared by KYC requests and payment proofs."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MiningStatus(enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class ReferralType(enum.Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"


class PromoRewardType(enum.Enum):
    COINS = "coins"
    BOOST = "boost"
    DISCOUNT_PERCENT = "discount_percent"
    DISCOUNT_FIXED = "discount_fixed"


class PromoAudience(enum.Enum):
    ALL = "all"
    NEW_USERS = "new_users"
    REFERRAL_USERS = "referral_users"
    KYC_VERIFIED = "kyc_verified"
    SPECIFIC = "specific"
    PREMIUM = "premium"


class BannerStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def coerce_enum(enum_cls, value, default):
    """Map a raw string onto ``enum_cls``; unknown values fall back to ``default``."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        return default


def _serialize(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


class RecordMixin:
    """to_dict() for every record, dropping the raw payload."""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("raw", None)
        return {k: _serialize(v) for k, v in data.items()}


# ===========================================================
# SESSION / ADMIN
# ===========================================================
class AdminUser(UserMixin):
    """The console operator, as returned by ``/auth/login`` and ``/auth/me``."""

    def __init__(self, id, email, name=None, role="admin"):
        self.id = str(id)
        self.email = email
        self.name = name or email
        self.role = role

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AdminUser":
        return cls(
            id=payload.get("_id") or payload.get("id"),
            email=payload.get("email"),
            name=payload.get("name"),
            role=payload.get("role", "admin"),
        )

    def to_dict(self):
        return {"id": self.id, "email": self.email, "name": self.name, "role": self.role}


# ===========================================================
# ENTITIES
# ===========================================================
@dataclass
class UserRef(RecordMixin):
    id: Optional[str] = None
    name: str = ""
    email: str = ""
    phone: str = ""


@dataclass
class Pagination(RecordMixin):
    current: int = 1
    pages: int = 1
    total: int = 0
    limit: Optional[int] = None


@dataclass
class MiningStats(RecordMixin):
    total_mined: float = 0
    streak: int = 0
    level: int = 1


@dataclass
class ReferralStats(RecordMixin):
    total_count: int = 0
    active_count: int = 0
    total_earned: float = 0


@dataclass
class OwnershipProgress(RecordMixin):
    days_active: int = 0
    mining_sessions: int = 0
    kyc_invited: bool = False


@dataclass
class User(RecordMixin):
    id: Optional[str]
    name: str = ""
    email: str = ""
    phone: str = ""
    status: UserStatus = UserStatus.ACTIVE
    kyc_status: KycStatus = KycStatus.NONE
    coin_balance: float = 0
    referral_code: str = ""
    mining_stats: MiningStats = field(default_factory=MiningStats)
    referral_stats: ReferralStats = field(default_factory=ReferralStats)
    ownership_progress: OwnershipProgress = field(default_factory=OwnershipProgress)
    created_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class MiningSession(RecordMixin):
    id: Optional[str]
    user: UserRef = field(default_factory=UserRef)
    start_time: Optional[datetime] = None
    status: MiningStatus = MiningStatus.ACTIVE
    earned_coins: float = 0
    rate: float = 0
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class KYCRequest(RecordMixin):
    id: Optional[str]
    user: UserRef = field(default_factory=UserRef)
    status: ReviewStatus = ReviewStatus.PENDING
    document_type: str = ""
    document_number: str = ""
    front_image: Optional[str] = None
    back_image: Optional[str] = None
    selfie: Optional[str] = None
    rejection_reason: Optional[str] = None
    submitted_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class PaymentProof(RecordMixin):
    id: Optional[str]
    user: UserRef = field(default_factory=UserRef)
    utr: str = ""
    amount: float = 0
    upi_id: str = ""
    status: ReviewStatus = ReviewStatus.PENDING
    screenshot: Optional[str] = None
    coins_to_credit: float = 0
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Transaction(RecordMixin):
    id: Optional[str]
    user: UserRef = field(default_factory=UserRef)
    type: str = ""
    amount: float = 0
    reason: str = ""
    admin: Optional[str] = None
    created_at: Optional[datetime] = None
    is_add: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class ReferralEdge(RecordMixin):
    id: Optional[str]
    referrer: UserRef = field(default_factory=UserRef)
    referred: UserRef = field(default_factory=UserRef)
    type: ReferralType = ReferralType.DIRECT
    coins_earned: float = 0
    created_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class PromoCode(RecordMixin):
    id: Optional[str]
    code: str = ""
    description: str = ""
    type: PromoRewardType = PromoRewardType.COINS
    value: float = 0
    max_uses: Optional[int] = None
    uses_per_user: int = 1
    used_count: int = 0
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True
    target_audience: PromoAudience = PromoAudience.ALL
    is_expired: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Notification(RecordMixin):
    id: Optional[str]
    title: str = ""
    message: str = ""
    type: str = "info"
    target: str = "all"
    is_read: bool = False
    created_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Banner(RecordMixin):
    id: Optional[str]
    title: str = ""
    description: str = ""
    image: Optional[str] = None
    link: Optional[str] = None
    status: BannerStatus = BannerStatus.ACTIVE
    order: int = 0
    views: int = 0
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class SettingsBundle(RecordMixin):
    values: Dict[str, Any] = field(default_factory=dict)

    def get(self, key, default=None):
        return self.values.get(key, default)


@dataclass
class ReferrerSummary(RecordMixin):
    """One leaderboard row built by folding a referrer's edges."""
    referrer: UserRef
    total_referrals: int = 0
    direct_referrals: int = 0
    indirect_referrals: int = 0
    coins_earned: float = 0
    referred: List[UserRef] = field(default_factory=list)
