# ===========================================================
# Console chrome: sidebar navigation and stat card view models.
# ===========================================================
from typing import Any, Dict, List, Optional

ICON_COLORS = ("orange", "green", "blue", "red", "purple")

NAV_SECTIONS = [
    {"title": "Main", "items": [
        {"name": "Dashboard", "path": "/admin/dashboard"},
        {"name": "Users", "path": "/admin/users"},
        {"name": "Referrals", "path": "/admin/referrals"},
    ]},
    {"title": "Mining", "items": [
        {"name": "Mining Status", "path": "/admin/mining"},
        {"name": "Coin Management", "path": "/admin/coins"},
    ]},
    {"title": "Verification", "items": [
        {"name": "KYC Requests", "path": "/admin/kyc", "badge_key": "kyc"},
        {"name": "Payments/UTR", "path": "/admin/payments", "badge_key": "payments"},
    ]},
    {"title": "Content", "items": [
        {"name": "Notifications", "path": "/admin/notifications"},
        {"name": "Home Banners", "path": "/admin/banners"},
        {"name": "Promo Codes", "path": "/admin/promo-codes"},
        {"name": "Social Links", "path": "/admin/settings/social"},
    ]},
    {"title": "System", "items": [
        {"name": "Settings", "path": "/admin/settings"},
    ]},
]


def navigation(badges: Optional[Dict[str, int]] = None, active_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """Sidebar sections; an item shows a badge only when its pending count is above zero."""
    badges = badges or {}
    sections = []
    for section in NAV_SECTIONS:
        items = []
        for entry in section["items"]:
            item = {"name": entry["name"], "path": entry["path"], "active": entry["path"] == active_path}
            count = badges.get(entry.get("badge_key"), 0) or 0
            if count > 0:
                item["badge"] = count
            items.append(item)
        sections.append({"title": section["title"], "items": items})
    return sections


def stat_card(title, value, change=None, change_type="positive", icon_color="blue") -> Dict[str, Any]:
    if change_type not in ("positive", "negative"):
        raise ValueError(f"change_type must be 'positive' or 'negative', got {change_type!r}")
    if icon_color not in ICON_COLORS:
        icon_color = "blue"
    card = {"title": title, "value": value, "icon_color": icon_color}
    if change:
        card["change"] = change
        card["change_type"] = change_type
    return card
