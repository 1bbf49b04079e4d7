# admin_api/session.py
from typing import Any, Dict, Optional


class AdminSession:
    """
    Holds the bearer token for one console operator.
    The client reads the token from here on every request, so logging out
    (or swapping sessions) takes effect without rebuilding the client.
    """

    def __init__(self, token: Optional[str] = None, admin: Optional[Dict[str, Any]] = None):
        self.token = token
        self.admin = admin

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def login(self, token: str, admin: Optional[Dict[str, Any]] = None):
        self.token = token
        self.admin = admin

    def clear(self):
        self.token = None
        self.admin = None

    @classmethod
    def from_mapping(cls, store) -> "AdminSession":
        """Build from a dict-like store (e.g. the Flask session)."""
        return cls(token=store.get("admin_token"), admin=store.get("admin_user"))

    def save_to(self, store):
        if self.token:
            store["admin_token"] = self.token
            store["admin_user"] = self.admin
        else:
            store.pop("admin_token", None)
            store.pop("admin_user", None)
