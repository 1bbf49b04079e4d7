# controllers/promo_codes.py
import secrets
import string
import threading

from admin_api.normalizers import normalize_promo_code, normalize_promo_codes, normalize_stats, pick
from controllers.base import Debouncer, ListController
from utils import is_blank, to_decimal

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


def generate_code(length=CODE_LENGTH):
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class PromoCodesController(ListController):
    """Promo codes. ``search`` is sent to the API rather than filtered locally."""

    entity_name = "promo code"
    search_fields = ("code", "description")

    def __init__(self, client, page_size=10, now=None, **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.now = now

    def fetch_list(self):
        return normalize_promo_codes(self.client.get_promo_codes(**self.query_params()), self.now)

    def fetch_stats(self):
        return normalize_stats(self.client.get_promo_code_stats())

    def query_params(self):
        params = super().query_params()
        if self.search.strip():
            params["search"] = self.search.strip()
        return params

    @staticmethod
    def build_payload(data):
        payload = dict(data or {})
        payload["code"] = (payload.get("code") or "").strip().upper()
        payload["value"] = float(to_decimal(payload.get("value")))
        max_uses = payload.get("maxUses")
        payload["maxUses"] = int(max_uses) if max_uses not in (None, "") else None
        min_purchase = payload.get("minPurchase")
        payload["minPurchase"] = float(to_decimal(min_purchase)) if min_purchase not in (None, "") else 0
        return payload

    def _validate(self, data):
        if is_blank((data or {}).get("code")) or is_blank((data or {}).get("value")):
            return "Code and value are required"
        if to_decimal(data.get("value")) <= 0:
            return "Value must be greater than 0"
        code = str(data["code"]).strip().upper()
        if any(ch not in CODE_ALPHABET for ch in code):
            return "Code may only contain letters and digits"
        return None

    def create(self, data):
        problem = self._validate(data)
        if problem:
            return self._fail(problem)
        payload = self.build_payload(data)

        def patch(response):
            record = pick(response, "promoCode", "promo")
            if isinstance(record, dict):
                self.items.insert(0, normalize_promo_code(record, self.now))

        return self._run_action(
            lambda: self.client.create_promo_code(payload),
            success_message=f"Promo code {payload['code']} created successfully!",
            failure_message="Failed to create promo code",
            patch=patch,
        )

    def update(self, promo_id, data):
        problem = self._validate(data)
        if problem:
            return self._fail(problem)
        payload = self.build_payload(data)
        return self._run_action(
            lambda: self.client.update_promo_code(promo_id, payload),
            success_message=f"Promo code {payload['code']} updated successfully!",
            failure_message="Failed to update promo code",
            patch=lambda _: self._patch_item(promo_id, code=payload["code"], value=payload["value"]),
        )

    def toggle(self, promo_id):
        promo = self.find(promo_id)
        if promo is None:
            return self._fail(f"Promo code {promo_id} is not loaded")
        active = not promo.is_active
        return self._run_action(
            lambda: self.client.toggle_promo_code_status(promo_id),
            success_message=f"Promo code {promo.code} {'activated' if active else 'deactivated'}",
            failure_message="Failed to update promo code status",
            patch=lambda _: self._patch_item(promo_id, is_active=active),
        )

    def delete(self, promo_id):
        return self._run_action(
            lambda: self.client.delete_promo_code(promo_id),
            success_message="Promo code deleted",
            failure_message="Failed to delete promo code",
            patch=lambda _: self._remove_item(promo_id),
        )


class _SearchTicket:
    def __init__(self):
        self.done = threading.Event()
        self.latest = False


class SearchGate:
    """
    Coalesces free-text searches per operator. Each search waits out the quiet
    period; only the last one typed within it goes on to query the API, the
    ones it replaced are released straight away as superseded.
    """

    def __init__(self):
        self._debouncers = {}
        self._lock = threading.Lock()

    @staticmethod
    def _release(ticket):
        ticket.latest = True
        ticket.done.set()

    @staticmethod
    def _drop(ticket):
        ticket.done.set()

    def _debouncer(self, key, delay):
        with self._lock:
            debouncer = self._debouncers.get(key)
            if debouncer is None:
                debouncer = Debouncer(delay, self._release, on_superseded=self._drop)
                self._debouncers[key] = debouncer
            debouncer.delay = delay
            return debouncer

    def wait(self, key, delay, timeout=None):
        """True when this search survived the quiet period and should run."""
        ticket = _SearchTicket()
        self._debouncer(key, delay).trigger(ticket)
        ticket.done.wait(timeout if timeout is not None else delay + 5)
        return ticket.latest
