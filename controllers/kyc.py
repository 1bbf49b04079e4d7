# controllers/kyc.py
from admin_api.normalizers import normalize_kyc, normalize_kyc_list, normalize_stats, pick
from controllers.base import ReviewController


class KYCController(ReviewController):
    """KYC review queue: tabs by status, approve, reject with a reason."""

    entity_name = "KYC"
    review_label = "KYC"
    search_fields = ("user.name", "user.email", "document_number")

    def __init__(self, client, page_size=10, status="pending", **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.filters["status"] = status
        self.document_filter = ""

    def fetch_list(self):
        return normalize_kyc_list(self.client.get_kyc_list(**self.query_params()))

    def fetch_stats(self):
        return normalize_stats(self.client.get_kyc_stats())

    def approve_call(self, item_id):
        return self.client.approve_kyc(item_id)

    def reject_call(self, item_id, reason):
        return self.client.reject_kyc(item_id, reason)

    def set_document_filter(self, document_type):
        self.document_filter = document_type or ""
        return self

    def visible_items(self):
        items = super().visible_items()
        if self.document_filter:
            wanted = self.document_filter.lower()
            items = [k for k in items if wanted in (k.document_type or "").lower()]
        return items

    def open(self, kyc_id):
        """Detail view; falls back to the API when the record is not on this page."""
        record = self.find(kyc_id)
        if record is None:
            raw = pick(self.client.get_kyc(kyc_id), "kyc", "kycRequest")
            record = normalize_kyc(raw) if isinstance(raw, dict) else None
        self.selected = record
        return record

    def export(self):
        """The filtered rows as plain dicts, ready to dump as JSON."""
        return [item.to_dict() for item in self.visible_items()]
