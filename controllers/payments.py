# controllers/payments.py
from admin_api.errors import ApiError
from admin_api.normalizers import normalize_payments, normalize_stats, pick
from controllers.base import ReviewController
from metrics.formatting import format_currency
from utils import is_blank


class PaymentsController(ReviewController):
    """Payment proofs (UTR review) plus the UPI/bank details users pay into."""

    entity_name = "payment"
    review_label = "Payment"
    search_fields = ("utr", "user.name", "user.email", "upi_id")

    PAYMENT_SETTING_KEYS = (
        "paymentUpiId", "paymentUpiQrCode", "paymentBankName", "paymentAccountNumber",
        "paymentIfscCode", "paymentAccountHolderName", "coinPricePerDollar",
    )

    def __init__(self, client, page_size=10, status="pending", **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.filters["status"] = status
        self.payment_settings = {}

    def fetch_list(self):
        return normalize_payments(self.client.get_payments(**self.query_params()))

    def fetch_stats(self):
        return normalize_stats(self.client.get_payment_stats())

    def approve_call(self, item_id):
        return self.client.approve_payment(item_id)

    def reject_call(self, item_id, reason):
        return self.client.reject_payment(item_id, reason)

    def _subject(self, item):
        return f"{item.user.name or item.user.email} ({format_currency(item.amount)}, UTR {item.utr})"

    def approved_message(self, subject):
        return f"Payment from {subject} approved!"

    def rejected_message(self, subject):
        return f"Payment from {subject} rejected."

    def load_settings(self):
        try:
            settings = pick(self.client.get_payment_settings(), "settings") or {}
        except ApiError as e:
            self.last_exception = e
            return self._fail(f"Failed to load payment settings: {e}")
        self.payment_settings = settings if isinstance(settings, dict) else {}
        return True, "Payment settings loaded"

    def update_settings(self, changes):
        if "paymentUpiId" in changes and is_blank(changes["paymentUpiId"]):
            return self._fail("UPI ID cannot be empty")
        payload = {k: v for k, v in changes.items() if k in self.PAYMENT_SETTING_KEYS}
        if not payload:
            return self._fail("No payment settings to update")

        def patch(_):
            self.payment_settings.update(payload)

        return self._run_action(
            lambda: self.client.update_payment_settings(payload),
            success_message="Payment settings updated successfully!",
            failure_message="Failed to update payment settings",
            patch=patch,
            refresh=False,
        )

    def upload_qr(self, filename, stream, content_type="image/png"):
        if not filename:
            return self._fail("Please choose a QR code image")

        def patch(response):
            url = pick(response, "qrCodeUrl", "url")
            if url:
                self.payment_settings["paymentUpiQrCode"] = url

        return self._run_action(
            lambda: self.client.upload_qr_code(filename, stream, content_type),
            success_message="QR code uploaded successfully!",
            failure_message="Failed to upload QR code",
            patch=patch,
            refresh=False,
        )

    def extra_state(self):
        return {"payment_settings": self.payment_settings}
