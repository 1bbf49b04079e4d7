# controllers/notifications.py
from admin_api.normalizers import normalize_notification, normalize_notifications, normalize_stats, pick
from controllers.base import ListController
from utils import is_blank

NOTIFICATION_TYPES = ("info", "success", "warning", "error", "promotion", "system")


class NotificationsController(ListController):
    entity_name = "notification"
    search_fields = ("title", "message")

    def __init__(self, client, page_size=10, **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.templates = []

    def fetch_list(self):
        return normalize_notifications(self.client.get_notifications(**self.query_params()))

    def fetch_stats(self):
        return normalize_stats(self.client.get_notification_stats())

    def fetch_templates(self):
        templates = pick(self.client.get_notification_templates(), "templates", default=[])
        return templates if isinstance(templates, list) else []

    def _apply_templates(self, templates):
        self.templates = templates

    def fetchers(self):
        return super().fetchers() + [(self.fetch_templates, self._apply_templates)]

    def _validate(self, payload):
        if is_blank(payload.get("title")) or is_blank(payload.get("message")):
            return "Title and message are required"
        if payload.get("type", "info") not in NOTIFICATION_TYPES:
            return f"Unknown notification type: {payload.get('type')}"
        return None

    def send(self, payload):
        """Send to one user (``userId``) or to everyone when no user is given."""
        problem = self._validate(payload)
        if problem:
            return self._fail(problem)

        def patch(response):
            record = pick(response, "notification")
            if isinstance(record, dict):
                self.items.insert(0, normalize_notification(record))

        return self._run_action(
            lambda: self.client.send_notification(payload),
            success_message="Notification sent successfully!",
            failure_message="Failed to send notification",
            patch=patch,
        )

    def send_bulk(self, payload):
        problem = self._validate(payload)
        if problem:
            return self._fail(problem)
        user_ids = payload.get("userIds")
        if user_ids is not None and not user_ids:
            return self._fail("Please select at least one user")
        count = len(user_ids) if user_ids else "all"
        return self._run_action(
            lambda: self.client.send_bulk_notification(payload),
            success_message=f"Notification sent to {count} users",
            failure_message="Failed to send bulk notification",
        )

    def delete(self, notification_id):
        return self._run_action(
            lambda: self.client.delete_notification(notification_id),
            success_message="Notification deleted",
            failure_message="Failed to delete notification",
            patch=lambda _: self._remove_item(notification_id),
        )

    def extra_state(self):
        return {"templates": self.templates}
