# controllers/banners.py
from admin_api.normalizers import normalize_banner, normalize_banners, pick
from controllers.base import ListController
from models import BannerStatus, Pagination
from utils import is_blank

BANNER_FIELDS = ("title", "description", "link", "status", "order")


class BannersController(ListController):
    """
    Home-screen banners. The app shows at most ``max_active`` of them, so
    activating one more than that is refused before anything is sent.
    """

    entity_name = "banner"
    search_fields = ("title", "description")

    def __init__(self, client, page_size=10, max_active=2, **kwargs):
        super().__init__(client, page_size, **kwargs)
        self.max_active = max_active

    def fetch_list(self):
        banners = normalize_banners(self.client.get_banners())
        return banners, Pagination(current=1, pages=1, total=len(banners), limit=len(banners) or None)

    def fetchers(self):
        return [(self.fetch_list, self._apply_list)]

    def active_count(self, exclude=None):
        return sum(1 for b in self.items if b.status == BannerStatus.ACTIVE and b.id != exclude)

    def _cap_reached(self, exclude=None):
        return self.active_count(exclude) >= self.max_active

    @staticmethod
    def _fields(data):
        fields = {k: v for k, v in (data or {}).items() if k in BANNER_FIELDS and v is not None}
        if "order" in fields:
            fields["order"] = str(fields["order"])
        return fields

    def create(self, data, image=None):
        """``image`` is a ``{"image": (filename, stream, content_type)}`` mapping or None."""
        if is_blank((data or {}).get("title")):
            return self._fail("Banner title is required")
        if image is None:
            return self._fail("Please select a banner image")
        fields = self._fields(data)
        fields.setdefault("status", BannerStatus.ACTIVE.value)
        if fields["status"] == BannerStatus.ACTIVE.value and self._cap_reached():
            return self._fail(f"Only {self.max_active} banners can be active at a time")

        def patch(response):
            record = pick(response, "banner")
            if isinstance(record, dict):
                self.items.append(normalize_banner(record))
                self.items.sort(key=lambda b: b.order)

        return self._run_action(
            lambda: self.client.create_banner(fields, image),
            success_message="Banner created successfully!",
            failure_message="Failed to create banner",
            patch=patch,
        )

    def update(self, banner_id, data, image=None):
        fields = self._fields(data)
        if "status" in fields and fields["status"] not in {s.value for s in BannerStatus}:
            return self._fail(f"Unknown banner status: {fields['status']}")
        if fields.get("status") == BannerStatus.ACTIVE.value and self._cap_reached(exclude=banner_id):
            return self._fail(f"Only {self.max_active} banners can be active at a time")

        def patch(response):
            record = pick(response, "banner")
            if isinstance(record, dict):
                updated = normalize_banner(record)
                self.items = [updated if b.id == banner_id else b for b in self.items]
            elif "status" in fields:
                self._patch_item(banner_id, status=BannerStatus(fields["status"]))

        return self._run_action(
            lambda: self.client.update_banner(banner_id, fields, image),
            success_message="Banner updated successfully!",
            failure_message="Failed to update banner",
            patch=patch,
        )

    def activate(self, banner_id):
        return self.update(banner_id, {"status": BannerStatus.ACTIVE.value})

    def deactivate(self, banner_id):
        return self.update(banner_id, {"status": BannerStatus.INACTIVE.value})

    def delete(self, banner_id):
        return self._run_action(
            lambda: self.client.delete_banner(banner_id),
            success_message="Banner deleted",
            failure_message="Failed to delete banner",
            patch=lambda _: self._remove_item(banner_id),
        )

    def extra_state(self):
        return {"active_count": self.active_count(), "max_active": self.max_active}
