# controllers/base.py
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional, Tuple

from admin_api.errors import ApiError
from metrics.formatting import pagination_summary
from models import Pagination, ReviewStatus
from utils import clean_reason

logger = logging.getLogger(__name__)

MAX_FETCH_WORKERS = 8

# Leaf fetches only; nothing submitted here waits on another task in this pool.
fetch_executor = ThreadPoolExecutor(max_workers=MAX_FETCH_WORKERS, thread_name_prefix="admin-fetch")
# Background refreshes fan out into fetch_executor, so they get their own pool.
refresh_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="admin-refresh")

ActionResult = Tuple[bool, str]


def resolve(obj, path: str):
    """Follow a dotted attribute path ("user.name") and return '' when any hop is missing."""
    for part in path.split("."):
        obj = getattr(obj, part, None)
        if obj is None:
            return ""
    return obj


class Debouncer:
    """
    Runs ``callback`` once ``delay`` seconds have passed without another trigger.
    Used for free-text search boxes so typing does not fire a request per key.
    ``on_superseded`` receives the arguments of a pending call that a newer trigger replaced.
    """

    def __init__(self, delay: float, callback: Callable[..., Any],
                 on_superseded: Optional[Callable[..., Any]] = None):
        self.delay = delay
        self.callback = callback
        self.on_superseded = on_superseded
        self._timer: Optional[threading.Timer] = None
        self._args: Tuple = ()
        self._calls = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self, *args):
        replaced = None
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                replaced = self._args
            self._args = args
            self._calls += 1
            self._timer = threading.Timer(self.delay, self._fire, args=(self._calls,))
            self._timer.daemon = True
            self._timer.start()
        if replaced is not None and self.on_superseded is not None:
            self.on_superseded(*replaced)

    def _fire(self, call):
        with self._lock:
            # a timer that lost the race with trigger, flush or cancel
            if call != self._calls or self._timer is None:
                return
            self._timer = None
            args = self._args
        self.callback(*args)

    def flush(self):
        """Run a pending call now instead of waiting for the timer."""
        with self._lock:
            timer, self._timer = self._timer, None
            args = self._args
        if timer is not None:
            timer.cancel()
            self.callback(*args)

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None


class ListController:
    """
    View state for one paginated admin list.

    ``load`` fires the stats and list requests together and applies whichever
    lands first. Every load is stamped with a generation number; a response
    that arrives after a newer load started is dropped, so a slow stale
    request can never overwrite fresher state.

    Mutations call the API, patch the in-memory list straight away, then
    refresh in the background. The refresh always wins once it lands; there is
    no rollback of the local patch.
    """

    entity_name = "item"
    search_fields: Tuple[str, ...] = ()

    def __init__(self, client, page_size: int = 10,
                 executor: Optional[ThreadPoolExecutor] = None,
                 background: Optional[ThreadPoolExecutor] = None):
        self.client = client
        self.page_size = page_size
        self.executor = executor or fetch_executor
        self.background = background or refresh_executor

        self.items: List[Any] = []
        self.stats: Dict[str, Any] = {}
        self.pagination = Pagination()
        self.selected = None
        self.loading = False
        self.error: Optional[str] = None
        self.last_exception: Optional[ApiError] = None
        self.toast: Optional[str] = None

        self.filters: Dict[str, Any] = {}
        self.search = ""
        self.page = 1

        self._generation = 0
        self._lock = threading.Lock()
        self._refresh = None

    # ------------------------------------------------------------------
    # hooks for subclasses
    # ------------------------------------------------------------------
    def fetch_list(self):
        """Return ``(items, pagination)``."""
        raise NotImplementedError

    def fetch_stats(self) -> Dict[str, Any]:
        return {}

    def fetchers(self) -> List[Tuple[Callable[[], Any], Callable[[Any], None]]]:
        """(request, apply) pairs issued concurrently on every load."""
        return [(self.fetch_stats, self._apply_stats), (self.fetch_list, self._apply_list)]

    def query_params(self) -> Dict[str, Any]:
        params = {"page": self.page, "limit": self.page_size}
        params.update({k: v for k, v in self.filters.items() if v not in (None, "", "all")})
        return params

    def extra_state(self) -> Dict[str, Any]:
        return {}

    def serialize_item(self, item) -> Dict[str, Any]:
        return item.to_dict()

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------
    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _apply_stats(self, stats):
        self.stats = stats or {}

    def _apply_list(self, result):
        items, pagination = result
        self.items = items
        self.pagination = pagination

    def load(self):
        generation = self._next_generation()
        self.loading = True
        self.error = None

        futures = {self.executor.submit(fetch): apply for fetch, apply in self.fetchers()}
        for future in as_completed(futures):
            try:
                result = future.result()
            except ApiError as e:
                logger.error(f"Failed to load {self.entity_name} data: {e}")
                if self._is_current(generation):
                    self.error = f"Failed to load {self.entity_name} data: {e}"
                    self.last_exception = e
                continue

            if not self._is_current(generation):
                logger.debug(f"Discarding stale {self.entity_name} response (generation {generation})")
                continue
            futures[future](result)

        if self._is_current(generation):
            self.loading = False
        return self

    def refresh_in_background(self):
        self._refresh = self.background.submit(self.load)
        return self._refresh

    def settle(self, timeout: Optional[float] = None):
        """Block until an outstanding background refresh has been applied."""
        refresh, self._refresh = self._refresh, None
        if refresh is not None:
            refresh.result(timeout=timeout)
        return self

    # ------------------------------------------------------------------
    # view-state changes
    # ------------------------------------------------------------------
    def set_page(self, page: int):
        self.page = max(int(page), 1)
        return self.load()

    def set_filter(self, key: str, value):
        self.filters[key] = value
        self.page = 1
        return self.load()

    def set_search(self, text: str):
        """Client-side search: narrows ``visible_items`` with no request."""
        self.search = text or ""
        return self

    def visible_items(self) -> List[Any]:
        query = self.search.strip().lower()
        if not query or not self.search_fields:
            return list(self.items)
        return [
            item for item in self.items
            if any(query in str(resolve(item, path)).lower() for path in self.search_fields)
        ]

    def find(self, item_id):
        for item in self.items:
            if item.id == item_id:
                return item
        if self.selected is not None and self.selected.id == item_id:
            return self.selected
        return None

    def select(self, item_id):
        self.selected = self.find(item_id)
        return self.selected

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------
    def _patch_item(self, item_id, **changes):
        for item in self.items:
            if item.id == item_id:
                for key, value in changes.items():
                    setattr(item, key, value)
        if self.selected is not None and self.selected.id == item_id:
            for key, value in changes.items():
                setattr(self.selected, key, value)

    def _remove_item(self, item_id):
        self.items = [item for item in self.items if item.id != item_id]
        if self.selected is not None and self.selected.id == item_id:
            self.selected = None

    def _fail(self, message: str) -> ActionResult:
        self.error = message
        return False, message

    def _run_action(self, call: Callable[[], Any], success_message: str, failure_message: str,
                    patch: Optional[Callable[[Any], None]] = None, refresh: bool = True) -> ActionResult:
        """Call the API, patch local state on success, then reconcile in the background."""
        try:
            response = call()
        except ApiError as e:
            logger.error(f"{failure_message}: {e}")
            self.last_exception = e
            return self._fail(f"{failure_message}: {e}")

        if patch is not None:
            patch(response)
        self.error = None
        self.toast = success_message
        logger.info(success_message)
        if refresh:
            self.refresh_in_background()
        return True, success_message

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    @property
    def unauthorized(self) -> bool:
        return self.last_exception is not None and self.last_exception.is_unauthorized

    def to_dict(self) -> Dict[str, Any]:
        state = {
            "items": [self.serialize_item(item) for item in self.visible_items()],
            "stats": self.stats,
            "pagination": self.pagination.to_dict(),
            "summary": pagination_summary(self.pagination, self.page_size),
            "filters": self.filters,
            "search": self.search,
            "page": self.page,
            "loading": self.loading,
            "error": self.error,
            "toast": self.toast,
        }
        if self.selected is not None:
            state["selected"] = self.serialize_item(self.selected)
        state.update(self.extra_state())
        return state


class ReviewController(ListController):
    """
    Shared approve/reject flow for KYC requests and payment proofs.
    pending -> approved, or pending -> rejected with a non-empty reason. Both are terminal.
    """

    review_label = "Request"

    def approve_call(self, item_id):
        raise NotImplementedError

    def reject_call(self, item_id, reason):
        raise NotImplementedError

    def _subject(self, item) -> str:
        return item.user.name or item.user.email or str(item.id)

    def _check_pending(self, item_id):
        """Refuse decided records we can see; anything off-page is left to the server."""
        item = self.find(item_id)
        if item is None:
            return None, None
        if item.status != ReviewStatus.PENDING:
            return None, f"{self.review_label} is already {item.status.value}"
        return item, None

    def approve(self, item_id) -> ActionResult:
        item, problem = self._check_pending(item_id)
        if problem:
            return self._fail(problem)
        return self._run_action(
            lambda: self.approve_call(item_id),
            success_message=self.approved_message(self._subject(item) if item else item_id),
            failure_message=f"Failed to approve {self.review_label.lower()}",
            patch=lambda _: self._patch_item(item_id, status=ReviewStatus.APPROVED),
        )

    def reject(self, item_id, reason) -> ActionResult:
        reason = clean_reason(reason)
        if reason is None:
            return self._fail("Please provide a rejection reason")
        item, problem = self._check_pending(item_id)
        if problem:
            return self._fail(problem)
        return self._run_action(
            lambda: self.reject_call(item_id, reason),
            success_message=self.rejected_message(self._subject(item) if item else item_id),
            failure_message=f"Failed to reject {self.review_label.lower()}",
            patch=lambda _: self._patch_item(item_id, status=ReviewStatus.REJECTED, rejection_reason=reason),
        )

    def approved_message(self, subject):
        return f"{self.review_label} for {subject} has been approved!"

    def rejected_message(self, subject):
        return f"{self.review_label} for {subject} has been rejected."
