from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from seabite.core.exceptions import CartParseError, StorageError
from seabite.models.cart import CartPolicy, CartSummary, DEFAULT_POLICY
from seabite.services.cart_totals import compute_summary, empty_summary, parse_line_items
from seabite.services.local_storage import BrowsingContext, StorageEvent

logger = logging.getLogger(__name__)

SummaryListener = Callable[[CartSummary], None]


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of one recomputation; error is set when the cart had to be reset"""
    summary: CartSummary
    error: Optional[CartParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CartStateSynchronizer:
    """
    Keeps the cart summary of one browsing context in step with storage

    Responsibilities:
    - Read the persisted line items and rebuild the summary on refresh()
    - Refresh when another context writes the cart key (or clears storage)
    - Push every rebuilt summary to subscribers

    The summary is never patched in place; refresh() always rebuilds it from
    whatever is stored, so calling it twice in a row is harmless.
    """

    def __init__(
        self,
        context: BrowsingContext,
        policy: CartPolicy = DEFAULT_POLICY,
        storage_key: str = "cart",
    ):
        self.context = context
        self.policy = policy
        self.storage_key = storage_key
        self._summary = empty_summary(policy)
        self._subscribers: List[SummaryListener] = []
        self._attached = False

    @property
    def summary(self) -> CartSummary:
        return self._summary

    def start(self) -> RefreshResult:
        """Initial load plus subscription to cross-context storage changes."""
        if not self._attached:
            self.context.add_listener(self._on_storage_event)
            self._attached = True
        return self.refresh()

    def stop(self) -> None:
        if self._attached:
            self.context.remove_listener(self._on_storage_event)
            self._attached = False

    def refresh(self) -> RefreshResult:
        """Re-read the persisted cart and recompute the summary."""
        error = None
        try:
            raw = self.context.get_item(self.storage_key)
            summary = compute_summary(parse_line_items(raw), self.policy)
        except CartParseError as e:
            logger.warning(
                f"Cart in context {self.context.context_id} is unreadable, "
                f"treating as empty: {e.message}"
            )
            error = e
            summary = empty_summary(self.policy)
        except StorageError as e:
            logger.error(f"Cart storage read failed in context {self.context.context_id}: {e.internal_message}")
            error = CartParseError(f"Cart storage unavailable: {e.internal_message}")
            summary = empty_summary(self.policy)

        self._summary = summary
        self._publish(summary)
        return RefreshResult(summary=summary, error=error)

    def subscribe(self, listener: SummaryListener) -> Callable[[], None]:
        """Register a listener for rebuilt summaries; returns the unsubscribe callable."""
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def _on_storage_event(self, event: StorageEvent) -> None:
        # key None means the whole area was cleared
        if event.key is None or event.key == self.storage_key:
            self.refresh()

    def _publish(self, summary: CartSummary) -> None:
        for listener in list(self._subscribers):
            try:
                listener(summary)
            except Exception:
                logger.exception("Cart summary subscriber failed")
