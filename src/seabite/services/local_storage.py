"""
Client-local key/value storage shared by the browsing contexts of a profile.

A LocalStorage is the per-profile area; each BrowsingContext is one tab or
window looking at it. A write that changes a value is announced to the
listeners of every *other* open context of the profile as a StorageEvent,
never to the writer itself. Contexts that want to react to their own writes
call BrowsingContext.dispatch() explicitly.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageEvent:
    """A change of one key (key is None when the whole area was cleared)"""
    key: Optional[str]
    old_value: Optional[str]
    new_value: Optional[str]
    source_context: str


StorageListener = Callable[[StorageEvent], None]


class LocalStorage:
    """Key/value area of one browser profile"""

    def __init__(self, backend, profile_id: str):
        self.backend = backend
        self.profile_id = profile_id
        self._contexts: Dict[str, "BrowsingContext"] = {}

    def open_context(self, context_id: Optional[str] = None) -> "BrowsingContext":
        context_id = context_id or uuid.uuid4().hex[:8]
        if context_id in self._contexts:
            return self._contexts[context_id]
        context = BrowsingContext(self, context_id)
        self._contexts[context_id] = context
        logger.debug(f"Opened context {context_id} on profile {self.profile_id}")
        return context

    def close_context(self, context_id: str) -> None:
        self._contexts.pop(context_id, None)

    @property
    def open_contexts(self) -> List[str]:
        return list(self._contexts)

    def broadcast(self, event: StorageEvent) -> None:
        """Deliver a change to every open context except the one that made it."""
        for context_id, context in list(self._contexts.items()):
            if context_id != event.source_context:
                context.dispatch(event)


class BrowsingContext:
    """One tab's view of a LocalStorage"""

    def __init__(self, storage: LocalStorage, context_id: str):
        self.storage = storage
        self.context_id = context_id
        self._listeners: List[StorageListener] = []

    @property
    def profile_id(self) -> str:
        return self.storage.profile_id

    def get_item(self, key: str) -> Optional[str]:
        return self.storage.backend.get(self.profile_id, key)

    def set_item(self, key: str, value: str) -> None:
        old_value = self.get_item(key)
        self.storage.backend.set(self.profile_id, key, value)
        if old_value != value:
            self.storage.broadcast(StorageEvent(key, old_value, value, self.context_id))

    def remove_item(self, key: str) -> None:
        old_value = self.get_item(key)
        if old_value is None:
            return
        self.storage.backend.delete(self.profile_id, key)
        self.storage.broadcast(StorageEvent(key, old_value, None, self.context_id))

    def clear(self) -> None:
        if self.storage.backend.clear(self.profile_id):
            self.storage.broadcast(StorageEvent(None, None, None, self.context_id))

    def keys(self) -> List[str]:
        return self.storage.backend.keys(self.profile_id)

    def add_listener(self, listener: StorageListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: StorageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def dispatch(self, event: StorageEvent) -> None:
        """Run this context's listeners; one failing listener does not stop the rest."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    f"Storage listener failed in context {self.context_id} for key {event.key!r}"
                )

    def close(self) -> None:
        self._listeners.clear()
        self.storage.close_context(self.context_id)
