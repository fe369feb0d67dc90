import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Optional
import logging

from seabite.models.cart import CartPolicy, DEFAULT_POLICY
from seabite.services.cart_service import CartService
from seabite.services.cart_sync import CartStateSynchronizer
from seabite.services.local_storage import BrowsingContext, LocalStorage

logger = logging.getLogger(__name__)

API_CONTEXT_ID = "api"
DEFAULT_MAX_SESSIONS = 1000


@dataclass
class CartSession:
    """The API's own browsing context on a profile, with its cart store wired in"""
    context: BrowsingContext
    synchronizer: CartStateSynchronizer
    cart: CartService

    def close(self) -> None:
        self.synchronizer.stop()
        self.context.close()


class CartSessionRegistry:
    """
    One LocalStorage per profile, all on the same backend.

    Contexts opened through the registry share the profile's LocalStorage, so
    a write from one of them reaches the synchronizers of the others.

    At most max_sessions API sessions are kept; the least recently used one is
    closed when another profile needs a slot. Stored data stays in the
    backend, so an evicted profile simply gets a fresh session next time.
    """

    def __init__(
        self,
        backend,
        policy: CartPolicy = DEFAULT_POLICY,
        storage_key: str = "cart",
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.backend = backend
        self.policy = policy
        self.storage_key = storage_key
        self.max_sessions = max_sessions
        self._storages: Dict[str, LocalStorage] = {}
        self._sessions: "OrderedDict[str, CartSession]" = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._sessions)

    def storage_for(self, profile_id: str) -> LocalStorage:
        with self._lock:
            storage = self._storages.get(profile_id)
            if storage is None:
                storage = LocalStorage(self.backend, profile_id)
                self._storages[profile_id] = storage
            return storage

    def open_context(self, profile_id: str, context_id: Optional[str] = None) -> BrowsingContext:
        return self.storage_for(profile_id).open_context(context_id)

    def session_for(self, profile_id: str) -> CartSession:
        with self._lock:
            session = self._sessions.get(profile_id)
            if session is not None:
                self._sessions.move_to_end(profile_id)
                return session

            while len(self._sessions) >= self.max_sessions:
                self._evict_oldest()

            context = self.open_context(profile_id, API_CONTEXT_ID)
            synchronizer = CartStateSynchronizer(context, self.policy, self.storage_key)
            result = synchronizer.start()
            if not result.ok:
                logger.warning(f"Profile {profile_id} started with an unreadable cart: {result.error.message}")

            session = CartSession(
                context=context,
                synchronizer=synchronizer,
                cart=CartService(context, self.storage_key),
            )
            # Own writes go through dispatch(), which the synchronizer listens to
            self._sessions[profile_id] = session
            logger.info(f"Opened cart session for profile {profile_id}")
            return session

    def _evict_oldest(self) -> None:
        profile_id, session = self._sessions.popitem(last=False)
        session.close()
        storage = self._storages.get(profile_id)
        # Keep the storage while other contexts (tabs) are still attached
        if storage is not None and not storage.open_contexts:
            del self._storages[profile_id]
        logger.info(f"Evicted idle cart session for profile {profile_id}")

    def close(self) -> None:
        with self._lock:
            for session in self._sessions.values():
                session.close()
            self._sessions.clear()
            self._storages.clear()
