"""First-contact tracking for the welcome message.

Only an in-memory implementation is provided; state is lost on restart.
"""

from threading import Lock
from typing import Protocol


class SessionStore(Protocol):
    """Remembers which senders the bot has already talked to."""

    def mark_seen(self, sender_id: str) -> bool:
        """Record ``sender_id`` as seen.

        Returns:
            True if this is the sender's first contact, False otherwise
        """
        ...


class InMemorySessionStore:
    """Thread-safe in-memory SessionStore."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._lock = Lock()

    def mark_seen(self, sender_id: str) -> bool:
        with self._lock:
            if sender_id in self._seen:
                return False
            self._seen.add(sender_id)
            return True

    def reset(self, sender_id: str | None = None) -> None:
        """Forget one sender, or everyone."""
        with self._lock:
            if sender_id:
                self._seen.discard(sender_id)
            else:
                self._seen.clear()


# Global instance
_session_store: InMemorySessionStore | None = None


def get_session_store() -> InMemorySessionStore:
    """Get the global session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
    return _session_store


def reset_session_store() -> None:
    """Reset the global session store (primarily for testing)."""
    global _session_store
    _session_store = None
