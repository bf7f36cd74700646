"""Tests for first-contact session tracking."""

from concurrent.futures import ThreadPoolExecutor

from src.services.session_store import (
    InMemorySessionStore,
    get_session_store,
    reset_session_store,
)


def test_first_contact_only_once():
    store = InMemorySessionStore()

    assert store.mark_seen("user-1") is True
    assert store.mark_seen("user-1") is False
    assert store.mark_seen("user-2") is True


def test_reset_one_sender():
    store = InMemorySessionStore()
    store.mark_seen("user-1")
    store.mark_seen("user-2")

    store.reset("user-1")

    assert store.mark_seen("user-1") is True
    assert store.mark_seen("user-2") is False


def test_reset_everyone():
    store = InMemorySessionStore()
    store.mark_seen("user-1")

    store.reset()

    assert store.mark_seen("user-1") is True


def test_concurrent_first_contact_reported_once():
    store = InMemorySessionStore()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: store.mark_seen("user-1"), range(50)))

    assert results.count(True) == 1


def test_global_store_is_shared_until_reset():
    first = get_session_store()
    assert get_session_store() is first

    reset_session_store()

    assert get_session_store() is not first
