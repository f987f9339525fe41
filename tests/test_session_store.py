import threading

import pytest

from pftodo.auth.session import SessionStore, sign_session_id, unsign_session_id
from pftodo.core.config import SESSION_TTL_SECONDS, Settings

from conftest import FakeClock

TTL = 100


@pytest.fixture()
def store(clock):
    return SessionStore(TTL, clock=clock)


def test_default_ttl_is_seven_days():
    assert SESSION_TTL_SECONDS == 7 * 24 * 3600
    assert SessionStore().ttl_seconds == SESSION_TTL_SECONDS


def test_issue_then_resolve(store):
    sid = store.issue("u1")
    assert len(sid) == 48
    int(sid, 16)
    assert store.resolve(sid) == "u1"


def test_ids_are_unique_per_issue(store):
    ids = {store.issue("u1") for _ in range(50)}
    assert len(ids) == 50
    assert len(store) == 50


def test_unknown_and_empty_ids_resolve_to_none(store):
    assert store.resolve("nope") is None
    assert store.resolve("") is None
    assert store.resolve(None) is None


def test_revoke_is_idempotent(store):
    sid = store.issue("u1")
    store.revoke(sid)
    assert store.resolve(sid) is None
    store.revoke(sid)
    store.revoke("never-issued")
    store.revoke(None)


def test_session_expires_after_ttl(store, clock):
    sid = store.issue("u1")
    clock.advance(TTL + 1)
    assert store.resolve(sid) is None
    assert len(store) == 0


def test_session_is_still_valid_at_exact_expiry(store, clock):
    sid = store.issue("u1")
    clock.advance(TTL)
    assert store.resolve(sid) == "u1"


def test_resolve_slides_expiry(store, clock):
    sid = store.issue("u1")
    for _ in range(5):
        clock.advance(TTL - 1)
        assert store.resolve(sid) == "u1"
    clock.advance(TTL + 1)
    assert store.resolve(sid) is None


def test_purge_expired(store, clock):
    old = store.issue("u1")
    clock.advance(TTL - 10)
    fresh = store.issue("u2")
    clock.advance(20)
    assert store.purge_expired() == 1
    assert store.resolve(old) is None
    assert store.resolve(fresh) == "u2"


def test_invalid_construction():
    with pytest.raises(ValueError):
        SessionStore(0)
    with pytest.raises(ValueError):
        SessionStore(10, shards=0)


def test_concurrent_issue_resolve_revoke():
    store = SessionStore(TTL, clock=FakeClock())
    errors = []

    def worker(n: int) -> None:
        try:
            for i in range(200):
                uid = f"user-{n}"
                sid = store.issue(uid)
                if store.resolve(sid) != uid:
                    errors.append(("resolve", n, i))
                store.revoke(sid)
                if store.resolve(sid) is not None:
                    errors.append(("revoked", n, i))
        except Exception as e:  # pragma: no cover - surfaced through `errors`
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(store) == 0


def test_cookie_signature_round_trip_and_tampering():
    settings = Settings(secret_key="k1")
    token = sign_session_id(settings, "abc123")
    assert token != "abc123"
    assert unsign_session_id(settings, token) == "abc123"
    assert unsign_session_id(settings, token + "x") is None
    assert unsign_session_id(settings, "abc123") is None
    assert unsign_session_id(settings, "") is None
    assert unsign_session_id(Settings(secret_key="k2"), token) is None


def test_issue_sweeps_abandoned_sessions(clock):
    store = SessionStore(TTL, clock=clock, sweep_interval=TTL)
    for n in range(5):
        store.issue(f"u{n}")
    clock.advance(10 * TTL)

    sid = store.issue("fresh")
    assert len(store) == 1
    assert store.resolve(sid) == "fresh"


def test_sweep_waits_for_interval(clock):
    store = SessionStore(TTL, clock=clock, sweep_interval=10 * TTL)
    store.issue("u1")
    clock.advance(TTL + 1)
    store.issue("u2")
    assert len(store) == 2
