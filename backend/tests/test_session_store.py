import time

from conftest import turn
from voicetwin.models import Role
from voicetwin.session.store import InMemorySessionStore


def test_get_or_create_seeds_priming_pair(store, persona):
    turns = store.get_or_create("s1")

    assert len(turns) == 2
    assert turns[0].role is Role.USER
    assert turns[0].text == persona.persona_text
    assert turns[1].role is Role.MODEL
    assert turns[1].text == persona.acknowledgement
    assert "s1" in store


def test_get_or_create_returns_existing_sequence(store):
    seeded = store.get_or_create("s1")
    store.replace("s1", seeded + [turn("user", "Q"), turn("model", "A")])

    again = store.get_or_create("s1")
    assert [t.text for t in again[2:]] == ["Q", "A"]
    assert len(store) == 1


def test_returned_sequence_is_a_copy(store):
    turns = store.get_or_create("s1")
    turns.append(turn("user", "not persisted"))

    assert len(store.get_or_create("s1")) == 2


def test_get_does_not_seed(store):
    assert store.get("missing") is None
    assert "missing" not in store


def test_replace_does_not_validate_alternation(store):
    store.replace("s1", [turn("user", "a"), turn("user", "b"), turn("user", "c")])
    assert [t.role for t in store.get("s1")] == [Role.USER, Role.USER, Role.USER]


def test_sessions_are_isolated(store):
    first = store.get_or_create("a")
    store.replace("a", first + [turn("user", "only in a"), turn("model", "reply a")])

    assert len(store.get_or_create("b")) == 2
    assert all(t.text != "only in a" for t in store.get("b"))


def test_lock_is_per_session(store):
    assert store.lock("a") is store.lock("a")
    assert store.lock("a") is not store.lock("b")


def test_cleanup_expired_removes_idle_sessions(store):
    store.get_or_create("old")
    store.get_or_create("fresh")

    store._sessions["old"].updated_at = time.time() - 3600  # test-only direct mutation
    removed = store.cleanup_expired(ttl_sec=60)

    assert removed == 1
    assert store.get("old") is None
    assert store.get("fresh") is not None


def test_capacity_evicts_least_recently_used(persona):
    store = InMemorySessionStore(persona.priming_pair(), max_sessions=2)
    store.get_or_create("a")
    store.get_or_create("b")
    store.get_or_create("a")  # a becomes most recent
    store.get_or_create("c")

    assert "b" not in store
    assert "a" in store
    assert "c" in store
    assert len(store) == 2
