"""
Tests for conversation memory and the session store
"""
import pytest

from finnova.src.core.memory import ConversationMemory, SessionStore, Turn, render_transcript


def test_new_memory_is_empty():
    memory = ConversationMemory()

    assert memory.get_transcript() == ()
    assert memory.get_summary() == ""
    assert len(memory) == 0


def test_transcript_keeps_insertion_order():
    memory = ConversationMemory()
    memory.append_turn(Turn("q1", "a1"))
    memory.append_turn(Turn("q2", "a2"))

    assert [t.user_text for t in memory.get_transcript()] == ["q1", "q2"]


def test_transcript_snapshot_cannot_mutate_memory():
    memory = ConversationMemory()
    memory.append_turn(Turn("q1", "a1"))

    snapshot = memory.get_transcript()
    assert isinstance(snapshot, tuple)
    memory.append_turn(Turn("q2", "a2"))
    assert len(snapshot) == 1


def test_summary_is_replaced():
    memory = ConversationMemory()
    memory.set_summary("first")
    memory.set_summary("second")

    assert memory.get_summary() == "second"


def test_turn_is_immutable():
    turn = Turn("q", "a")
    with pytest.raises(AttributeError):
        turn.ai_text = "changed"  # type: ignore[misc]


def test_render_transcript():
    rendered = render_transcript([Turn("q1", "a1"), Turn("q2", "a2")])

    assert rendered == "user: q1\nassistant: a1\nuser: q2\nassistant: a2"


def test_render_empty_transcript():
    assert render_transcript(()) == ""


def test_session_store_reuses_sessions():
    store = SessionStore()

    first = store.get("abc")
    assert store.get("abc") is first
    assert "abc" in store
    assert len(store) == 1


def test_session_store_separates_memories():
    store = SessionStore()
    store.get("a").memory.append_turn(Turn("q", "a"))

    assert len(store.get("b").memory) == 0


def test_session_store_clear():
    store = SessionStore()
    store.get("abc").memory.set_summary("old")

    assert store.clear("abc") is True
    assert store.clear("abc") is False
    assert store.get("abc").memory.get_summary() == ""


def test_session_store_is_bounded():
    store = SessionStore(max_sessions=3)
    for i in range(10):
        store.get(f"s{i}")

    assert len(store) == 3
    assert all(f"s{i}" in store for i in (7, 8, 9))


def test_session_store_evicts_least_recently_used():
    store = SessionStore(max_sessions=2)
    store.get("a").memory.set_summary("keep me")
    store.get("b")
    store.get("a")
    store.get("c")

    assert "b" not in store
    assert store.get("a").memory.get_summary() == "keep me"


@pytest.mark.asyncio
async def test_session_store_keeps_busy_sessions():
    store = SessionStore(max_sessions=1)
    busy = store.get("busy")

    async with busy.lock:
        store.get("other")
        assert "busy" in store
        assert len(store) == 2

    store.get("third")
    assert "busy" not in store
    assert len(store) == 1


def test_session_store_rejects_empty_bound():
    with pytest.raises(ValueError):
        SessionStore(max_sessions=0)
