"""
Tests for ParticipantSet membership and persistence
"""

from conftest import RecordingStore
from patchbay.agents import ParticipantSet


def test_join_and_leave(registry):
    store = RecordingStore()
    participants = ParticipantSet(registry, store=store)

    participants.join("agent-a")
    participants.join("agent-b")
    participants.join("agent-a")
    participants.leave("agent-a")
    participants.leave("agent-a")

    assert participants.ids == ("agent-b",)
    assert store.saves == [["agent-a"], ["agent-a", "agent-b"], ["agent-b"]]


def test_join_ignores_unregistered_ids(registry):
    store = RecordingStore()
    participants = ParticipantSet(registry, store=store)

    participants.join("ghost")

    assert len(participants) == 0
    assert store.saves == []


def test_replace_all_filters_and_keeps_order(registry):
    store = RecordingStore()
    participants = ParticipantSet(registry, store=store)

    participants.replace_all(["agent-b", "ghost", "agent-a", "agent-b"])

    assert participants.ids == ("agent-b", "agent-a")
    assert store.saved == ["agent-b", "agent-a"]
    assert [a.id for a in participants.members()] == ["agent-b", "agent-a"]


def test_restore_drops_agents_no_longer_registered(registry):
    participants = ParticipantSet(registry, store=RecordingStore(saved=["manual-x", "retired"]))

    participants.restore()

    assert participants.ids == ("manual-x",)
    assert "manual-x" in participants


def test_store_failures_keep_in_memory_state(registry):
    participants = ParticipantSet(registry, store=RecordingStore(fail=True))

    participants.restore()
    participants.join("agent-a")

    assert participants.ids == ("agent-a",)


def test_every_participant_id_is_registered(registry):
    participants = ParticipantSet(registry, store=RecordingStore(saved=["ghost", "agent-b"]))

    participants.restore()
    participants.join("retired")
    participants.replace_all(["agent-a", "nobody", "manual-x"])

    assert participants.ids == ("agent-a", "manual-x")
    assert all(agent_id in registry for agent_id in participants.ids)
    assert not hasattr(registry, "unregister")
