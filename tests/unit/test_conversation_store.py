"""Unit tests for Turn records and the ConversationStore.

Tests ordering, reset, snapshots, persistence and format compatibility.
"""

import json

import pytest

from stick_gpt.conversation import ConversationStore, ToolCallRequest, Turn


def sample_turns() -> list[Turn]:
    return [
        Turn.user("What time is it?"),
        Turn.assistant("", [ToolCallRequest(id="call_1", name="get_current_time")]),
        Turn.tool("call_1", '{"success": true}', name="get_current_time"),
        Turn.assistant("It is 10:00."),
    ]


class TestTurn:
    """Tests for the Turn record."""

    def test_unknown_role_rejected(self):
        """Test that only the four conversation roles are accepted."""
        with pytest.raises(ValueError, match="Unknown turn role"):
            Turn(role="narrator", content="Once upon a time")

    def test_turns_are_immutable(self):
        """Test that appended turns cannot be mutated."""
        turn = Turn.user("Hello")

        with pytest.raises(AttributeError):
            turn.content = "Changed"  # type: ignore[misc]

    def test_tool_calls_normalised_to_tuple(self):
        """Test that a list of tool calls is stored as a tuple."""
        turn = Turn(
            role="assistant",
            tool_calls=[ToolCallRequest(id="a", name="x")],  # type: ignore[arg-type]
        )
        assert isinstance(turn.tool_calls, tuple)

    def test_assistant_none_content_becomes_empty(self):
        """Test that missing assistant content is stored as an empty string."""
        assert Turn.assistant(None).content == ""

    def test_to_dict_omits_unset_fields(self):
        """Test that plain turns serialize to role and content only."""
        assert Turn.user("Hi").to_dict() == {"role": "user", "content": "Hi"}

    def test_to_dict_with_tool_calls(self):
        """Test serialization of an assistant turn with tool calls."""
        turn = Turn.assistant(
            "Checking", [ToolCallRequest(id="c1", name="read_file", arguments='{"path": "a"}')]
        )

        assert turn.to_dict() == {
            "role": "assistant",
            "content": "Checking",
            "tool_calls": [{"id": "c1", "name": "read_file", "arguments": '{"path": "a"}'}],
        }

    def test_from_dict_accepts_null_content(self):
        """Test that null content in stored records is read as empty."""
        turn = Turn.from_dict({"role": "assistant", "content": None})
        assert turn.content == ""

    def test_from_dict_unknown_role(self):
        """Test that an unknown role in stored records raises ValueError."""
        with pytest.raises(ValueError):
            Turn.from_dict({"role": "moderator", "content": "x"})


class TestConversationStore:
    """Tests for the ConversationStore."""

    def test_new_store_is_empty(self):
        store = ConversationStore()
        assert len(store) == 0
        assert store.snapshot() == ()

    def test_append_preserves_order_and_duplicates(self):
        """Test that appends keep order and never deduplicate."""
        store = ConversationStore()
        store.append(Turn.user("Hi"))
        store.append(Turn.user("Hi"))
        store.append(Turn.assistant("Hello"))

        assert [turn.content for turn in store] == ["Hi", "Hi", "Hello"]

    def test_snapshot_is_not_live(self):
        """Test that a snapshot does not observe later appends."""
        store = ConversationStore()
        store.append(Turn.user("Hi"))
        snapshot = store.snapshot()

        store.append(Turn.assistant("Hello"))

        assert len(snapshot) == 1
        assert isinstance(snapshot, tuple)

    def test_reset(self):
        """Test that reset clears any prior state."""
        store = ConversationStore(sample_turns())

        store.reset()

        assert store.snapshot() == ()

    def test_persist_writes_json_list(self, tmp_path):
        """Test the on-disk format is a list of turn records."""
        store = ConversationStore(sample_turns())
        path = tmp_path / "nested" / "conversation.json"

        store.persist(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert len(data) == 4
        assert data[1]["tool_calls"][0]["name"] == "get_current_time"
        assert data[2]["tool_call_id"] == "call_1"

    def test_round_trip_empty(self, tmp_path):
        """Test that an empty store round-trips."""
        path = tmp_path / "empty.json"
        ConversationStore().persist(path)

        restored = ConversationStore([Turn.user("stale")])
        assert restored.restore(path) is True

        assert restored.snapshot() == ()

    def test_round_trip_populated(self, tmp_path):
        """Test that a populated store round-trips to an equal sequence."""
        store = ConversationStore(sample_turns())
        path = tmp_path / "conversation.json"
        store.persist(path)

        restored = ConversationStore()
        restored.restore(path)

        assert restored.snapshot() == store.snapshot()

    def test_restore_missing_file_keeps_state(self, tmp_path):
        """Test that restoring from a missing file is not an error."""
        store = ConversationStore([Turn.user("keep me")])

        assert store.restore(tmp_path / "missing.json") is False

        assert store.snapshot() == (Turn.user("keep me"),)

    def test_restore_invalid_json(self, tmp_path):
        """Test that malformed files raise ValueError and keep state."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        store = ConversationStore([Turn.user("keep me")])

        with pytest.raises(ValueError, match="not valid JSON"):
            store.restore(path)

        assert len(store) == 1

    def test_restore_requires_list(self, tmp_path):
        """Test that a JSON object at top level is rejected."""
        path = tmp_path / "object.json"
        path.write_text('{"messages": []}', encoding="utf-8")

        with pytest.raises(ValueError, match="list of turns"):
            ConversationStore().restore(path)

    def test_restore_invalid_turn(self, tmp_path):
        """Test that records that are not turn objects are rejected."""
        path = tmp_path / "bad_turn.json"
        path.write_text('["just a string"]', encoding="utf-8")

        with pytest.raises(ValueError):
            ConversationStore().restore(path)

    def test_restore_preserves_unicode(self, tmp_path):
        """Test that non-ASCII content survives persistence."""
        store = ConversationStore([Turn.user("Grüße 👋")])
        path = tmp_path / "unicode.json"
        store.persist(path)

        restored = ConversationStore()
        restored.restore(path)

        assert restored.snapshot()[0].content == "Grüße 👋"
