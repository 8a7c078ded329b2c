"""Tests for work_queue.checkpoint and work_queue.conversation modules."""

import json

import pytest
from pydantic import ValidationError

from work_queue.checkpoint import CheckpointLog
from work_queue.conversation import ChatHistory
from work_queue.models import ChatMessage, MessageRole


class TestChatHistory:
    """Tests for the in-memory conversation store."""

    def test_starts_empty(self):
        history = ChatHistory()
        assert history.get_current_snapshot() is None
        assert history.messages() == []

    def test_append_chains_snapshots(self):
        """Test every append creates a new snapshot linked to its parent."""
        history = ChatHistory()
        first = history.append([ChatMessage(content="one")])
        second = history.append([ChatMessage(role=MessageRole.ASSISTANT, content="two")])

        assert second.parent_id == first.snapshot_id
        assert [m.content for m in second.messages] == ["one", "two"]
        assert [m.content for m in first.messages] == ["one"]

    def test_restore_old_snapshot(self):
        """Test a saved snapshot can be made current again."""
        history = ChatHistory()
        saved = history.append([ChatMessage(content="one")])
        history.append([ChatMessage(content="two")])

        history.set_current_snapshot(saved)
        assert [m.content for m in history.messages()] == ["one"]

        history.set_current_snapshot(None)
        assert history.messages() == []

    def test_snapshots_are_frozen(self):
        history = ChatHistory()
        snapshot = history.append([ChatMessage(content="one")])
        with pytest.raises(ValidationError):
            snapshot.parent_id = "other"


class TestCheckpointLog:
    """Tests for CheckpointLog."""

    def test_records_current_snapshot(self):
        history = ChatHistory()
        log = CheckpointLog(history)
        snapshot = history.append([ChatMessage(content="hello")])

        checkpoint = log.create_checkpoint("Start of queue operation")

        assert checkpoint.label == "Start of queue operation"
        assert checkpoint.snapshot is snapshot
        assert log.latest() is checkpoint
        assert log.list_checkpoints() == [checkpoint]

    def test_empty_log(self):
        log = CheckpointLog(ChatHistory())
        assert log.latest() is None
        assert log.list_checkpoints() == []

    def test_persists_to_file(self, tmp_path):
        """Test the whole log is written as JSON after each checkpoint."""
        history = ChatHistory()
        checkpoint_file = tmp_path / "state" / "checkpoints.json"
        log = CheckpointLog(history, checkpoint_file=checkpoint_file)

        log.create_checkpoint("Start of queue operation")
        history.append([ChatMessage(content="did A")])
        log.create_checkpoint("End of queue operation: A")

        data = json.loads(checkpoint_file.read_text())
        assert [entry["label"] for entry in data] == [
            "Start of queue operation",
            "End of queue operation: A",
        ]
        assert data[0]["snapshot"] is None
        assert data[1]["snapshot"]["messages"] == [{"role": "user", "content": "did A"}]
