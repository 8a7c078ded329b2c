"""Tests for work_queue models."""

import pytest
from pydantic import ValidationError

from work_queue.models import (
    ChatMessage, MessageRole, WorkItem, WorkflowPhase, WorkflowState,
    ExecutionStatus, ExecutionContext, ExecutionResult, Checkpoint,
    QueueSettings, QueueConfig,
)


class TestChatMessage:
    """Tests for ChatMessage model."""

    def test_defaults_to_user(self):
        """Test the default role is stored as its plain value."""
        message = ChatMessage(content="hello")
        assert message.role == MessageRole.USER
        assert type(message.role) is str
        assert f"{message.role}" == "user"

    def test_frozen(self):
        message = ChatMessage(role=MessageRole.ASSISTANT, content="hi")
        with pytest.raises(ValidationError):
            message.content = "changed"


class TestWorkItem:
    """Tests for WorkItem model."""

    def test_create_item(self):
        """Test creating a WorkItem keeps the snapshot reference."""
        snapshot = object()
        item = WorkItem(name="fix tests", input=[ChatMessage(content="fix tests")], snapshot_message=snapshot)

        assert item.name == "fix tests"
        assert item.input[0].content == "fix tests"
        assert item.snapshot_message is snapshot
        assert item.added_at

    def test_snapshot_optional(self):
        item = WorkItem(name="a")
        assert item.snapshot_message is None
        assert item.input == []

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            WorkItem(name=name)


class TestWorkflowState:
    """Tests for WorkflowState model."""

    def test_idle_by_default(self):
        state = WorkflowState()
        assert state.started is False
        assert state.current_item is None
        assert state.initial_message is None
        assert state.phase == WorkflowPhase.IDLE

    def test_running_phase(self):
        state = WorkflowState(started=True, current_item=WorkItem(name="a"))
        assert state.phase == WorkflowPhase.RUNNING


class TestExecutionModels:
    """Tests for execution context and result models."""

    def test_context_defaults(self):
        context = ExecutionContext()
        assert context.system_prompt is None
        assert context.model == "auto"

    def test_result_status_value(self):
        result = ExecutionResult(
            item_name="a",
            status=ExecutionStatus.FAILED,
            started_at="2026-01-01T10:00:00",
            error="boom",
        )
        assert result.status == "failed"
        assert result.cost_usd == 0.0
        assert result.output is None


class TestCheckpoint:
    """Tests for Checkpoint model."""

    def test_create_checkpoint(self):
        checkpoint = Checkpoint(label="Start of queue operation")
        assert checkpoint.label == "Start of queue operation"
        assert checkpoint.snapshot is None
        assert checkpoint.created_at


class TestQueueSettings:
    """Tests for QueueSettings model."""

    def test_defaults(self):
        """Test default settings."""
        settings = QueueSettings()
        assert settings.max_size is None
        assert settings.model == "auto"
        assert settings.system_prompt is None
        assert settings.permission_mode == "bypassPermissions"
        assert settings.checkpoint_file is None
        assert settings.watch_debounce_ms == 500
        assert settings.watch_patterns == ["task-*.md"]

    def test_max_size(self):
        assert QueueSettings(max_size=1).max_size == 1

    @pytest.mark.parametrize("max_size", [0, -1])
    def test_invalid_max_size(self, max_size):
        with pytest.raises(ValidationError):
            QueueSettings(max_size=max_size)


class TestQueueConfig:
    """Tests for QueueConfig model."""

    def test_defaults(self):
        config = QueueConfig()
        assert config.version == "1.0"
        assert config.project_workspace is None
        assert isinstance(config.settings, QueueSettings)

    def test_from_dict(self):
        config = QueueConfig(**{"project_workspace": "/tmp/project", "settings": {"max_size": 4}})
        assert config.project_workspace == "/tmp/project"
        assert config.settings.max_size == 4
