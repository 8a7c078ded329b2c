"""Test fixtures for work-queue tests."""

import pytest
from unittest.mock import Mock, AsyncMock

from work_queue.checkpoint import CheckpointLog
from work_queue.controller import WorkflowController
from work_queue.conversation import ChatHistory
from work_queue.models import (
    ChatMessage, ExecutionResult, ExecutionStatus, MessageRole, WorkItem
)
from work_queue.queue_store import WorkQueue


class AsyncIteratorMock:
    """Helper class to create async iterator mocks."""

    def __init__(self, items):
        self.items = items
        self.index = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.index >= len(self.items):
            raise StopAsyncIteration
        result = self.items[self.index]
        self.index += 1
        return result


def _make_item(name: str, content: str = None, snapshot=None) -> WorkItem:
    """Build a work item with a single user message."""
    return WorkItem(
        name=name,
        input=[ChatMessage(role=MessageRole.USER, content=content or name)],
        snapshot_message=snapshot,
    )


@pytest.fixture
def make_item():
    """Factory for work items."""
    return _make_item


@pytest.fixture
def reporter():
    """Recording report sink."""
    sink = Mock()
    sink.lines = []
    sink.errors = []
    sink.report_line.side_effect = sink.lines.append
    sink.report_error.side_effect = sink.errors.append
    return sink


@pytest.fixture
def conversation():
    """Empty in-memory conversation."""
    return ChatHistory()


@pytest.fixture
def checkpoints(conversation):
    """In-memory checkpoint log."""
    return CheckpointLog(conversation)


@pytest.fixture
def engine():
    """Execution engine that always succeeds."""
    mock_engine = Mock()
    mock_engine.execute = AsyncMock(return_value=ExecutionResult(
        item_name="item",
        status=ExecutionStatus.COMPLETED,
        started_at="2026-01-01T10:00:00",
        completed_at="2026-01-01T10:00:05",
        duration_seconds=5.0,
        output="done",
    ))
    return mock_engine


@pytest.fixture
def queue():
    """Unlimited work queue."""
    return WorkQueue()


@pytest.fixture
def controller(queue, checkpoints, conversation, engine, reporter):
    """Controller wired to in-memory collaborators."""
    return WorkflowController(
        queue=queue,
        checkpoints=checkpoints,
        conversation=conversation,
        engine=engine,
        reporter=reporter,
        system_prompt="Be brief.",
        model="auto",
    )


@pytest.fixture
def stream():
    """Factory for mocked SDK message streams."""
    return AsyncIteratorMock


@pytest.fixture
def mock_query():
    """Create a mock Claude SDK query stream."""
    success_msg = Mock()
    success_msg.subtype = "success"
    success_msg.result = "Task completed successfully"
    success_msg.usage = {"total_tokens": 1000}
    success_msg.total_cost_usd = 0.05

    content_msg = Mock(spec=['content'])
    content_msg.content = [Mock(text="Processing...")]

    return AsyncIteratorMock([content_msg, success_msg])


@pytest.fixture
def prompt_dir(tmp_path):
    """Directory with two prompt documents and one unrelated file."""
    directory = tmp_path / "prompts"
    directory.mkdir()
    (directory / "task-20260101-100000-first.md").write_text("# Task: Fix the login bug\n\nDetails here.\n")
    (directory / "task-20260101-110000-second.md").write_text("Write release notes.\n")
    (directory / "notes.txt").write_text("not a prompt")
    return directory
