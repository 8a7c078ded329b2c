"""Tests for work_queue.session module."""

import pytest
from unittest.mock import Mock, patch

from work_queue import tools
from work_queue.executor import AgentExecutionEngine, EchoExecutionEngine
from work_queue.models import ExecutionContext, QueueConfig, QueueSettings
from work_queue.session import QueueSession


@pytest.fixture
def session(reporter):
    config = QueueConfig(settings=QueueSettings(max_size=3, system_prompt="Be brief."))
    return QueueSession(config, engine_name="echo", reporter=reporter)


class TestQueueSession:
    """Tests for line handling in QueueSession."""

    def test_wiring(self, session):
        assert isinstance(session.engine, EchoExecutionEngine)
        assert session.queue.max_size == 3
        assert session.controller.queue is session.queue
        assert session.controller.system_prompt == "Be brief."
        assert session.watcher is None

    @pytest.mark.asyncio
    async def test_chat_line_runs_engine(self, session, reporter):
        """Test plain text is sent to the engine in the current conversation."""
        assert await session.handle_line("hello there") is True
        assert reporter.lines[-1] == "hello there"
        assert [m.content for m in session.conversation.messages()] == ["hello there", "hello there"]

    @pytest.mark.asyncio
    async def test_exit(self, session):
        assert await session.handle_line("/quit") is False
        assert await session.handle_line("/exit") is False
        assert await session.handle_line("   ") is True

    @pytest.mark.asyncio
    async def test_unknown_slash_command(self, session, reporter):
        await session.handle_line("/frobnicate now")
        assert reporter.errors == ["Unknown command: /frobnicate"]

    @pytest.mark.asyncio
    async def test_queue_run_isolates_items(self, session, reporter):
        """Test each queued item runs in its own context and the chat is restored."""
        await session.run_lines([
            "first chat message",
            "/queue add task one",
            "/queue add task two",
            "/queue start",
            "/queue next",
            "/queue run",
            "/queue next",
            "/queue run",
            "/queue next",
            "/checkpoints",
        ])

        # Restored to the conversation that existed when the run started
        assert [m.content for m in session.conversation.messages()] == [
            "first chat message", "first chat message"
        ]
        assert not session.controller.started
        assert reporter.lines[-4] == "Checkpoints:"
        assert reporter.lines[-1].endswith("End of queue operation: task two")
        labels = [c.label for c in session.checkpoints.list_checkpoints()]
        assert labels == [
            "Start of queue operation",
            "End of queue operation: task one",
            "End of queue operation: task two",
        ]
        # Item two ran on top of the snapshot captured when it was added
        end_of_two = session.checkpoints.list_checkpoints()[2].snapshot
        assert [m.content for m in end_of_two.messages] == [
            "first chat message", "first chat message", "task two", "task two"
        ]

    @pytest.mark.asyncio
    async def test_run_lines_stops_at_exit(self, session):
        await session.run_lines(["/queue add a", "/quit", "/queue add b"])
        assert session.queue.size() == 1

    @pytest.mark.asyncio
    async def test_watched_files_are_queued(self, session, reporter, prompt_dir):
        """Test files reported by the watcher are queued before the next line."""
        session.watcher = Mock()
        session.watcher.drain.return_value = sorted(prompt_dir.glob("task-*.md"))

        await session.handle_line("/queue list")

        assert session.queue.size() == 2
        assert "Queued 2 new prompt file(s). Queue length: 2" in reporter.lines
        assert reporter.lines[-1] == "[1] task-20260101-110000-second"

    @pytest.mark.asyncio
    async def test_watched_files_rejected_when_full_are_forgotten(self, session, reporter, tmp_path):
        """Test files that do not fit are reported and can be picked up again later."""
        paths = []
        for name in ("a", "b", "c", "d"):
            path = tmp_path / f"task-{name}.md"
            path.write_text(f"do {name}")
            paths.append(path)
        session.watcher = Mock()
        session.watcher.drain.return_value = paths

        await session.handle_line("")

        assert session.queue.size() == 3
        assert len(reporter.errors) == 1
        session.watcher.forget.assert_called_once_with(paths[3])

    @pytest.mark.asyncio
    async def test_checkpoint_failure_keeps_session_alive(self, session, reporter):
        """Test a failing command is reported and later lines still run."""
        with patch.object(session.checkpoints, "create_checkpoint", side_effect=OSError("disk full")):
            await session.run_lines([
                "/queue add a",
                "/queue add b",
                "/queue start",
                "/queue list",
            ])

        assert reporter.errors == ["Error: disk full"]
        assert reporter.lines[-3:] == ["Queue contents:", "[0] a", "[1] b"]
        assert session.controller.started is False

        # The run can be started once checkpoints work again
        await session.handle_line("/queue start")
        assert session.controller.started is True

    @pytest.mark.asyncio
    async def test_run_lines_accepts_async_source(self, session):
        async def lines():
            yield "/queue add a"
            yield "/queue add b"

        await session.run_lines(lines())

        assert session.queue.size() == 2


class TestAgentSessionWiring:
    """Tests for wiring the agent engine."""

    def test_queue_tool_registered(self, reporter):
        """Test the agent engine can call add_task_to_queue on this session's queue."""
        session = QueueSession(QueueConfig(), engine_name="claude", reporter=reporter)

        assert isinstance(session.engine, AgentExecutionEngine)
        assert session.engine.mcp_servers[tools.SERVER_NAME]["type"] == "sdk"
        assert session.engine.allowed_tools == [tools.ALLOWED_TOOL_NAME]

        options = session.engine._build_options(ExecutionContext())
        assert tools.SERVER_NAME in options.mcp_servers
        assert options.allowed_tools == [tools.ALLOWED_TOOL_NAME]
