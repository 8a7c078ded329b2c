"""
Interactive queue session.

Wires the queue, conversation, checkpoints, engine and controller together
and routes chat lines to them, one line at a time.
"""

import logging
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Iterable, Optional, Union

from work_queue import tools
from work_queue.checkpoint import CheckpointLog
from work_queue.commands import QueueCommand
from work_queue.controller import WorkflowController
from work_queue.conversation import ChatHistory
from work_queue.executor import AgentExecutionEngine, create_engine
from work_queue.models import ChatMessage, ExecutionContext, MessageRole, QueueConfig
from work_queue.queue_store import WorkQueue
from work_queue.reporter import ConsoleReporter
from work_queue.watcher import PromptDirectoryWatcher


logger = logging.getLogger(__name__)


EXIT_COMMANDS = ("/quit", "/exit")


def session_help() -> list:
    return [
        "Type a message to chat, or use one of:",
        "  /queue <command>  - Manage the work queue (/queue for details)",
        "  /checkpoints      - List checkpoints created so far",
        "  /help             - Show this help",
        "  /quit             - Leave the session",
    ]


async def _iterate(lines: Iterable[str]) -> AsyncIterator[str]:
    for line in lines:
        yield line


class QueueSession:
    """
    One chat session driving a single workflow controller.

    Lines are handled strictly one after another on the caller's thread.
    """

    def __init__(
        self,
        config: QueueConfig,
        engine_name: str = "claude",
        reporter: Optional[ConsoleReporter] = None,
        watch_dir: Optional[Path] = None
    ):
        """
        Initialize the session.

        Args:
            config: Queue configuration
            engine_name: Execution engine ("claude" or "echo")
            reporter: Output sink (defaults to the console)
            watch_dir: Directory whose new prompt files are queued automatically
        """
        settings = config.settings
        self.config = config
        self.reporter = reporter or ConsoleReporter()

        self.conversation = ChatHistory(instructions=settings.system_prompt)
        self.checkpoints = CheckpointLog(
            self.conversation,
            checkpoint_file=Path(settings.checkpoint_file).expanduser() if settings.checkpoint_file else None,
        )
        self.queue = WorkQueue(max_size=settings.max_size)
        self.engine = create_engine(
            engine_name,
            self.conversation,
            project_root=Path(config.project_workspace) if config.project_workspace else None,
            permission_mode=settings.permission_mode,
        )
        self.controller = WorkflowController(
            queue=self.queue,
            checkpoints=self.checkpoints,
            conversation=self.conversation,
            engine=self.engine,
            reporter=self.reporter,
            system_prompt=settings.system_prompt,
            model=settings.model,
        )
        self.command = QueueCommand(self.controller, self.reporter, patterns=settings.watch_patterns)

        # Let the agent queue follow-up tasks into this session's queue
        if isinstance(self.engine, AgentExecutionEngine):
            self.engine.add_mcp_server(
                tools.SERVER_NAME,
                tools.create_queue_server(self.controller, self.reporter),
                [tools.ALLOWED_TOOL_NAME],
            )

        self.watcher: Optional[PromptDirectoryWatcher] = None
        if watch_dir is not None:
            self.watcher = PromptDirectoryWatcher(
                watch_dir,
                debounce_ms=settings.watch_debounce_ms,
                patterns=settings.watch_patterns,
            )

    def open(self) -> None:
        """Start background watching, if configured."""
        if self.watcher is not None:
            self.watcher.start()

    def close(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()

    def collect_watched_files(self) -> int:
        """Queue prompt files the watcher reported since the last call."""
        if self.watcher is None:
            return 0

        paths = self.watcher.drain()
        if not paths:
            return 0

        added, rejected = self.command.enqueue_files(paths)
        for path in rejected:
            # A later create or modify event for the file may queue it again
            self.watcher.forget(path)

        if added:
            self.reporter.report_line(
                f"Queued {added} new prompt file(s). Queue length: {self.queue.size()}"
            )
        return added

    async def handle_line(self, line: str) -> bool:
        """
        Handle one input line.

        Errors raised by a command are reported and do not end the session.

        Returns:
            False when the session should end, True otherwise
        """
        self.collect_watched_files()

        text = line.strip()
        if not text:
            return True

        if text in EXIT_COMMANDS:
            return False

        try:
            await self._dispatch(text)
        except Exception as e:
            logger.error(f"Command failed: {text.split()[0]}: {type(e).__name__}: {e}")
            self.reporter.report_error(f"Error: {e}")

        return True

    async def _dispatch(self, text: str) -> None:
        if text == "/queue" or text.startswith("/queue "):
            await self.command.execute(text[len("/queue"):])
        elif text == "/checkpoints":
            self._list_checkpoints()
        elif text == "/help":
            for help_line in session_help():
                self.reporter.report_line(help_line)
        elif text.startswith("/"):
            self.reporter.report_error(f"Unknown command: {text.split()[0]}")
            for help_line in session_help():
                self.reporter.report_line(help_line)
        else:
            await self._chat(text)

    async def run_lines(self, lines: Union[Iterable[str], AsyncIterable[str]]) -> None:
        """Handle lines until they run out or an exit command is seen."""
        if not hasattr(lines, "__aiter__"):
            lines = _iterate(lines)

        async for line in lines:
            if not await self.handle_line(line):
                break

    async def _chat(self, text: str) -> None:
        """Send a chat prompt in the active conversation."""
        context = ExecutionContext(
            system_prompt=self.config.settings.system_prompt,
            model=self.config.settings.model,
        )
        try:
            result = await self.engine.execute([ChatMessage(role=MessageRole.USER, content=text)], context)
        except Exception as e:
            logger.error(f"Chat prompt failed: {type(e).__name__}: {e}")
            self.reporter.report_error(f"Error running prompt: {e}")
            return

        if result.output:
            self.reporter.report_line(result.output)

    def _list_checkpoints(self) -> None:
        checkpoints = self.checkpoints.list_checkpoints()
        if not checkpoints:
            self.reporter.report_line("No checkpoints yet.")
            return

        self.reporter.report_line("Checkpoints:")
        for i, checkpoint in enumerate(checkpoints):
            self.reporter.report_line(f"[{i}] {checkpoint.created_at} {checkpoint.label}")
