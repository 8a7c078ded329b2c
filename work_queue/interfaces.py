"""
Collaborator contracts consumed by the workflow controller.

The controller only talks to these capabilities; concrete implementations
live in conversation.py, checkpoint.py, executor.py and reporter.py.
"""

from typing import Any, List, Optional, Protocol

from work_queue.models import ChatMessage, ExecutionContext, ExecutionResult


class CheckpointFacility(Protocol):
    """Durably marks workflow boundaries."""

    def create_checkpoint(self, label: str) -> Any:
        ...


class ConversationStore(Protocol):
    """Holds the active conversation state."""

    def get_current_snapshot(self) -> Optional[Any]:
        ...

    def set_current_snapshot(self, snapshot: Optional[Any]) -> None:
        ...


class ExecutionEngine(Protocol):
    """Runs a prompt and returns its result."""

    async def execute(self, input: List[ChatMessage], context: ExecutionContext) -> ExecutionResult:
        ...


class ReportSink(Protocol):
    """One-way output of user-facing status and error lines."""

    def report_line(self, text: str) -> None:
        ...

    def report_error(self, text: str) -> None:
        ...
