"""
Data models for the work queue.

Defines Pydantic models for work items, workflow state, execution results
and configuration.
"""

from enum import Enum
from datetime import datetime
from typing import Any, Optional, List
from pydantic import BaseModel, Field, field_validator, ConfigDict


class MessageRole(str, Enum):
    """Role of a chat message."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single role/content pair of a prompt or conversation."""

    role: MessageRole = Field(default=MessageRole.USER, validate_default=True, description="Author of the message")
    content: str = Field(..., description="Message text")

    model_config = ConfigDict(use_enum_values=True, frozen=True)


class WorkItem(BaseModel):
    """
    A deferred unit of work in the queue.

    Holds the prompt to execute later and a reference to the conversation
    state that was active when the item was enqueued.
    """

    name: str = Field(..., description="Human-readable label of the item")
    input: List[ChatMessage] = Field(default_factory=list, description="Prompt messages to execute")
    snapshot_message: Optional[Any] = Field(
        default=None,
        description="Conversation snapshot active when the item was enqueued"
    )
    added_at: str = Field(default_factory=lambda: datetime.now().isoformat(), description="When item was added")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank names."""
        if not v or not v.strip():
            raise ValueError("Work item name must not be empty")
        return v


class WorkflowPhase(str, Enum):
    """Run-level phase of the workflow controller."""
    IDLE = "idle"
    RUNNING = "running"


class WorkflowState(BaseModel):
    """
    State of the active workflow run.

    current_item is only ever set while started is True.
    """

    started: bool = False
    initial_message: Optional[Any] = None
    current_item: Optional[WorkItem] = None

    @property
    def phase(self) -> WorkflowPhase:
        return WorkflowPhase.RUNNING if self.started else WorkflowPhase.IDLE


class ExecutionStatus(str, Enum):
    """Outcome of executing a work item."""
    COMPLETED = "completed"
    FAILED = "failed"


class ExecutionContext(BaseModel):
    """Context options handed to the execution engine."""

    system_prompt: Optional[str] = None
    model: str = "auto"


class ExecutionResult(BaseModel):
    """
    Result of executing a work item.

    Captures the outcome of one prompt run through the execution engine.
    """

    item_name: str
    status: ExecutionStatus

    # Execution details
    started_at: str
    completed_at: Optional[str] = None
    duration_seconds: float = 0.0
    cost_usd: float = 0.0

    # Output
    output: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class Checkpoint(BaseModel):
    """A marker of conversation state at a workflow boundary."""

    label: str
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    snapshot: Optional[Any] = None


class QueueSettings(BaseModel):
    """Global queue settings."""

    # Admission
    max_size: Optional[int] = Field(default=None, description="Maximum queue length, None for unlimited")

    # Execution
    model: str = Field(default="auto", description="Model used for queued prompts")
    system_prompt: Optional[str] = Field(default=None, description="System prompt for queued prompts")
    permission_mode: str = Field(default="bypassPermissions", description="Agent permission mode")

    # Checkpoints
    checkpoint_file: Optional[str] = Field(default=None, description="JSON file the checkpoint log is written to")

    # Watchdog settings
    watch_debounce_ms: int = Field(default=500, description="Debounce delay in milliseconds for file events")
    watch_patterns: List[str] = Field(default_factory=lambda: ["task-*.md"], description="File patterns to watch")

    @field_validator('max_size')
    @classmethod
    def validate_max_size(cls, v: Optional[int]) -> Optional[int]:
        """Capacity must be positive when set."""
        if v is not None and v < 1:
            raise ValueError(f"max_size must be at least 1: {v}")
        return v


class QueueConfig(BaseModel):
    """Complete work queue configuration."""

    version: str = "1.0"
    settings: QueueSettings = Field(default_factory=QueueSettings)

    # Where the agent executes
    project_workspace: Optional[str] = Field(
        default=None,
        description="Path to project root (used as cwd for agent execution)"
    )

    # Metadata
    updated_at: str = Field(default_factory=lambda: datetime.now().isoformat())
