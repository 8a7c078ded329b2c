"""
Work Queue - sequential prompt queue with a checkpointed workflow.

Queues prompts for later execution and steps through them one at a time,
running each in its own conversation context.

Workflow: start -> next -> run -> (next | skip | done) ... -> idle
- start  - snapshot the conversation and checkpoint
- next   - checkpoint the finished item, load the next one
- run    - execute the loaded item
- skip   - return the loaded item to the end of the queue
- done   - restore the conversation and end the run
"""

__version__ = "0.1.0"

from work_queue.models import (
    ChatMessage,
    MessageRole,
    WorkItem,
    WorkflowPhase,
    WorkflowState,
    ExecutionContext,
    ExecutionResult,
    ExecutionStatus,
    Checkpoint,
    QueueConfig,
    QueueSettings,
)

from work_queue.queue_store import WorkQueue
from work_queue.controller import WorkflowController
from work_queue.conversation import ChatHistory, ConversationSnapshot
from work_queue.checkpoint import CheckpointLog
from work_queue.config import ConfigManager, DEFAULT_CONFIG_FILE
from work_queue.executor import AgentExecutionEngine, EchoExecutionEngine, ExecutionError, create_engine
from work_queue.commands import QueueCommand
from work_queue.tools import create_queue_server
from work_queue.session import QueueSession

__all__ = [
    # Models
    "ChatMessage",
    "MessageRole",
    "WorkItem",
    "WorkflowPhase",
    "WorkflowState",
    "ExecutionContext",
    "ExecutionResult",
    "ExecutionStatus",
    "Checkpoint",
    "QueueConfig",
    "QueueSettings",
    # Core
    "WorkQueue",
    "WorkflowController",
    # Collaborators
    "ChatHistory",
    "ConversationSnapshot",
    "CheckpointLog",
    "AgentExecutionEngine",
    "EchoExecutionEngine",
    "ExecutionError",
    "create_engine",
    # Config
    "ConfigManager",
    "DEFAULT_CONFIG_FILE",
    # Commands
    "QueueCommand",
    "create_queue_server",
    "QueueSession",
]
