"""
Execution engines for queued prompts.

AgentExecutionEngine runs prompts through the Claude Agent SDK;
EchoExecutionEngine is a deterministic offline stand-in for dry runs.
"""

import logging
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, List, Optional

from claude_agent_sdk import query, ClaudeAgentOptions

from work_queue.conversation import ChatHistory
from work_queue.models import (
    ChatMessage, ExecutionContext, ExecutionResult, ExecutionStatus, MessageRole
)


logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """Raised when the engine reports a failed run."""


def render_prompt(history: List[ChatMessage], input: List[ChatMessage]) -> str:
    """
    Render conversation history plus new input as a single prompt.

    A lone user message with no history is passed through unchanged.
    """
    messages = list(history) + list(input)
    if len(messages) == 1 and messages[0].role == MessageRole.USER.value:
        return messages[0].content

    return "\n\n".join(f"{message.role}: {message.content}" for message in messages)


def _item_label(input: List[ChatMessage]) -> str:
    """Short label of a prompt for log lines."""
    text = input[-1].content if input else ""
    return text if len(text) <= 40 else text[:37] + "..."


class AgentExecutionEngine:
    """
    Executes prompts using the Claude Agent SDK.

    The prompt runs on top of the active conversation; on success the
    input and the reply are appended to the conversation.
    """

    def __init__(
        self,
        conversation: ChatHistory,
        project_root: Optional[Path] = None,
        permission_mode: str = "bypassPermissions"
    ):
        """
        Initialize the engine.

        Args:
            conversation: Conversation the prompts run in
            project_root: Working directory for the agent (defaults to cwd)
            permission_mode: Agent permission mode
        """
        self.conversation = conversation
        self.project_root = Path(project_root).resolve() if project_root else Path.cwd()
        self.permission_mode = permission_mode

        self.mcp_servers: Dict[str, Any] = {}
        self.allowed_tools: List[str] = []

    def add_mcp_server(self, name: str, server: Any, tool_names: List[str]) -> None:
        """
        Make an in-process MCP server available to every run.

        Args:
            name: Server name, part of the mcp__<server>__<tool> tool names
            server: Config returned by create_sdk_mcp_server
            tool_names: Fully qualified tool names the agent may call
        """
        self.mcp_servers[name] = server
        self.allowed_tools.extend(t for t in tool_names if t not in self.allowed_tools)

    def _build_options(self, context: ExecutionContext) -> ClaudeAgentOptions:
        """Build SDK options for one run."""
        kwargs = {
            "cwd": str(self.project_root),
            "permission_mode": self.permission_mode,
            "setting_sources": ["project"],
        }
        if self.mcp_servers:
            kwargs["mcp_servers"] = dict(self.mcp_servers)
            kwargs["allowed_tools"] = list(self.allowed_tools)
        system_prompt = context.system_prompt or self.conversation.get_instructions()
        if system_prompt:
            kwargs["system_prompt"] = system_prompt
        if context.model and context.model != "auto":
            kwargs["model"] = context.model
        return ClaudeAgentOptions(**kwargs)

    async def execute(self, input: List[ChatMessage], context: ExecutionContext) -> ExecutionResult:
        """
        Run a prompt and wait for the agent's final result.

        Args:
            input: Prompt messages
            context: System prompt and model for this run

        Returns:
            ExecutionResult with the reply

        Raises:
            ExecutionError: If the agent reports an error result
        """
        label = _item_label(input)
        prompt = render_prompt(self.conversation.messages(), input)
        options = self._build_options(context)

        start_time = datetime.now()
        result = ExecutionResult(
            item_name=label,
            status=ExecutionStatus.FAILED,
            started_at=start_time.isoformat(),
        )

        logger.info(f"[{label}] Execution started")

        full_output = []
        async for message in query(prompt=prompt, options=options):
            if result.status == ExecutionStatus.COMPLETED:
                continue

            if hasattr(message, 'subtype'):
                if message.subtype == 'success':
                    result.status = ExecutionStatus.COMPLETED
                    result.output = message.result or "\n".join(full_output)
                    if getattr(message, 'total_cost_usd', None):
                        result.cost_usd = message.total_cost_usd
                elif str(message.subtype).startswith('error'):
                    error = getattr(message, 'result', None) or f"Agent returned {message.subtype}"
                    logger.error(f"[{label}] Execution failed: {error}")
                    raise ExecutionError(error)
            elif hasattr(message, 'content'):
                for block in message.content:
                    if hasattr(block, 'text'):
                        full_output.append(block.text)

        if result.status != ExecutionStatus.COMPLETED:
            raise ExecutionError("Agent stream ended without a result")

        result.completed_at = datetime.now().isoformat()
        result.duration_seconds = (datetime.now() - start_time).total_seconds()

        self.conversation.append(
            list(input) + [ChatMessage(role=MessageRole.ASSISTANT, content=result.output)]
        )

        logger.info(f"[{label}] Execution completed in {result.duration_seconds:.1f}s")
        return result


class EchoExecutionEngine:
    """
    Offline engine that replies with the last user message.

    Keeps the same conversation bookkeeping as the agent engine.
    """

    def __init__(self, conversation: ChatHistory):
        self.conversation = conversation

    async def execute(self, input: List[ChatMessage], context: ExecutionContext) -> ExecutionResult:
        started_at = datetime.now().isoformat()
        user_messages = [m for m in input if m.role == MessageRole.USER.value]
        output = user_messages[-1].content if user_messages else ""

        self.conversation.append(
            list(input) + [ChatMessage(role=MessageRole.ASSISTANT, content=output)]
        )

        return ExecutionResult(
            item_name=_item_label(input),
            status=ExecutionStatus.COMPLETED,
            started_at=started_at,
            completed_at=datetime.now().isoformat(),
            output=output,
        )


ENGINES = ("claude", "echo")


def create_engine(
    name: str,
    conversation: ChatHistory,
    project_root: Optional[Path] = None,
    permission_mode: str = "bypassPermissions"
):
    """
    Create an execution engine by name.

    Args:
        name: "claude" or "echo"
        conversation: Conversation the engine runs prompts in
        project_root: Working directory for the agent
        permission_mode: Agent permission mode

    Returns:
        Configured engine

    Raises:
        ValueError: If the engine name is unknown
    """
    if name == "claude":
        return AgentExecutionEngine(conversation, project_root=project_root, permission_mode=permission_mode)
    if name == "echo":
        return EchoExecutionEngine(conversation)
    raise ValueError(f"Unknown engine: {name} (expected one of {', '.join(ENGINES)})")
