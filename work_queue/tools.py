"""
Agent-callable tool that adds a task to the work queue.
"""

import logging
from typing import Any, Dict

from claude_agent_sdk import SdkMcpTool, create_sdk_mcp_server, tool
from pydantic import BaseModel, Field, ValidationError

from work_queue.controller import WorkflowController
from work_queue.interfaces import ReportSink
from work_queue.models import ChatMessage, MessageRole


logger = logging.getLogger(__name__)


TOOL_NAME = "add_task_to_queue"
TOOL_DESCRIPTION = "Adds a task to the queue for later execution by the system."


class AddTaskParameters(BaseModel):
    """Arguments of the add_task_to_queue tool."""

    description: str = Field(
        ...,
        min_length=1,
        description="A short description of the task to be performed"
    )
    content: str = Field(
        ...,
        min_length=1,
        description=(
            "A natural language string, explaining the exact task to be performed, in great detail. "
            "This string will be used to prompt an AI agent as the next message in this conversation, "
            "so should be as detailed as possible, and should directly order the AI agent to execute "
            "the task, using the tools that are available to it."
        )
    )


def tool_definition() -> Dict[str, Any]:
    """Name, description and JSON schema for registering the tool with an agent."""
    return {
        "name": TOOL_NAME,
        "description": TOOL_DESCRIPTION,
        "input_schema": AddTaskParameters.model_json_schema(),
    }


def execute(arguments: Dict[str, Any], controller: WorkflowController, reporter: ReportSink) -> Dict[str, str]:
    """
    Add a task to the work queue.

    Args:
        arguments: Raw tool arguments (description, content)
        controller: Controller owning the queue
        reporter: Sink for user-facing lines

    Returns:
        Result with status ("queued" or "error") and a message
    """
    if not arguments.get("description"):
        reporter.report_error("Task description is required")
        return {"status": "error", "message": "Task description is required"}

    if not arguments.get("content"):
        reporter.report_error("Task content is required")
        return {"status": "error", "message": "Task content is required"}

    try:
        params = AddTaskParameters(**arguments)
    except ValidationError as e:
        logger.warning(f"Invalid {TOOL_NAME} arguments: {e}")
        return {"status": "error", "message": f"Invalid arguments: {e}"}

    if not controller.add(params.description, [ChatMessage(role=MessageRole.USER, content=params.content)]):
        return {"status": "error", "message": "Queue is full, task was not queued."}

    reporter.report_line(f"[Queue] Added task \"{params.description}\" to queue")
    return {"status": "queued", "message": "Task has been queued for later execution."}


SERVER_NAME = "work_queue"
ALLOWED_TOOL_NAME = f"mcp__{SERVER_NAME}__{TOOL_NAME}"


def build_tool(controller: WorkflowController, reporter: ReportSink) -> SdkMcpTool:
    """SDK tool bound to a controller, for use in an in-process MCP server."""

    @tool(TOOL_NAME, TOOL_DESCRIPTION, AddTaskParameters.model_json_schema())
    async def add_task_to_queue(args: Dict[str, Any]) -> Dict[str, Any]:
        result = execute(args, controller, reporter)
        response = {"content": [{"type": "text", "text": result["message"]}]}
        if result["status"] == "error":
            response["is_error"] = True
        return response

    return add_task_to_queue


def create_queue_server(controller: WorkflowController, reporter: ReportSink):
    """
    In-process MCP server exposing add_task_to_queue to the agent.

    Register it under SERVER_NAME and allow ALLOWED_TOOL_NAME.
    """
    return create_sdk_mcp_server(
        name=SERVER_NAME,
        version="1.0.0",
        tools=[build_tool(controller, reporter)],
    )
