"""MCP server exposing the Qwen task tools."""

import json
import logging
from typing import Annotated, Any, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from qwen_mcp.config import Settings, get_settings
from qwen_mcp.exceptions import TaskNotFoundError
from qwen_mcp.tools.qwen import QwenTaskRunner

logger = logging.getLogger(__name__)


def create_server(
    runner: Optional[QwenTaskRunner] = None,
    settings: Optional[Settings] = None,
) -> FastMCP:
    """Build the FastMCP server with both task tools registered."""
    settings = settings or (runner.settings if runner else get_settings())
    runner = runner or QwenTaskRunner(settings)

    mcp = FastMCP(settings.server_name, version=settings.server_version)

    async def start_new_qwen_task(
        user_task_description: Annotated[
            str, Field(description="The prompt or description of the task.")
        ],
    ) -> dict[str, Any]:
        return runner.start(user_task_description)

    async def check_qwen_task_status(
        task_id: Annotated[str, Field(description="The ID of the task to check.")],
    ) -> dict[str, Any]:
        try:
            return runner.check_status(task_id)
        except TaskNotFoundError as e:
            logger.debug(f"Status requested for unknown task {e.task_id!r}")
            raise ToolError(json.dumps({"error": e.message})) from e

    mcp.tool(
        start_new_qwen_task,
        name="start_new_qwen_task",
        description="Starts a new Qwen task asynchronously. Returns a Task ID.",
    )
    mcp.tool(
        check_qwen_task_status,
        name="check_qwen_task_status",
        description="Checks the status and gets the output of a running or completed Qwen task.",
    )
    return mcp
