"""Task tools for the Qwen MCP server."""

from qwen_mcp.tools.process_manager import Task, TaskRegistry, TaskStatus
from qwen_mcp.tools.qwen import QwenTaskRunner, render_snapshot

__all__ = ["QwenTaskRunner", "Task", "TaskRegistry", "TaskStatus", "render_snapshot"]
