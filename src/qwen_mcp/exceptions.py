"""Exceptions raised by qwen_mcp."""


class QwenMCPError(Exception):
    """Base class for qwen_mcp errors."""


class TaskNotFoundError(QwenMCPError):
    """No task is registered under the requested ID."""

    message = "Task ID not found."

    def __init__(self, task_id: str):
        super().__init__(self.message)
        self.task_id = task_id
