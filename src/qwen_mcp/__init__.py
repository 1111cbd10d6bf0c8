"""Qwen MCP server: run Qwen CLI tasks in the background and poll their status."""

__version__ = "0.1.0"
