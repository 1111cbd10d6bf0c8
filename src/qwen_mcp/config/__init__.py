"""Configuration management."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Qwen CLI
    qwen_command: str = Field(default="qwen", description="External command launched for each task")
    qwen_prompt_flag: str = Field(
        default="-p",
        description="Flag passed before the task description (empty = pass description alone)",
    )
    qwen_workdir: Optional[Path] = Field(
        default=None,
        description="Working directory for spawned processes (default: server cwd)",
    )

    # Status rendering
    output_preview_chars: int = Field(
        default=200,
        ge=0,
        description="Characters of output shown in output_preview before the ellipsis",
    )

    # MCP server
    server_name: str = Field(default="qwen-mcp-server", description="MCP server name")
    server_version: str = Field(default="0.1.0", description="MCP server version")

    def command_args(self, description: str) -> list[str]:
        """Build the argument vector for one task."""
        args = [self.qwen_command]
        if self.qwen_prompt_flag:
            args.append(self.qwen_prompt_flag)
        args.append(description)
        return args


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
