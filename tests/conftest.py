import pytest

from qwen_mcp.config import Settings

from .fakes import FakeSpawner


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, qwen_command="qwen", qwen_prompt_flag="-p")


@pytest.fixture()
def spawner() -> FakeSpawner:
    return FakeSpawner()
