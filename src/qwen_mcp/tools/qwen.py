"""Background Qwen tasks: launch the CLI and report progress."""

import asyncio
import codecs
import logging
from typing import Any, Awaitable, Callable, Optional

from qwen_mcp.config import Settings, get_settings
from qwen_mcp.exceptions import TaskNotFoundError
from qwen_mcp.tools.process_manager import Task, TaskRegistry

logger = logging.getLogger(__name__)

# Bytes requested per read; chunks are appended as they arrive, not per line
READ_CHUNK_SIZE = 4096
ELLIPSIS = "..."

START_MESSAGE = "Task started in background. Use check_qwen_task_status to view progress."

Spawner = Callable[..., Awaitable[Any]]


def _preview(output: str, limit: int) -> str:
    """Cut output to `limit` characters, marking the cut with an ellipsis."""
    if len(output) <= limit:
        return output
    return output[:limit] + ELLIPSIS


def render_snapshot(task: Task, preview_chars: int = 200) -> dict[str, Any]:
    """Render the status view of a task.

    `full_output` only appears once the task is terminal, `error` only
    when something was written to it.
    """
    snapshot: dict[str, Any] = {
        "id": task.id,
        "status": task.status.value,
        "output_preview": _preview(task.output, preview_chars),
    }
    if task.is_terminal:
        snapshot["full_output"] = task.output
    if task.error:
        snapshot["error"] = task.error
    return snapshot


async def _pump(stream: Optional[asyncio.StreamReader], sink: Callable[[str], None]):
    """Feed decoded chunks from `stream` into `sink` until EOF."""
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        text = decoder.decode(chunk)
        if text:
            sink(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        sink(tail)


class QwenTaskRunner:
    """Starts Qwen CLI processes and tracks them in a TaskRegistry.

    Usage:
        runner = QwenTaskRunner()
        started = runner.start("refactor utils.py")   # inside a running loop
        runner.check_status(started["task_id"])
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[TaskRegistry] = None,
        spawn: Optional[Spawner] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else TaskRegistry()
        self._spawn = spawn or asyncio.create_subprocess_exec
        self._background_tasks: set[asyncio.Task] = set()

    def start(self, description: str) -> dict[str, str]:
        """Register a new task and launch its process in the background.

        Returns immediately; launch errors and exit codes are recorded on
        the task, never raised here.
        """
        task = self.registry.create()
        args = self.settings.command_args(description)

        monitor = asyncio.create_task(self._run(task, args), name=f"qwen-task-{task.id}")
        self._background_tasks.add(monitor)
        monitor.add_done_callback(self._on_monitor_done)

        logger.info(f"Task {task.id} started")
        return {
            "status": "started",
            "task_id": task.id,
            "message": START_MESSAGE,
        }

    def check_status(self, task_id: str) -> dict[str, Any]:
        """Snapshot of a task. Raises TaskNotFoundError for unknown IDs."""
        task = self.registry.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return render_snapshot(task, self.settings.output_preview_chars)

    async def drain(self):
        """Wait until every launched process has finished."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def _run(self, task: Task, args: list[str]):
        cwd = str(self.settings.qwen_workdir) if self.settings.qwen_workdir else None
        logger.debug(f"Task {task.id}: spawning {args[0]!r}")
        try:
            process = await self._spawn(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except (OSError, ValueError) as e:
            # ValueError: arguments the OS refuses, e.g. an embedded NUL byte
            logger.warning(f"Task {task.id}: failed to start process: {e}")
            task.mark_launch_failed(str(e))
            return

        try:
            # Both streams reach EOF before the exit code is recorded
            await asyncio.gather(
                _pump(process.stdout, task.append_output),
                _pump(process.stderr, task.append_error),
            )
            code = await process.wait()
        except Exception as e:
            logger.exception(f"Task {task.id}: monitoring failed")
            task.mark_monitor_failed(str(e))
            return
        task.mark_exited(code)

        if code == 0:
            logger.info(f"Task {task.id} completed")
        else:
            logger.warning(f"Task {task.id} failed with exit code {code}")

    def _on_monitor_done(self, monitor: asyncio.Task):
        self._background_tasks.discard(monitor)
        if monitor.cancelled():
            return
        exc = monitor.exception()
        if exc is not None:
            logger.error(f"Monitor {monitor.get_name()} crashed", exc_info=exc)
