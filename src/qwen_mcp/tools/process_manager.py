"""Task registry for tracking background Qwen processes."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Task:
    """One invocation of the external command.

    Only the handlers bound to the task's own process mutate it, and the
    first terminal transition wins: later exit or launch events are ignored.
    """
    id: str
    status: TaskStatus = TaskStatus.RUNNING
    output: str = ""
    error: str = ""
    start_time: datetime = field(default_factory=datetime.now)
    exit_code: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != TaskStatus.RUNNING

    def append_output(self, text: str):
        if self.is_terminal:
            logger.debug(f"Task {self.id}: dropping {len(text)} chars of output, already {self.status.value}")
            return
        self.output += text

    def append_error(self, text: str):
        if self.is_terminal:
            logger.debug(f"Task {self.id}: dropping {len(text)} chars of stderr, already {self.status.value}")
            return
        self.error += text

    def mark_exited(self, code: int):
        """Record process termination with the given exit code."""
        if self.is_terminal:
            logger.debug(f"Task {self.id}: ignoring exit code {code}, already {self.status.value}")
            return
        self.exit_code = code
        if code == 0:
            self.status = TaskStatus.COMPLETED
        else:
            self._fail(f"Process exited with code {code}")

    def mark_launch_failed(self, message: str):
        """Record that the process could not be started."""
        if self.is_terminal:
            logger.debug(f"Task {self.id}: ignoring launch failure, already {self.status.value}")
            return
        self._fail(f"Failed to start process: {message}")

    def mark_monitor_failed(self, message: str):
        """Record that watching the process broke before an exit code arrived."""
        if self.is_terminal:
            logger.debug(f"Task {self.id}: ignoring monitor failure, already {self.status.value}")
            return
        self._fail(f"Process monitoring failed: {message}")

    def _fail(self, diagnostic: str):
        self.status = TaskStatus.FAILED
        self.error += f"\n{diagnostic}"


def generate_task_id() -> str:
    """Short random task ID (first 8 hex chars of a UUID4)."""
    return uuid.uuid4().hex[:8]


class TaskRegistry:
    """In-memory mapping from task ID to Task.

    Records are never evicted. IDs are not checked for collisions; a
    colliding put() replaces the earlier record.
    """

    def __init__(
        self,
        id_factory: Callable[[], str] = generate_task_id,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._tasks: dict[str, Task] = {}
        self._id_factory = id_factory
        self._clock = clock

    def create(self) -> Task:
        """Create and register a new running task."""
        task = Task(id=self._id_factory(), start_time=self._clock())
        self.put(task.id, task)
        return task

    def put(self, task_id: str, task: Task):
        self._tasks[task_id] = task

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)
