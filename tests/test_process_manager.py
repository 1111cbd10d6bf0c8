from datetime import datetime

from qwen_mcp.tools.process_manager import Task, TaskRegistry, TaskStatus, generate_task_id


def test_new_task_is_running_and_empty():
    task = Task(id="abc")
    assert task.status == TaskStatus.RUNNING
    assert task.output == ""
    assert task.error == ""
    assert not task.is_terminal


def test_exit_zero_completes():
    task = Task(id="abc")
    task.mark_exited(0)
    assert task.status == TaskStatus.COMPLETED
    assert task.exit_code == 0
    assert task.error == ""


def test_nonzero_exit_fails_with_diagnostic():
    task = Task(id="abc")
    task.append_error("boom")
    task.mark_exited(2)
    assert task.status == TaskStatus.FAILED
    assert task.error == "boom\nProcess exited with code 2"


def test_launch_failure_fails_with_diagnostic():
    task = Task(id="abc")
    task.mark_launch_failed("No such file or directory")
    assert task.status == TaskStatus.FAILED
    assert "Failed to start process: No such file or directory" in task.error


def test_terminal_status_is_absorbing():
    """Only the first terminal event counts."""
    task = Task(id="abc")
    task.mark_exited(0)
    task.mark_exited(1)
    task.mark_launch_failed("late")
    assert task.status == TaskStatus.COMPLETED
    assert task.error == ""

    failed = Task(id="def")
    failed.mark_exited(1)
    failed.mark_exited(0)
    assert failed.status == TaskStatus.FAILED
    assert failed.error.count("Process exited") == 1


def test_output_accumulates_in_order():
    task = Task(id="abc")
    task.append_output("Hello, ")
    task.append_output("world")
    assert task.output == "Hello, world"


def test_registry_create_uses_injected_id_and_clock():
    ids = iter(["t1", "t2"])
    now = datetime(2025, 1, 1, 12, 0)
    registry = TaskRegistry(id_factory=lambda: next(ids), clock=lambda: now)

    first = registry.create()
    second = registry.create()

    assert (first.id, second.id) == ("t1", "t2")
    assert first.start_time == now
    assert registry.get("t1") is first
    assert "t2" in registry
    assert len(registry) == 2


def test_registry_get_unknown_returns_none():
    assert TaskRegistry().get("missing") is None


def test_registry_collision_overwrites():
    registry = TaskRegistry(id_factory=lambda: "same")
    registry.create()
    newer = registry.create()
    assert registry.get("same") is newer
    assert len(registry) == 1


def test_generated_ids_are_short_hex():
    task_id = generate_task_id()
    assert len(task_id) == 8
    int(task_id, 16)
    assert generate_task_id() != task_id


def test_monitor_failure_is_terminal():
    task = Task(id="abc")
    task.mark_monitor_failed("pipe lost")
    task.mark_exited(0)
    assert task.status == TaskStatus.FAILED
    assert task.error == "\nProcess monitoring failed: pipe lost"


def test_buffers_frozen_once_terminal():
    """Chunks arriving after the terminal transition are dropped."""
    task = Task(id="abc")
    task.append_output("before")
    task.mark_exited(1)
    error_at_exit = task.error

    task.append_output(" after")
    task.append_error("late warning")

    assert task.output == "before"
    assert task.error == error_at_exit
