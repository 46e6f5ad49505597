"""Task and state models for the build agent.

``AgentTask.status`` only ever moves forward::

    pending -> in-progress -> completed
                           -> failed

``AgentState`` is the runner's observable state.  The runner owns the only
live instance; everybody else receives ``snapshot()`` copies.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"
    failed = "failed"


_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.pending: frozenset({TaskStatus.in_progress}),
    TaskStatus.in_progress: frozenset({TaskStatus.completed, TaskStatus.failed}),
    TaskStatus.completed: frozenset(),
    TaskStatus.failed: frozenset(),
}


class InvalidTransition(ValueError):
    """A task status change that would move backwards or skip a step."""

    def __init__(self, task_id: str, current: TaskStatus, requested: TaskStatus) -> None:
        self.task_id = task_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Task {task_id}: cannot move from '{current.value}' to '{requested.value}'"
        )


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class AgentTask(_CamelModel):
    """Generation of one file's contents."""

    id: str
    file_path: str  # project-relative, "/"-separated, leading "/"
    description: str
    status: TaskStatus = TaskStatus.pending
    error: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (TaskStatus.completed, TaskStatus.failed)

    def advance(self, status: TaskStatus, *, error: str | None = None) -> None:
        """Move to *status*, refusing any non-forward transition.

        ``error`` is recorded only for ``failed``.
        """
        if status not in _TRANSITIONS[self.status]:
            raise InvalidTransition(self.id, self.status, status)
        self.status = status
        if status is TaskStatus.failed:
            self.error = error or "Unknown error"


class AgentState(_CamelModel):
    """Observable state of one build agent."""

    is_running: bool = False
    current_task: Optional[AgentTask] = None
    completed_tasks: list[AgentTask] = Field(default_factory=list)
    pending_tasks: list[AgentTask] = Field(default_factory=list)

    def snapshot(self) -> AgentState:
        """Return a structurally independent copy for observers."""
        return self.model_copy(deep=True)

    def to_payload(self) -> dict:
        """JSON-safe dict with camelCase keys (WebSocket / HTTP payload)."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def failed_tasks(self) -> list[AgentTask]:
        return [t for t in self.completed_tasks if t.status is TaskStatus.failed]
