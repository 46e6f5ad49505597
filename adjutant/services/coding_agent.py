"""Build agent -- drains a project's task queue against a model backend.

One ``CodingAgent`` per scaffolded project.  The queue is planned once, at
construction, from the blueprint's file tree; after that the agent only
moves tasks forward:

    pending  --dequeue-->  current (in-progress)  --> completed_tasks
                                                   (completed | failed)

Execution is strictly sequential: one ``generate_code`` call and one file
write per task, each awaited before the next step.  A failing task is
recorded and the run continues.  ``stop()`` is cooperative -- it is observed
at the top of the loop, so an in-flight task always runs to completion.

Observers receive a deep copy of the state on subscribe and after every
change, synchronously and in registration order.
"""

import asyncio
import itertools
import logging
from pathlib import Path
from typing import Awaitable, Callable

from adjutant.backends.base import CodeGenerationParams, ModelBackend
from adjutant.errors import PersistenceError
from adjutant.models.agent import AgentState, AgentTask, TaskStatus
from adjutant.models.blueprint import ProjectBlueprint
from adjutant.services.file_service import WriteResult, write_file
from adjutant.services.planner import plan_tasks

logger = logging.getLogger(__name__)

Observer = Callable[[AgentState], None]
FileWriter = Callable[[Path, str], Awaitable[WriteResult]]


class CodingAgent:
    """Sequential, observable runner for one project's generation tasks."""

    def __init__(
        self,
        backend: ModelBackend,
        project_root: str | Path,
        blueprint: ProjectBlueprint,
        *,
        writer: FileWriter = write_file,
        step_delay: float = 0.0,
    ) -> None:
        self._backend = backend
        self.project_root = Path(project_root)
        self.blueprint = blueprint
        self._writer = writer
        self._step_delay = step_delay

        self._observers: dict[int, Observer] = {}
        self._observer_ids = itertools.count()
        self._loop_active = False

        self._state = AgentState(pending_tasks=plan_tasks(blueprint))

    # ── observation ───────────────────────────────────────────

    @property
    def state(self) -> AgentState:
        """A snapshot of the current state (never the live object)."""
        return self._state.snapshot()

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register *observer*; it immediately receives the current state.

        Returns a zero-arg callable that deregisters it (safe to call twice).
        """
        key = next(self._observer_ids)
        self._observers[key] = observer
        self._deliver(observer, self._state.snapshot())

        def unsubscribe() -> None:
            self._observers.pop(key, None)

        return unsubscribe

    def _deliver(self, observer: Observer, snapshot: AgentState) -> None:
        try:
            observer(snapshot)
        except Exception:
            logger.exception("Agent observer raised  project=%s", self.blueprint.meta.name)

    def _notify(self) -> None:
        # Copy per observer so one observer can't mutate what the next sees.
        for observer in list(self._observers.values()):
            self._deliver(observer, self._state.snapshot())

    # ── lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Run the queue until it is empty or ``stop()`` is called.

        A no-op while already running.  Calling it after ``stop()`` but
        before the in-flight task has finished re-arms the existing loop
        rather than starting a second one.
        """
        if self._state.is_running:
            logger.debug("start() ignored -- agent already running")
            return
        if self._loop_active:
            self._state.is_running = True
            self._notify()
            return

        self._loop_active = True
        self._state.is_running = True
        self._notify()
        logger.info(
            "Agent started  project=%s  pending=%d",
            self.blueprint.meta.name, len(self._state.pending_tasks),
        )
        try:
            while self._state.pending_tasks and self._state.is_running:
                task = self._state.pending_tasks.pop(0)
                await self._run_task(task)
        finally:
            interrupted = self._state.current_task
            if interrupted is not None:
                # Only reachable when the surrounding asyncio task is cancelled.
                interrupted.advance(TaskStatus.failed, error="Run cancelled")
                self._state.completed_tasks.append(interrupted)
                self._state.current_task = None
            self._loop_active = False
            self._state.is_running = False
            self._notify()

        failed = len(self._state.failed_tasks)
        logger.info(
            "Agent finished  project=%s  completed=%d  failed=%d  pending=%d",
            self.blueprint.meta.name,
            len(self._state.completed_tasks) - failed,
            failed,
            len(self._state.pending_tasks),
        )

    def stop(self) -> None:
        """Request a stop; takes effect before the next task is dequeued."""
        self._state.is_running = False
        self._notify()
        logger.info("Agent stop requested  project=%s", self.blueprint.meta.name)

    # ── execution ─────────────────────────────────────────────

    async def _run_task(self, task: AgentTask) -> None:
        task.advance(TaskStatus.in_progress)
        self._state.current_task = task
        self._notify()
        logger.info("Task started  file=%s", task.file_path)

        try:
            await self._execute(task)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("Task failed  file=%s  error=%s", task.file_path, message)
            task.advance(TaskStatus.failed, error=message)
        else:
            task.advance(TaskStatus.completed)
            logger.info("Task completed  file=%s", task.file_path)

        self._state.completed_tasks.append(task)
        self._state.current_task = None
        self._notify()

    async def _execute(self, task: AgentTask) -> None:
        target = self.resolve_path(task.file_path)
        params = CodeGenerationParams(
            file_path=task.file_path,
            description=task.description,
            blueprint=self.blueprint,
        )
        code = await self._backend.generate_code(params)

        result = await self._writer(target, code)
        if not result.success:
            raise PersistenceError(result.error or "Failed to write file to disk", path=str(target))

        if self._step_delay > 0:
            await asyncio.sleep(self._step_delay)

    def resolve_path(self, file_path: str) -> Path:
        """Join *file_path* onto the project root.

        Raises ``PersistenceError`` if the result would land outside it
        (e.g. a ``..`` segment in a model-supplied file name).
        """
        root = self.project_root.resolve()
        target = (root / file_path.lstrip("/")).resolve()
        if target == root or not target.is_relative_to(root):
            raise PersistenceError(
                f"Refusing to write outside the project root: {file_path}", path=str(target),
            )
        return target
