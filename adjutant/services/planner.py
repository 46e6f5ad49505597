"""Task planner -- turns a blueprint's file tree into an ordered task queue.

Depth-first, pre-order, left to right: the order of files in the tree is the
order they will be generated in.  Folders produce no task (the scaffolder
has already created them on disk); they only extend the path.
"""

import logging
import uuid

from adjutant.models.agent import AgentTask, TaskStatus
from adjutant.models.blueprint import FileNode, ProjectBlueprint

logger = logging.getLogger(__name__)


def default_description(name: str) -> str:
    return f"Implement {name}"


def _new_task_id() -> str:
    return uuid.uuid4().hex[:12]


def plan_tasks(blueprint: ProjectBlueprint) -> list[AgentTask]:
    """Return one pending ``AgentTask`` per file node, in pre-order.

    ``file_path`` is built from the names along the way, each segment
    prefixed with ``/`` -- ``[app/ [page.tsx]]`` becomes ``/app/page.tsx``.
    """
    tasks: list[AgentTask] = []

    def _walk(nodes: list[FileNode], current_path: str) -> None:
        for node in nodes:
            node_path = f"{current_path}/{node.name}"
            if node.is_folder:
                _walk(node.children or [], node_path)
                continue
            tasks.append(AgentTask(
                id=_new_task_id(),
                file_path=node_path,
                description=node.description or default_description(node.name),
                status=TaskStatus.pending,
            ))

    _walk(blueprint.folder_structure, "")
    logger.info(
        "Planned %d task(s) for project=%s", len(tasks), blueprint.meta.name,
    )
    return tasks
