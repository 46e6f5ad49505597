"""Scaffolding -- materialize a blueprint's tree on disk.

The project root is ``<target_path>/<blueprint.meta.name>``.  Folders become
directories, files become placeholder stubs (later overwritten by the build
agent), and the full blueprint is written to ``adjutant.json`` at the root
so a project can be reopened without regenerating it.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from adjutant.errors import NotFoundError, ParseError
from adjutant.models.blueprint import FileNode, ProjectBlueprint

logger = logging.getLogger(__name__)

BLUEPRINT_SIDECAR = "adjutant.json"


@dataclass(frozen=True)
class ScaffoldResult:
    success: bool
    project_path: str | None = None
    error: str | None = None
    validation_failed: bool = False


def placeholder_content(node: FileNode) -> str:
    if node.description:
        return f"// {node.description}\n// TODO: AI Implementation pending"
    return "// TODO: Implementation pending"


def _child(parent: Path, name: str) -> Path | None:
    """Resolve *name* under *parent*; ``None`` if it does not descend into it."""
    child = (parent / name).resolve()
    if child == parent or not child.is_relative_to(parent):
        return None
    return child


def _find_escape(parent: Path, nodes: list[FileNode]) -> str | None:
    for node in nodes:
        current = _child(parent, node.name)
        if current is None:
            return node.name
        if node.is_folder:
            bad = _find_escape(current, node.children or [])
            if bad is not None:
                return f"{node.name}/{bad}"
    return None


def check_blueprint_paths(target_path: str, blueprint: ProjectBlueprint) -> str | None:
    """Return the first name that would land outside its parent, or ``None``.

    Covers ``meta.name`` against *target_path* and every tree node against
    its folder, so ``..``, absolute and empty names are all rejected.
    """
    target_root = Path(target_path).expanduser().resolve()
    project_root = _child(target_root, blueprint.meta.name)
    if project_root is None:
        return blueprint.meta.name
    return _find_escape(project_root, blueprint.folder_structure)


def _create_node(base: Path, node: FileNode) -> None:
    current = base / node.name
    if node.is_folder:
        current.mkdir(parents=True, exist_ok=True)
        for child in node.children or []:
            _create_node(current, child)
    else:
        current.parent.mkdir(parents=True, exist_ok=True)
        current.write_text(placeholder_content(node), encoding="utf-8")


def _scaffold(target_path: str, blueprint: ProjectBlueprint) -> Path:
    project_root = Path(target_path).expanduser().resolve() / blueprint.meta.name
    project_root.mkdir(parents=True, exist_ok=True)
    for node in blueprint.folder_structure:
        _create_node(project_root, node)
    (project_root / BLUEPRINT_SIDECAR).write_text(blueprint.to_json(), encoding="utf-8")
    return project_root


async def scaffold_project(target_path: str | None, blueprint: ProjectBlueprint | None) -> ScaffoldResult:
    """Create the project tree; never raises."""
    if not target_path or blueprint is None:
        return ScaffoldResult(False, error="Missing targetPath or blueprint", validation_failed=True)

    bad_name = check_blueprint_paths(target_path, blueprint)
    if bad_name is not None:
        logger.warning("Scaffold rejected  target=%s  name=%r", target_path, bad_name)
        return ScaffoldResult(
            False, error=f"Blueprint path escapes the project folder: {bad_name}", validation_failed=True,
        )

    try:
        project_root = await asyncio.to_thread(_scaffold, target_path, blueprint)
    except OSError as exc:
        logger.error("Scaffold failed  target=%s  error=%s", target_path, exc)
        return ScaffoldResult(False, error=f"Failed to scaffold project: {exc.strerror or exc}")

    files, folders = blueprint.count_nodes()
    logger.info(
        "Scaffolded %s  files=%d  folders=%d  path=%s",
        blueprint.meta.name, files, folders, project_root,
    )
    return ScaffoldResult(True, project_path=str(project_root))


def load_blueprint(project_path: str | Path) -> ProjectBlueprint:
    """Read the blueprint back from a scaffolded project's sidecar file."""
    sidecar = Path(project_path) / BLUEPRINT_SIDECAR
    if not sidecar.is_file():
        raise NotFoundError(f"No {BLUEPRINT_SIDECAR} found in {project_path}")
    raw = sidecar.read_text(encoding="utf-8")
    try:
        return ProjectBlueprint.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise ParseError(f"{sidecar} is not a valid blueprint", raw_output=raw) from exc
