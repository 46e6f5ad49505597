"""
blueprint.py -- the declarative description of a target project.

A blueprint is produced by a model backend (or loaded from a project's
``adjutant.json`` sidecar) and consumed, read-only, by the scaffolder and
the task planner.

JSON keys are camelCase (``folderStructure``, ``userStories``, ...) to stay
compatible with blueprints written by other tools; Python attributes are
snake_case.  Always serialize with ``by_alias=True`` -- ``to_json()`` does.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class TechStack(_CamelModel):
    framework: str
    language: str
    database: str
    styling: str
    deployment: str


class ProjectMeta(_CamelModel):
    name: str
    description: str
    tech_stack: TechStack


class Feature(_CamelModel):
    id: str
    name: str
    description: str
    priority: Literal["high", "medium", "low"]
    user_stories: list[str] = Field(default_factory=list)


class FileNode(_CamelModel):
    """One entry in the project tree.

    ``children`` is only meaningful for folders.  A node has no id: its
    identity is its position in the tree, so a child is always addressed
    as ``<parent path>/<child name>``.
    """

    name: str
    type: Literal["file", "folder"]
    children: Optional[list[FileNode]] = None
    description: Optional[str] = None  # purpose hint, doubles as the generation prompt

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"


class DataField(_CamelModel):
    name: str
    type: str
    required: bool
    description: Optional[str] = None


class DataEntity(_CamelModel):
    name: str
    description: str
    fields: list[DataField] = Field(default_factory=list)
    relationships: Optional[list[str]] = None  # e.g. "belongs to User"


class ComponentSpec(_CamelModel):
    name: str
    type: Literal["page", "component", "service", "hook"]
    description: str
    props: Optional[dict[str, str]] = None  # prop name -> type


class ProjectBlueprint(_CamelModel):
    """Top-level blueprint artifact."""

    meta: ProjectMeta
    features: list[Feature] = Field(default_factory=list)
    folder_structure: list[FileNode] = Field(default_factory=list)
    database_schema: list[DataEntity] = Field(default_factory=list)
    core_components: list[ComponentSpec] = Field(default_factory=list)

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialize with the camelCase wire keys."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    def count_nodes(self) -> tuple[int, int]:
        """Return ``(files, folders)`` across the whole tree."""
        files = folders = 0
        stack = list(self.folder_structure)
        while stack:
            node = stack.pop()
            if node.is_folder:
                folders += 1
                stack.extend(node.children or [])
            else:
                files += 1
        return files, folders


FileNode.model_rebuild()
