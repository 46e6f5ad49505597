"""Projects router -- scaffold a blueprint and write single files."""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from adjutant.errors import PersistenceError, ValidationError
from adjutant.models.blueprint import ProjectBlueprint
from adjutant.services import file_service, scaffold_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScaffoldRequest(_CamelRequest):
    # Optional so a missing field is a 400 from the service, not a 422.
    target_path: Optional[str] = None
    blueprint: Optional[ProjectBlueprint] = None


class WriteFileRequest(_CamelRequest):
    file_path: Optional[str] = None
    content: Optional[str] = None


@router.post("/scaffold")
async def scaffold(body: ScaffoldRequest) -> dict:
    """Create ``<targetPath>/<meta.name>`` with the blueprint's tree."""
    result = await scaffold_service.scaffold_project(body.target_path, body.blueprint)
    if not result.success:
        if result.validation_failed:
            raise ValidationError(result.error or "Bad request")
        raise PersistenceError(result.error or "Failed to scaffold project", path=body.target_path or "")
    return {"success": True, "projectPath": result.project_path}


@router.post("/agent/file")
async def write_file(body: WriteFileRequest) -> dict:
    """Write one file (absolute path), creating parent directories."""
    result = await file_service.write_file(body.file_path, body.content)
    if not result.success:
        if result.validation_failed:
            raise ValidationError(result.error or "Bad request")
        raise PersistenceError(result.error or "Failed to write file", path=body.file_path or "")
    return {"success": True}
