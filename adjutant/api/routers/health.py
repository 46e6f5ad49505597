"""Health check router."""

from fastapi import APIRouter

from adjutant.config import VERSION
from adjutant.services import agent_service

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    return {"status": "ok", "sessions": len(agent_service.list_sessions())}


@router.get("/health/version")
async def health_version() -> dict:
    return {"version": VERSION}
