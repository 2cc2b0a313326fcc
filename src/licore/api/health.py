"""Health check endpoints."""

import os
import shutil

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_session

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """Basic health check."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(session: AsyncSession = Depends(get_session)) -> dict:
    """Check database connectivity, workspace root and linter availability."""
    checks: dict[str, str] = {}
    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = "connected"
    except Exception as e:
        checks["database"] = str(e)

    workspace_ok = os.access(settings.workspace_root, os.W_OK)
    checks["workspace"] = "writable" if workspace_ok else "not writable"

    linter_ok = shutil.which(settings.swiftlint_path) is not None
    checks["swiftlint"] = "found" if linter_ok else "missing"

    ready = checks["database"] == "connected" and workspace_ok and linter_ok
    return {"status": "ready" if ready else "not ready", **checks}
