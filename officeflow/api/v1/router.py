"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from officeflow.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from officeflow.api.v1.endpoints import audit, health, tasks

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
