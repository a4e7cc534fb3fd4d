"""Admin API router for management endpoints."""

from fastapi import APIRouter

from prompthub.api.admin.health import router as health_router
from prompthub.api.admin.llm_configs import router as llm_configs_router
from prompthub.api.admin.runs import router as runs_router
from prompthub.api.admin.taxonomy import router as taxonomy_router
from prompthub.api.admin.users import router as users_router

admin_router = APIRouter(prefix="/admin/v1", tags=["Admin"])

admin_router.include_router(health_router, prefix="/health")
admin_router.include_router(users_router, prefix="/users")
admin_router.include_router(llm_configs_router, prefix="/llm-configs")
admin_router.include_router(taxonomy_router, prefix="/groups")
admin_router.include_router(runs_router, prefix="/runs")
