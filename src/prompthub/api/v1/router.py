"""V1 API router for the public endpoints."""

from fastapi import APIRouter

from prompthub.api.v1.auth import router as auth_router
from prompthub.api.v1.prompts import router as prompts_router
from prompthub.api.v1.runs import router as runs_router
from prompthub.api.v1.taxonomy import router as taxonomy_router

v1_router = APIRouter(prefix="/v1")

v1_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
v1_router.include_router(taxonomy_router, tags=["Taxonomy"])
v1_router.include_router(prompts_router, prefix="/prompts", tags=["Prompts"])
v1_router.include_router(runs_router, tags=["Runs"])
