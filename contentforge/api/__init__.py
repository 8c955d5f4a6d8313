"""API router for v1 endpoints."""

from fastapi import APIRouter

from contentforge.api import content, profiles, research

router = APIRouter()

router.include_router(research.router, tags=["research"])

router.include_router(content.router, tags=["content"])

router.include_router(profiles.router, tags=["profiles"])
