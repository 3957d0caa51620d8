"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, health, menus, packages, public, roles, upload, users, workflows

router = APIRouter()
router.include_router(auth.router, tags=["auth"])
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(roles.router, prefix="/roles", tags=["roles"])
router.include_router(menus.router, prefix="/menus", tags=["menus"])
router.include_router(packages.router, prefix="/packages", tags=["packages"])
router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
router.include_router(public.router, prefix="/public", tags=["public"])
router.include_router(upload.router, prefix="/upload", tags=["upload"])
