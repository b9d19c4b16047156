"""API v1 routes."""

from fastapi import APIRouter

from authhub.api.v1 import auth, health, keys, rbac, services, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(services.router, prefix="/services", tags=["services"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(rbac.router, prefix="/rbac", tags=["rbac"])
router.include_router(keys.router, prefix="/keys", tags=["keys"])
