"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.folders import router as folders_router
from api.v1.routes.preferences import router as preferences_router
from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.realtime import router as realtime_router
from api.v1.routes.todos import router as todos_router

router = APIRouter()
router.include_router(todos_router)
router.include_router(folders_router)
router.include_router(preferences_router)
router.include_router(profiles_router)
router.include_router(realtime_router)
