# app/api/__init__.py
"""
Router principal de la API
"""
from fastapi import APIRouter, Depends
from app.core.config import get_settings
from app.core.dependencies import get_current_user

from . import auth, medicines, reminder_logs

settings = get_settings()

# Router principal de la API
api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    medicines.router,
    prefix="/medicines",
    tags=["medicines"],
    dependencies=[Depends(get_current_user)]
)

api_router.include_router(
    reminder_logs.router,
    prefix="/reminder-logs",
    tags=["reminder-logs"],
    dependencies=[Depends(get_current_user)]
)


@api_router.get("/health")
async def api_health():
    """Health check específico de la API"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }
