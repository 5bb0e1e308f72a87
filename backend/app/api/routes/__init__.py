from fastapi import APIRouter
from app.api.routes import convert, health

api_router = APIRouter()
api_router.include_router(convert.router, tags=["conversion"])
api_router.include_router(health.router, tags=["health"])


__all__ = ["api_router"]
