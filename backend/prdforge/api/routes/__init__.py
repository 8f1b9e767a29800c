from fastapi import APIRouter

from prdforge.api.routes import analytics, artifacts, exports, generation, health, shared, templates

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(generation.router, tags=["generation"])
api_router.include_router(artifacts.router, prefix="/artifacts", tags=["artifacts"])
api_router.include_router(exports.router, tags=["exports"])
api_router.include_router(shared.router, tags=["shared"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
