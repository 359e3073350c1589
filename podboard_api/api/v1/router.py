from fastapi import APIRouter

from podboard_api.api.v1.endpoints import auth, boards, health, media, process

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["health"])
api_router.include_router(auth.router, prefix="", tags=["auth"])
api_router.include_router(process.router, prefix="", tags=["process"])
api_router.include_router(media.router, prefix="", tags=["timeline"])
api_router.include_router(boards.router, prefix="", tags=["boards"])
