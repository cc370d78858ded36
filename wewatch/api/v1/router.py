"""API router aggregating all endpoints."""

from fastapi import APIRouter

from wewatch.api.v1 import auth, link_preview, movies, profile

api_router = APIRouter()


@api_router.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok", "message": "We Watch API is running"}


api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(movies.router, prefix="/movies", tags=["movies"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(link_preview.router, prefix="/link-preview", tags=["link-preview"])
