from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health(request: Request):
    settings = request.app.state.settings
    client = request.app.state.rate_client
    return {
        "status": "ok",
        "version": settings.version,
        "rate_provider": client.provider.name,
        "cache": client.cache.snapshot(),
    }
