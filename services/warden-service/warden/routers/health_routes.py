from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from ..settings import settings

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def health():
    return {"status": "ok", "service": "warden"}


@router.get("/readyz")
async def ready(request: Request):
    db = getattr(request.app.state, "mongo_db", None)
    if settings.STORE == "mongo":
        if db is None:
            raise HTTPException(503, "Store not initialised")
        await db.command("ping")
    return {"status": "ready", "store": settings.STORE}
