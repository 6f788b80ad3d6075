from __future__ import annotations

from fastapi import APIRouter, Response


router = APIRouter(tags=["probes"])


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)


@router.get("/health")
async def health() -> Response:
    return Response(status_code=200)
