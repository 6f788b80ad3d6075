from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from http_server_demo.observability.metrics import ServerMetrics, get_server_metrics


router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def metrics(server_metrics: ServerMetrics = Depends(get_server_metrics)) -> Response:
    payload, content_type = server_metrics.render()
    return Response(content=payload, media_type=content_type)
