from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from http_server_demo.observability.metrics import ServerMetrics, get_server_metrics


HELLO_BODY = "Hello World!\n"

router = APIRouter(tags=["hello"])
logger = structlog.get_logger("hello")


@router.get("/hello", response_class=PlainTextResponse)
async def hello_world(metrics: ServerMetrics = Depends(get_server_metrics)) -> PlainTextResponse:
    metrics.hello_requests.inc()
    logger.info("hello_world")
    return PlainTextResponse(HELLO_BODY, status_code=200)
