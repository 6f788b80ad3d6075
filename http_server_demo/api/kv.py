from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from http_server_demo.schemas import GetKeyResponse, SetKeyRequest
from http_server_demo.store import get_store


router = APIRouter(prefix="/redis", tags=["redis"])
logger = structlog.get_logger("redis")

_JSON_WHITESPACE = " \t\n\r"


def decode_set_request(body: bytes) -> SetKeyRequest:
    """Decode the first JSON value in ``body``; anything after it is ignored."""

    text = body.decode("utf-8").lstrip(_JSON_WHITESPACE)
    obj, _ = json.JSONDecoder().raw_decode(text)
    return SetKeyRequest.model_validate(obj)


@router.post("/set")
async def set_key(request: Request, store: Redis = Depends(get_store)) -> Response:
    # Decoded by hand so a bad body maps to 400 instead of FastAPI's 422.
    body = await request.body()
    try:
        payload = decode_set_request(body)
    except (ValueError, ValidationError) as exc:
        logger.error("failed_to_decode_request_body", error=str(exc))
        raise HTTPException(status_code=400, detail="invalid request body") from exc

    try:
        await store.set(payload.key, payload.value)
    except RedisError as exc:
        logger.error("failed_to_set_key", key=payload.key, error=str(exc))
        raise HTTPException(status_code=500, detail="internal error") from exc

    logger.info("key_added", key=payload.key)
    return Response(status_code=200)


@router.get("/get/{key}", response_model=GetKeyResponse)
async def get_key(key: str, store: Redis = Depends(get_store)) -> GetKeyResponse:
    try:
        value = await store.get(key)
    except RedisError as exc:
        logger.error("failed_to_get_key", key=key, error=str(exc))
        raise HTTPException(status_code=500, detail="internal error") from exc

    if value is None:
        logger.error("failed_to_get_key", key=key, error="key not found")
        raise HTTPException(status_code=404, detail="key not found")

    logger.info("key_retrieved", key=key)
    return GetKeyResponse(key=key, value=value)
