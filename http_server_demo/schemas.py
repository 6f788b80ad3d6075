from __future__ import annotations

from pydantic import BaseModel


class SetKeyRequest(BaseModel):
    key: str
    value: str


class GetKeyResponse(BaseModel):
    key: str
    value: str
