# rotrain/api/v1/endpoints/health.py
from __future__ import annotations

from fastapi import APIRouter

from rotrain.core.config import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=dict)
def health_simple():
    return {"status": "ok", "env": getattr(settings, "APP_ENV", "local")}
