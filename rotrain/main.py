# rotrain/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Dict, Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

# Config & Logger
from rotrain.core.config import settings
from rotrain.core.errors import register_exception_handlers
from rotrain.core.logger import setup_logging

from rotrain.api.v1.api import api_router


# ==============================================================================
# 1. Lifespan (수명 주기 관리)
# ==============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    # [Startup]
    setup_logging()
    env = getattr(settings, "APP_ENV", "local")
    logger.info(f"🚀 RO Train Simulator Starting... (Env: {env})")

    yield

    # [Shutdown]
    logger.info("🛑 RO Train Simulator Shutting Down...")


# ==============================================================================
# 2. FastAPI App 초기화
# ==============================================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# ==============================================================================
# 3. Middleware (CORS) / Exception handlers
# ==============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o).rstrip("/") for o in settings.BACKEND_CORS_ORIGINS] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ==============================================================================
# 4. Router Registration
# ==============================================================================
app.include_router(api_router, prefix=settings.API_V1_STR)


# ==============================================================================
# 5. Root Endpoint
# ==============================================================================
@app.get("/", include_in_schema=False)
def root() -> Dict[str, Any]:
    """서버 상태 확인용 루트 엔드포인트"""
    return {
        "message": "Welcome to RO Train Simulator API",
        "docs_url": "/docs",
        "status": "running",
    }
