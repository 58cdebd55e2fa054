from fastapi import APIRouter

from rotrain.api.v1.endpoints import (
    simulation,
    membranes,
    normalization,
    health,
)

api_router = APIRouter()

# ==============================================================================
# 1. Core Engine (핵심 시뮬레이션)
# ==============================================================================
api_router.include_router(simulation.router, prefix="/simulation", tags=["Simulation"])

# ==============================================================================
# 2. Data & Resources
# ==============================================================================
api_router.include_router(membranes.router, prefix="/membranes", tags=["Membranes"])

# ==============================================================================
# 3. Features
# ==============================================================================
api_router.include_router(
    normalization.router, prefix="/normalization", tags=["Normalization"]
)

# ==============================================================================
# 4. System (헬스 체크)
# ==============================================================================
api_router.include_router(health.router, tags=["Health"])
