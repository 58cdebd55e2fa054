# rotrain/api/v1/endpoints/simulation.py
from __future__ import annotations

from fastapi import APIRouter
from loguru import logger

from rotrain.api.v1.schemas import SimulationOutput, SystemConfig
from rotrain.services.simulation.engine import SimulationEngine

router = APIRouter()


@router.post("/run", response_model=SimulationOutput)
def run_simulation(config: SystemConfig) -> SimulationOutput:
    logger.info(
        f"🚀 [Simulation Request] stages={config.stages} elements={config.total_elements}"
    )

    # RoTrainError는 전역 핸들러에서 problem+json(422)으로 변환
    engine = SimulationEngine()
    return engine.run(config)


@router.get("/defaults", response_model=SystemConfig)
def get_defaults() -> SystemConfig:
    """설계 계산기 기본 입력값 (2 stage, 6/3 vessel, 7 element)."""
    return SystemConfig()
