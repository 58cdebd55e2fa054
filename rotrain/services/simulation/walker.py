# rotrain/services/simulation/walker.py
# Vessel / Stage walker
# - vessel 안의 엘리먼트는 직렬, stage 안의 vessel은 병렬 (동일 유입 조건)
# - 엘리먼트 position 카운터는 vessel / stage 경계에서 리셋하지 않는다
# - 모든 상태는 반환값으로만 전달 (fold)

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from rotrain.core.errors import SimulationError
from rotrain.schemas.simulation import (
    ElementResult,
    ElementState,
    StageSummary,
    SystemConfig,
)
from rotrain.services.simulation.modules.base import ElementModel


@dataclass(frozen=True)
class VesselOutcome:
    exit: ElementState
    results: Tuple[ElementResult, ...]


@dataclass(frozen=True)
class StageOutcome:
    exit: ElementState
    results: Tuple[ElementResult, ...]
    summary: StageSummary


def walk_vessel(
    inlet: ElementState,
    element_count: int,
    config: SystemConfig,
    model: ElementModel,
    *,
    stage: int,
    vessel: int,
) -> VesselOutcome:
    """엘리먼트를 직렬로 계산. element_count == 0 이면 유입 상태를 그대로 통과."""
    state = inlet
    results: List[ElementResult] = []
    for element in range(1, element_count + 1):
        try:
            result, state = model.step(
                state, config, stage=stage, vessel=vessel, element=element
            )
        except ArithmeticError as e:
            # overflow / zero division (극단적 상수 등)
            raise SimulationError(
                f"numeric failure: {e}", stage=stage, vessel=vessel, element=element
            ) from e
        results.append(result)
    return VesselOutcome(exit=state, results=tuple(results))


def walk_stage(
    inlet: ElementState,
    stage: int,
    config: SystemConfig,
    model: ElementModel,
) -> StageOutcome:
    """
    stage 1개 계산 (stage는 1-based).

    각 vessel은 (유입 유량 / vessel 수) 와 동일한 TDS / 압력을 받는다.
    stage 출구는 마지막 vessel 출구 유량 × vessel 수, 마지막 vessel 출구 TDS / 압력.
    """
    vessels = config.stage_vessels[stage - 1]
    row = config.vessel_elements[stage - 1]

    if vessels == 0:
        return StageOutcome(
            exit=inlet,
            results=(),
            summary=_summarize(stage, 0, 0, inlet, inlet, ()),
        )

    per_vessel_flow = inlet.flow_m3h / vessels
    position = inlet.position
    results: List[ElementResult] = []
    last_exit = inlet

    for vessel, element_count in enumerate(row, start=1):
        vessel_inlet = ElementState(
            flow_m3h=per_vessel_flow,
            tds_mgL=inlet.tds_mgL,
            pressure_psi=inlet.pressure_psi,
            position=position,
        )
        outcome = walk_vessel(
            vessel_inlet, element_count, config, model, stage=stage, vessel=vessel
        )
        results.extend(outcome.results)
        position = outcome.exit.position
        last_exit = outcome.exit

    stage_exit = ElementState(
        flow_m3h=last_exit.flow_m3h * vessels,
        tds_mgL=last_exit.tds_mgL,
        pressure_psi=last_exit.pressure_psi,
        position=position,
    )
    return StageOutcome(
        exit=stage_exit,
        results=tuple(results),
        summary=_summarize(stage, vessels, sum(row), inlet, stage_exit, results),
    )


def _summarize(
    stage: int,
    vessels: int,
    elements: int,
    inlet: ElementState,
    exit: ElementState,
    results,
) -> StageSummary:
    return StageSummary(
        stage=stage,
        vessels=vessels,
        elements=elements,
        inlet_flow_m3h=inlet.flow_m3h,
        inlet_tds_mgL=inlet.tds_mgL,
        inlet_pressure_psi=inlet.pressure_psi,
        exit_flow_m3h=exit.flow_m3h,
        exit_tds_mgL=exit.tds_mgL,
        exit_pressure_psi=exit.pressure_psi,
        permeate_flow_m3h=sum(r.permeate_flow_m3h for r in results),
    )
