# rotrain/services/simulation/engine.py
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from loguru import logger

from rotrain.core.config import settings
from rotrain.core.errors import ConfigValidationError, SimulationError
from rotrain.schemas.simulation import (
    ElementResult,
    ElementState,
    SimulationOutput,
    StageSummary,
    SystemConfig,
    SystemResult,
)
from rotrain.services.membranes import apply_membrane
from rotrain.services.simulation.modules.base import ElementModel
from rotrain.services.simulation.modules.ro import ROElement
from rotrain.services.simulation.utils import (
    all_finite,
    coerce_config,
    m3h_per_ft2_to_gfd,
)
from rotrain.services.simulation.walker import walk_stage
from rotrain.services.transport import (
    average_element_recovery,
    calculate_limiting_recovery,
    concentration_polarization,
    osmotic_pressure,
    system_permeate_flow,
    temperature_correction_factor,
)


class SimulationEngine:
    """
    Stage → Vessel → Element 순차 계산 후 시스템 지표를 집계한다.
    한 번의 run은 자체 카운터 / 결과 리스트만 사용하므로 re-entrant.
    """

    def __init__(
        self,
        model: Optional[ElementModel] = None,
        *,
        max_total_elements: Optional[int] = None,
    ) -> None:
        self.model = model or ROElement()
        self.max_total_elements = int(
            max_total_elements or settings.MAX_TOTAL_ELEMENTS
        )

    def run(self, config: Union[SystemConfig, Mapping[str, Any]]) -> SimulationOutput:
        # ---------------------------------------------------------
        # 0. Validate before traversal
        # ---------------------------------------------------------
        cfg = apply_membrane(coerce_config(config))
        self._check_size(cfg)

        logger.info(
            f"🚀 [Simulation Start] stages={cfg.stages} vessels={cfg.total_vessels} "
            f"elements={cfg.total_elements} feed={cfg.feed_flow_m3h} m3/h @ {cfg.feed_tds_mgL} mg/L"
        )

        # ---------------------------------------------------------
        # 1. Stage walk (concentrate of stage i feeds stage i+1)
        # ---------------------------------------------------------
        state = ElementState(
            flow_m3h=cfg.feed_flow_m3h,
            tds_mgL=cfg.feed_tds_mgL,
            pressure_psi=cfg.feed_pressure_psi,
            position=1,
        )
        element_results: List[ElementResult] = []
        summaries: List[StageSummary] = []

        for stage in range(1, cfg.stages + 1):
            outcome = walk_stage(state, stage, cfg, self.model)
            element_results.extend(outcome.results)
            summaries.append(outcome.summary)
            state = outcome.exit

        # ---------------------------------------------------------
        # 2. System Aggregates
        # ---------------------------------------------------------
        try:
            system = self._aggregate(cfg, element_results, summaries, state)
        except ArithmeticError as e:
            raise SimulationError(f"numeric failure in system aggregation: {e}") from e

        logger.info(
            f"✅ [Simulation Done] recovery={system.recovery_pct:.2f}% "
            f"permeate={system.total_permeate_flow_m3h:.3f} m3/h "
            f"elements={len(element_results)}"
        )

        return SimulationOutput(
            element_results=element_results,
            stages=summaries,
            system=system,
        )

    # =========================================================================
    # Helpers
    # =========================================================================
    def _check_size(self, cfg: SystemConfig) -> None:
        n = cfg.total_elements
        if n > self.max_total_elements:
            raise ConfigValidationError(
                f"Configuration has {n} elements, limit is {self.max_total_elements}",
                [{"loc": ["vessel_elements"], "msg": "too many elements"}],
            )

    def _aggregate(
        self,
        cfg: SystemConfig,
        results: List[ElementResult],
        summaries: List[StageSummary],
        exit_state: ElementState,
    ) -> SystemResult:
        k = cfg.constants
        n = cfg.total_elements
        T_C = cfg.temperature_C

        tcf = temperature_correction_factor(T_C, k.tcf_k_warm, k.tcf_k_cold)
        feed_op = osmotic_pressure(cfg.feed_tds_mgL, T_C)

        # lumped estimate over all elements (permeate-side osmotic pressure ignored)
        total_permeate = system_permeate_flow(
            n,
            k.system_water_permeability,
            cfg.element_area_ft2,
            tcf,
            cfg.fouling_factor,
            cfg.feed_pressure_psi,
            k.system_pressure_drop_psi,
            cfg.permeate_pressure_psi,
            feed_op,
            0.0,
            k.hours_per_day,
        )

        raw_recovery = total_permeate / cfg.feed_flow_m3h
        recovery_capped = raw_recovery > k.max_system_recovery
        recovery = min(raw_recovery, k.max_system_recovery)

        avg_el_recovery = average_element_recovery(recovery, n)
        polarization = concentration_polarization(
            max(avg_el_recovery, 0.0), k.cp_coefficient
        )

        limiting = calculate_limiting_recovery(
            feed_op,
            polarization,
            cfg.salt_rejection,
            cfg.feed_pressure_psi,
            k.system_pressure_drop_psi,
            cfg.permeate_pressure_psi,
            constant=k.limiting_recovery,
        )

        area_total = n * cfg.element_area_ft2
        avg_flux = (total_permeate / area_total) if n > 0 else 0.0

        capped_elements = sum(1 for r in results if r.capped)
        element_permeate = sum(r.permeate_flow_m3h for r in results)

        values = (
            total_permeate,
            recovery,
            avg_el_recovery,
            polarization,
            feed_op,
            avg_flux,
            exit_state.flow_m3h,
            exit_state.tds_mgL,
        )
        if not all_finite(*values):
            raise SimulationError("non-finite system result")

        if capped_elements:
            logger.debug(
                f"{capped_elements} element(s) hit the {k.max_element_recovery * 100:.0f}% recovery cap"
            )
        if recovery_capped:
            logger.info(
                f"System recovery capped at {k.max_system_recovery * 100:.0f}% "
                f"(uncapped {raw_recovery * 100:.1f}%)"
            )

        return SystemResult(
            recovery_pct=recovery * 100.0,
            limiting_recovery_pct=limiting * 100.0,
            average_flux=avg_flux,
            average_flux_gfd=m3h_per_ft2_to_gfd(avg_flux),
            total_permeate_flow_m3h=total_permeate,
            permeate_tds_mgL=self._blend_permeate_tds(cfg, results),
            average_element_recovery_pct=avg_el_recovery * 100.0,
            concentrate_polarization=polarization,
            concentrate_osmotic_pressure_psi=feed_op / (1.0 - recovery),
            pressure_drops_psi=[s.pressure_drop_psi for s in summaries],
            feed_osmotic_pressure_psi=feed_op,
            total_elements=n,
            concentrate_flow_m3h=exit_state.flow_m3h,
            concentrate_tds_mgL=exit_state.tds_mgL,
            element_permeate_flow_m3h=element_permeate,
            recovery_capped=recovery_capped,
            capped_elements=capped_elements,
        )

    def _blend_permeate_tds(
        self, cfg: SystemConfig, results: List[ElementResult]
    ) -> float:
        """Flow-weighted permeate TDS over producing elements."""
        flow_sum, salt_sum = 0.0, 0.0
        for r in results:
            if r.permeate_flow_m3h > 0:
                flow_sum += r.permeate_flow_m3h
                salt_sum += r.permeate_flow_m3h * r.permeate_tds_mgL
        if flow_sum > 1e-12:
            return salt_sum / flow_sum
        return cfg.feed_tds_mgL * (1.0 - cfg.salt_rejection)


def simulate(config: Union[SystemConfig, Mapping[str, Any]]) -> SimulationOutput:
    """Run one calculation with the default element model."""
    return SimulationEngine().run(config)
