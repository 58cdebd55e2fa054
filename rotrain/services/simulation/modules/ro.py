# rotrain/services/simulation/modules/ro.py
from __future__ import annotations

import math
from typing import Tuple

from rotrain.core.errors import SimulationError
from rotrain.schemas.simulation import ElementResult, ElementState, SystemConfig
from rotrain.services.simulation.modules.base import ElementModel
from rotrain.services.simulation.utils import all_finite
from rotrain.services.transport import (
    concentration_polarization,
    element_pressure_drop,
    net_driving_pressure,
    osmotic_pressure,
    temperature_correction_factor,
)


class ROElement(ElementModel):
    """
    [RO Element]
    - Solution-diffusion (linear NDP) with fixed placeholder A coefficient
    - Position-attenuated pressure drop (global element ordinal)
    - Per-element recovery capped at constants.max_element_recovery (modeling policy)
    - Negative NDP is NOT clamped: propagates as negative permeate flow
    """

    def step(
        self,
        state: ElementState,
        config: SystemConfig,
        *,
        stage: int,
        vessel: int,
        element: int,
    ) -> Tuple[ElementResult, ElementState]:
        where = dict(stage=stage, vessel=vessel, element=element)

        # -----------------------------
        # Inputs
        # -----------------------------
        Qf = float(state.flow_m3h)
        Cf = float(state.tds_mgL)
        Pf = float(state.pressure_psi)

        if not math.isfinite(Qf) or Qf <= 0.0:
            raise SimulationError(f"invalid feed flow {Qf!r}", **where)
        if not all_finite(Cf, Pf):
            raise SimulationError("non-finite feed TDS or pressure", **where)

        k = config.constants
        T_C = config.temperature_C

        # -----------------------------
        # Pressure / osmotic
        # -----------------------------
        dp = element_pressure_drop(
            state.position, k.base_element_dp_psi, k.dp_position_step
        )

        pi_feed = osmotic_pressure(Cf, T_C)
        Cp = Cf * (1.0 - config.salt_rejection)
        pi_perm = osmotic_pressure(Cp, T_C)

        ndp = net_driving_pressure(
            Pf, dp, config.permeate_pressure_psi, pi_feed, pi_perm
        )

        # -----------------------------
        # Flow / recovery
        # -----------------------------
        tcf = temperature_correction_factor(T_C, k.tcf_k_warm, k.tcf_k_cold)
        qp_raw = (
            k.water_permeability
            * config.element_area_ft2
            * tcf
            * config.fouling_factor
            * ndp
        ) / k.hours_per_day

        raw_recovery = qp_raw / Qf
        capped = raw_recovery > k.max_element_recovery
        recovery = min(raw_recovery, k.max_element_recovery)

        # permeate actually withdrawn (== qp_raw unless the cap binds)
        Qp = recovery * Qf

        Cc = Cf / (1.0 - recovery)
        Pc = Pf - dp

        cp_factor = concentration_polarization(max(recovery, 0.0), k.cp_coefficient)
        # π_f * (Cc/Cf) * CP; osmotic pressure is linear in TDS
        pi_conc = osmotic_pressure(Cc, T_C) * cp_factor

        if not all_finite(ndp, Qp, recovery, Cc, Pc, pi_conc):
            raise SimulationError("non-finite element result", **where)

        result = ElementResult(
            stage=stage,
            vessel=vessel,
            element=element,
            position=state.position,
            feed_flow_m3h=Qf,
            feed_tds_mgL=Cf,
            feed_pressure_psi=Pf,
            pressure_drop_psi=dp,
            net_driving_pressure_psi=ndp,
            permeate_flow_m3h=Qp,
            permeate_tds_mgL=Cp,
            recovery=recovery,
            polarization=cp_factor,
            osmotic_pressure_psi=pi_conc,
            capped=capped,
        )

        successor = ElementState(
            flow_m3h=Qf - Qp,
            tds_mgL=Cc,
            pressure_psi=Pc,
            position=state.position + 1,
        )
        return result, successor
