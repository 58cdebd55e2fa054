# rotrain/services/normalization.py
# Performance normalization: 운전 데이터를 기준(baseline) 조건으로 환산
from __future__ import annotations

from typing import Tuple

from loguru import logger

from rotrain.core.errors import ConfigValidationError
from rotrain.schemas.normalization import (
    NormalizationRequest,
    NormalizationResult,
    OperatingConditions,
)
from rotrain.services.transport import (
    brackish_osmotic_pressure,
    log_mean_concentration_factor,
    net_driving_pressure,
    temperature_correction_factor,
)


def _ndp_and_tcf(c: OperatingConditions) -> Tuple[float, float]:
    # feed-concentrate 평균 TDS (log-mean)
    fc_tds = c.feed_tds_mgL * log_mean_concentration_factor(c.recovery)
    pi_fc = brackish_osmotic_pressure(fc_tds, c.temperature_C)
    ndp = net_driving_pressure(
        c.feed_pressure_psi, c.pressure_drop_psi, c.permeate_pressure_psi, pi_fc
    )
    return ndp, temperature_correction_factor(c.temperature_C)


def normalize_performance(request: NormalizationRequest) -> NormalizationResult:
    """
    Q_norm = (NDP_op / NDP_bl) * (TCF_op / TCF_bl) * Q_bl
    deviation % = (Q_norm - Q_op) / Q_op * 100
    """
    op, bl = request.operating, request.baseline

    op_ndp, op_tcf = _ndp_and_tcf(op)
    bl_ndp, bl_tcf = _ndp_and_tcf(bl)

    if bl_ndp == 0.0:
        raise ConfigValidationError(
            "Baseline net driving pressure is zero",
            [{"loc": ["baseline"], "msg": "net driving pressure must be non-zero"}],
        )
    if bl_tcf == 0.0:
        # 절대영도 근처에서 TCF가 0으로 underflow
        raise ConfigValidationError(
            "Baseline temperature correction factor is zero",
            [{"loc": ["baseline", "temperature_C"], "msg": "temperature too low"}],
        )
    if op.permeate_flow_m3h <= 0.0:
        raise ConfigValidationError(
            "Operating permeate flow must be positive",
            [{"loc": ["operating", "permeate_flow_m3h"], "msg": "must be > 0"}],
        )

    q_norm = (op_ndp / bl_ndp) * (op_tcf / bl_tcf) * bl.permeate_flow_m3h
    deviation = (q_norm - op.permeate_flow_m3h) / op.permeate_flow_m3h * 100.0

    logger.debug(
        f"Normalized flow {q_norm:.3f} m3/h (deviation {deviation:+.2f}%)"
    )

    return NormalizationResult(
        normalized_permeate_flow_m3h=q_norm,
        deviation_pct=deviation,
        operating_ndp_psi=op_ndp,
        baseline_ndp_psi=bl_ndp,
        operating_tcf=op_tcf,
        baseline_tcf=bl_tcf,
    )
