# rotrain/services/simulation/utils.py
# Simulation Utilities
# - 단위 변환 / 수치 가드 / 입력 정규화

from __future__ import annotations

import math
from typing import Any, Mapping, Union

from pydantic import ValidationError

from rotrain.core.errors import ConfigValidationError
from rotrain.schemas.simulation import SystemConfig

# ============================================================
# Constants
# ============================================================
GAL_PER_M3 = 264.172
HOURS_PER_DAY = 24.0


# ============================================================
# Basic helpers
# ============================================================
def all_finite(*values: float) -> bool:
    return all(math.isfinite(float(v)) for v in values)


def m3h_per_ft2_to_gfd(flux: float) -> float:
    """m³/h/ft² → gal/ft²/day (GFD)."""
    return float(flux) * GAL_PER_M3 * HOURS_PER_DAY


# ============================================================
# Config coercion
# ============================================================
def coerce_config(config: Union[SystemConfig, Mapping[str, Any]]) -> SystemConfig:
    """
    dict / SystemConfig 무엇이 오든 검증된 SystemConfig로 정규화.
    model_construct 등으로 검증을 우회한 인스턴스도 다시 검증한다.
    """
    if isinstance(config, SystemConfig):
        data: Any = config.model_dump()
    elif isinstance(config, Mapping):
        data = dict(config)
    else:
        raise ConfigValidationError(
            f"Unsupported config type: {type(config).__name__}",
            [{"loc": [], "msg": "expected SystemConfig or mapping"}],
        )

    try:
        return SystemConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError.from_pydantic(exc) from exc
