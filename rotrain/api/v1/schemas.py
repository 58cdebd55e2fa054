# rotrain/api/v1/schemas.py
# (Barrel File: 엔드포인트에서 사용하는 스키마를 한 곳에서 다시 내보냅니다)

from rotrain.schemas.common import AppBaseModel, FrozenModel, MembraneFamily

from rotrain.schemas.simulation import (
    ModelConstants,
    SystemConfig,
    ElementState,
    ElementResult,
    StageSummary,
    SystemResult,
    SimulationOutput,
)

from rotrain.schemas.membrane import MembraneSpec, MembraneOut

from rotrain.schemas.normalization import (
    OperatingConditions,
    NormalizationRequest,
    NormalizationResult,
)
