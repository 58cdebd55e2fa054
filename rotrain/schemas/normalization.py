# rotrain/schemas/normalization.py
from pydantic import Field

from .common import AppBaseModel


class OperatingConditions(AppBaseModel):
    feed_pressure_psi: float = Field(default=800.0, ge=0, allow_inf_nan=False)
    pressure_drop_psi: float = Field(default=20.0, ge=0, allow_inf_nan=False)
    permeate_pressure_psi: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    feed_tds_mgL: float = Field(default=35000.0, ge=0, allow_inf_nan=False)
    temperature_C: float = Field(default=25.0, gt=-273.15, allow_inf_nan=False)
    permeate_flow_m3h: float = Field(default=100.0, ge=0, allow_inf_nan=False)
    recovery: float = Field(default=0.45, ge=0, lt=1, description="Fraction")


class NormalizationRequest(AppBaseModel):
    operating: OperatingConditions = Field(default_factory=OperatingConditions)
    baseline: OperatingConditions = Field(default_factory=OperatingConditions)


class NormalizationResult(AppBaseModel):
    normalized_permeate_flow_m3h: float
    deviation_pct: float

    operating_ndp_psi: float
    baseline_ndp_psi: float
    operating_tcf: float
    baseline_tcf: float
