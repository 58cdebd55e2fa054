# rotrain/schemas/simulation.py
# =============================================================================
# RO Train Simulation Schemas (Pydantic v2)
#
# Key Policies:
# - SystemConfig is immutable input; lists are coerced to tuples.
# - Zero vessels / zero elements are legal (no throughput from that branch).
# - Placeholder physics lives in ModelConstants so it can be overridden
#   per membrane without touching the traversal.
# - Result records are frozen once created.
# =============================================================================

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import Field, AliasChoices, computed_field, model_validator

from .common import AppBaseModel, FrozenModel


# =============================================================================
# Default Constants (form defaults of the design calculator)
# =============================================================================
DEFAULT_STAGES = 2
DEFAULT_STAGE_VESSELS: Tuple[int, ...] = (6, 3)
DEFAULT_VESSEL_ELEMENTS: Tuple[Tuple[int, ...], ...] = ((7,) * 6, (7,) * 3)


# =============================================================================
# Modeling constants
# =============================================================================
class ModelConstants(FrozenModel):
    """
    Simplified stand-ins used by the element model.
    Not membrane-specific data; override per membrane if better data exists.
    """

    base_element_dp_psi: float = Field(
        default=3.0, ge=0, description="Pressure drop of a first-position element"
    )
    dp_position_step: float = Field(
        default=0.1, ge=0, description="Attenuation per element position"
    )
    water_permeability: float = Field(
        default=0.1, ge=0, description="A coefficient (flow per area per psi per day)"
    )
    hours_per_day: float = Field(default=24.0, gt=0)
    max_element_recovery: float = Field(default=0.30, gt=0, lt=1)
    max_system_recovery: float = Field(default=0.85, gt=0, lt=1)
    limiting_recovery: float = Field(default=0.85, ge=0, le=1)
    cp_coefficient: float = Field(default=0.7, ge=0)

    # lumped system estimate (total permeate)
    system_water_permeability: float = Field(default=1.0, ge=0)
    system_pressure_drop_psi: float = Field(default=20.0, ge=0)

    # Arrhenius constants of the TCF (warm / cold branch, 25 °C split)
    tcf_k_warm: float = 2640.0
    tcf_k_cold: float = 3020.0


# =============================================================================
# Input
# =============================================================================
class SystemConfig(FrozenModel):
    stages: int = Field(default=DEFAULT_STAGES, ge=1)
    stage_vessels: Tuple[int, ...] = Field(
        default=DEFAULT_STAGE_VESSELS,
        validation_alias=AliasChoices("stage_vessels", "stageVessels"),
    )
    vessel_elements: Tuple[Tuple[int, ...], ...] = Field(
        default=DEFAULT_VESSEL_ELEMENTS,
        validation_alias=AliasChoices("vessel_elements", "vesselElements"),
    )

    element_area_ft2: float = Field(
        default=400.0,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("element_area_ft2", "elementArea"),
    )
    temperature_C: float = Field(
        default=28.0,
        gt=-273.15,
        allow_inf_nan=False,
        validation_alias=AliasChoices("temperature_C", "temperature"),
    )
    feed_pressure_psi: float = Field(
        default=600.0,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("feed_pressure_psi", "feedPressure"),
    )
    permeate_pressure_psi: float = Field(
        default=14.7,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices(
            "permeate_pressure_psi", "permatePressure", "permeatePressure"
        ),
    )
    feed_flow_m3h: float = Field(
        default=150.0,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("feed_flow_m3h", "feedFlow"),
    )
    fouling_factor: float = Field(
        default=0.8,
        ge=0,
        le=1,
        allow_inf_nan=False,
        validation_alias=AliasChoices("fouling_factor", "foulingFactor"),
    )
    feed_tds_mgL: float = Field(
        default=32000.0,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("feed_tds_mgL", "feedTDS"),
    )
    salt_rejection: float = Field(
        default=0.998,
        ge=0,
        le=1,
        allow_inf_nan=False,
        validation_alias=AliasChoices("salt_rejection", "saltRejection"),
    )

    membrane_model: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("membrane_model", "membrane"),
    )
    constants: ModelConstants = Field(default_factory=ModelConstants)

    @model_validator(mode="after")
    def _check_topology(self) -> "SystemConfig":
        if len(self.stage_vessels) != self.stages:
            raise ValueError(
                f"stage_vessels has {len(self.stage_vessels)} entries, expected {self.stages}"
            )
        if len(self.vessel_elements) != self.stages:
            raise ValueError(
                f"vessel_elements has {len(self.vessel_elements)} rows, expected {self.stages}"
            )
        for i, (vessels, row) in enumerate(zip(self.stage_vessels, self.vessel_elements)):
            if vessels < 0:
                raise ValueError(f"stage {i + 1}: vessel count must be >= 0")
            if len(row) != vessels:
                raise ValueError(
                    f"stage {i + 1}: {len(row)} element counts for {vessels} vessels"
                )
            if any(n < 0 for n in row):
                raise ValueError(f"stage {i + 1}: element counts must be >= 0")
        return self

    @property
    def total_vessels(self) -> int:
        return sum(self.stage_vessels)

    @property
    def total_elements(self) -> int:
        return sum(sum(row) for row in self.vessel_elements)


# =============================================================================
# Transient state + result records
# =============================================================================
class ElementState(FrozenModel):
    """Feed condition at the inlet of one element. Threaded by value."""

    flow_m3h: float
    tds_mgL: float
    pressure_psi: float
    position: int = Field(default=1, ge=1)


class ElementResult(FrozenModel):
    stage: int
    vessel: int
    element: int
    position: int

    feed_flow_m3h: float
    feed_tds_mgL: float
    feed_pressure_psi: float

    pressure_drop_psi: float
    net_driving_pressure_psi: float
    permeate_flow_m3h: float
    permeate_tds_mgL: float

    recovery: float = Field(description="Element recovery (fraction)")
    polarization: float
    osmotic_pressure_psi: float
    capped: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def recovery_pct(self) -> float:
        return self.recovery * 100.0


class StageSummary(FrozenModel):
    stage: int
    vessels: int
    elements: int

    inlet_flow_m3h: float
    inlet_tds_mgL: float
    inlet_pressure_psi: float

    exit_flow_m3h: float
    exit_tds_mgL: float
    exit_pressure_psi: float

    permeate_flow_m3h: float = 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pressure_drop_psi(self) -> float:
        return self.inlet_pressure_psi - self.exit_pressure_psi


class SystemResult(FrozenModel):
    recovery_pct: float
    limiting_recovery_pct: float
    average_flux: float = Field(description="Permeate per element area (m³/h/ft²)")
    average_flux_gfd: float
    total_permeate_flow_m3h: float
    permeate_tds_mgL: float
    average_element_recovery_pct: float
    concentrate_polarization: float
    concentrate_osmotic_pressure_psi: float
    pressure_drops_psi: List[float]
    feed_osmotic_pressure_psi: float

    total_elements: int
    concentrate_flow_m3h: float
    concentrate_tds_mgL: float
    element_permeate_flow_m3h: float = Field(
        description="Sum of element permeate flows from the element walk"
    )

    recovery_capped: bool = False
    capped_elements: int = 0


class SimulationOutput(AppBaseModel):
    element_results: List[ElementResult]
    stages: List[StageSummary]
    system: SystemResult

    schema_version: int = 1
