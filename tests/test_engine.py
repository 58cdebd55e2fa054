# tests/test_engine.py
# pytest tests for SimulationEngine (system aggregation / validation)
from __future__ import annotations

import math

import pytest

from rotrain.core.errors import ConfigValidationError, SimulationError
from rotrain.schemas.simulation import ElementResult, ElementState, SystemConfig
from rotrain.services.simulation.engine import SimulationEngine, simulate
from rotrain.services.simulation.modules.base import ElementModel
from rotrain.services.transport import (
    average_element_recovery,
    concentration_polarization,
    osmotic_pressure,
)
from tests.payloads import brackish_payload, scenario_a_payload


# =============================================================================
# Single element
# =============================================================================
def test_single_element_run(scenario_a):
    out = simulate(scenario_a)

    assert len(out.element_results) == 1
    r = out.element_results[0]
    assert (r.stage, r.vessel, r.element, r.position) == (1, 1, 1, 1)
    assert r.feed_tds_mgL == 32000
    assert r.recovery <= 0.30

    s = out.system
    assert s.total_elements == 1
    assert s.feed_osmotic_pressure_psi == pytest.approx(osmotic_pressure(32000, 25))
    assert s.pressure_drops_psi == [pytest.approx(3.0)]
    assert s.element_permeate_flow_m3h == pytest.approx(r.permeate_flow_m3h)
    assert s.concentrate_flow_m3h == pytest.approx(150 - r.permeate_flow_m3h)


def test_dict_input_is_accepted():
    out = simulate(scenario_a_payload())
    assert len(out.element_results) == 1


def test_camel_case_keys_are_accepted():
    payload = {
        "stages": 1,
        "stageVessels": [1],
        "vesselElements": [[2]],
        "feedFlow": 100,
        "feedTDS": 2000,
        "permatePressure": 10,
    }
    out = simulate(payload)
    assert len(out.element_results) == 2
    assert out.element_results[0].feed_tds_mgL == 2000


# =============================================================================
# Validation before traversal
# =============================================================================
@pytest.mark.parametrize(
    "overrides",
    [
        {"feed_flow_m3h": 0},
        {"feed_flow_m3h": -10},
        {"element_area_ft2": 0},
        {"salt_rejection": 1.2},
        {"fouling_factor": -0.1},
        {"stages": 2},
        {"stage_vessels": [2]},
        {"vessel_elements": [[1, -1]], "stage_vessels": [2]},
        {"temperature_C": math.nan},
    ],
)
def test_invalid_config_raises_before_traversal(overrides):
    with pytest.raises(ConfigValidationError) as ei:
        simulate(scenario_a_payload(**overrides))
    assert ei.value.code == "INVALID_INPUT"
    assert ei.value.errors


def test_unsupported_config_type_raises():
    with pytest.raises(ConfigValidationError):
        simulate(["not", "a", "config"])  # type: ignore[arg-type]


def test_size_ceiling():
    engine = SimulationEngine(max_total_elements=5)
    with pytest.raises(ConfigValidationError) as ei:
        engine.run(brackish_payload())
    assert "limit is 5" in str(ei.value)

    out = SimulationEngine(max_total_elements=8).run(brackish_payload())
    assert len(out.element_results) == 8


# =============================================================================
# System aggregates
# =============================================================================
def test_more_elements_lower_average_element_recovery():
    seven = simulate(brackish_payload(stages=1, stage_vessels=[1], vessel_elements=[[7]]))
    fourteen = simulate(brackish_payload(stages=1, stage_vessels=[1], vessel_elements=[[14]]))

    y7 = seven.system.recovery_pct / 100
    y14 = fourteen.system.recovery_pct / 100
    assert seven.system.average_element_recovery_pct == pytest.approx(
        average_element_recovery(y7, 7) * 100
    )
    assert fourteen.system.average_element_recovery_pct == pytest.approx(
        average_element_recovery(y14, 14) * 100
    )
    assert (
        fourteen.system.average_element_recovery_pct
        < seven.system.average_element_recovery_pct
    )


def test_recovery_caps_hold(brackish):
    out = simulate(brackish)

    assert len(out.element_results) == 8
    assert all(r.recovery <= 0.30 + 1e-12 for r in out.element_results)
    assert out.system.capped_elements == sum(r.capped for r in out.element_results)

    assert out.system.recovery_pct <= 85.0 + 1e-9
    assert out.system.recovery_capped is True
    assert out.system.recovery_pct == pytest.approx(85.0)


def test_system_derived_quantities(brackish):
    s = simulate(brackish).system
    y = s.recovery_pct / 100

    assert s.limiting_recovery_pct == pytest.approx(85.0)
    assert s.concentrate_osmotic_pressure_psi == pytest.approx(
        s.feed_osmotic_pressure_psi / (1 - y)
    )
    assert s.concentrate_polarization == pytest.approx(
        concentration_polarization(s.average_element_recovery_pct / 100)
    )
    assert s.average_flux == pytest.approx(s.total_permeate_flow_m3h / (8 * 400))
    assert s.average_flux_gfd == pytest.approx(s.average_flux * 264.172 * 24)
    assert 0 < s.permeate_tds_mgL < 2000


def test_pressure_drop_per_stage(brackish):
    out = simulate(brackish)

    assert len(out.stages) == 2
    assert len(out.system.pressure_drops_psi) == 2
    # stage 1 출구 = 마지막 vessel (position 4..6)
    assert out.system.pressure_drops_psi[0] == pytest.approx(3.0 * (0.7 + 0.6 + 0.5))
    assert out.system.pressure_drops_psi[1] == pytest.approx(3.0 * (0.4 + 0.3))
    assert out.stages[1].inlet_pressure_psi == pytest.approx(out.stages[0].exit_pressure_psi)
    assert out.stages[1].inlet_flow_m3h == pytest.approx(out.stages[0].exit_flow_m3h)


def test_zero_element_train_is_total():
    out = simulate(scenario_a_payload(stage_vessels=[0], vessel_elements=[[]]))

    s = out.system
    assert out.element_results == []
    assert s.total_elements == 0
    assert s.total_permeate_flow_m3h == 0.0
    assert s.recovery_pct == 0.0
    assert s.average_element_recovery_pct == 0.0
    assert s.average_flux == 0.0
    assert s.concentrate_polarization == 1.0
    assert s.concentrate_flow_m3h == pytest.approx(150.0)
    assert s.concentrate_tds_mgL == pytest.approx(32000.0)
    assert s.permeate_tds_mgL == pytest.approx(32000 * (1 - 0.998))
    assert s.pressure_drops_psi == [0.0]


def test_runs_are_independent(brackish):
    engine = SimulationEngine()
    first = engine.run(brackish)
    engine.run(scenario_a_payload())
    again = engine.run(brackish)

    assert first.model_dump() == again.model_dump()
    assert [r.position for r in again.element_results] == list(range(1, 9))


def test_default_config_runs(default_config):
    out = simulate(default_config)
    assert len(out.element_results) == 63
    assert out.system.total_elements == 63
    assert len(out.stages) == 2


# =============================================================================
# Membrane catalog
# =============================================================================
def test_membrane_model_overrides_salt_rejection():
    out = simulate(scenario_a_payload(membrane_model="zekindo-sw-4040"))
    r = out.element_results[0]
    assert r.permeate_tds_mgL == pytest.approx(32000 * (1 - 0.996))


def test_unknown_membrane_model_raises():
    with pytest.raises(ConfigValidationError) as ei:
        simulate(scenario_a_payload(membrane_model="no-such-membrane"))
    assert ei.value.errors[0]["loc"] == ["membrane_model"]


# =============================================================================
# Degenerate traversal
# =============================================================================
class _BrokenElement(ElementModel):
    def step(self, state, config, *, stage, vessel, element):
        raise SimulationError("non-finite permeate", stage=stage, vessel=vessel, element=element)


class _PassThroughElement(ElementModel):
    def step(self, state, config, *, stage, vessel, element):
        result = ElementResult(
            stage=stage,
            vessel=vessel,
            element=element,
            position=state.position,
            feed_flow_m3h=state.flow_m3h,
            feed_tds_mgL=state.tds_mgL,
            feed_pressure_psi=state.pressure_psi,
            pressure_drop_psi=0.0,
            net_driving_pressure_psi=0.0,
            permeate_flow_m3h=0.0,
            permeate_tds_mgL=0.0,
            recovery=0.0,
            polarization=1.0,
            osmotic_pressure_psi=0.0,
        )
        nxt = ElementState(
            flow_m3h=state.flow_m3h,
            tds_mgL=state.tds_mgL,
            pressure_psi=state.pressure_psi,
            position=state.position + 1,
        )
        return result, nxt


def test_element_error_propagates_with_location(brackish):
    with pytest.raises(SimulationError) as ei:
        SimulationEngine(_BrokenElement()).run(brackish)
    assert (ei.value.stage, ei.value.vessel, ei.value.element) == (1, 1, 1)


def test_custom_element_model_is_used(brackish):
    out = SimulationEngine(_PassThroughElement()).run(brackish)
    assert out.system.element_permeate_flow_m3h == 0.0
    assert out.system.concentrate_flow_m3h == pytest.approx(60.0)
    # 생산수가 없으면 막 제거율로 추정
    assert out.system.permeate_tds_mgL == pytest.approx(2000 * (1 - 0.995))


# =============================================================================
# Numeric guards
# =============================================================================
@pytest.mark.parametrize("temp", [-273.15, -300.0])
def test_temperature_at_or_below_absolute_zero_is_invalid(temp):
    with pytest.raises(ConfigValidationError) as ei:
        simulate(scenario_a_payload(temperature_C=temp))
    assert ei.value.errors[0]["loc"] == ["temperature_C"]


def test_element_overflow_becomes_simulation_error():
    payload = scenario_a_payload(constants={"cp_coefficient": 5000})
    with pytest.raises(SimulationError) as ei:
        simulate(payload)

    err = ei.value
    assert "numeric failure" in err.reason
    assert (err.stage, err.vessel, err.element) == (1, 1, 1)
    assert isinstance(err.__cause__, OverflowError)


def test_aggregation_overflow_becomes_simulation_error():
    # 엘리먼트가 없으면 walk는 통과하고 집계 단계의 TCF에서 overflow
    payload = scenario_a_payload(
        temperature_C=30,
        stage_vessels=[0],
        vessel_elements=[[]],
        constants={"tcf_k_warm": 1e8},
    )
    with pytest.raises(SimulationError) as ei:
        simulate(payload)

    assert "system aggregation" in str(ei.value)
    assert ei.value.stage is None
