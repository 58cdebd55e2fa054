# rotrain/services/transport.py
from __future__ import annotations

import math

# 상수
REF_TEMP_C = 25.0
T_ZERO_K = 273.15
T_REF_K = T_ZERO_K + REF_TEMP_C  # 298.15 K

TCF_K_WARM = 2640.0  # T >= 25 °C
TCF_K_COLD = 3020.0  # T < 25 °C (steeper)

OSMOTIC_COEFF = 1.12
NACL_EQUIV_MG_PER_MOL = 58500.0  # mg/mol, NaCl 당량 기준

CP_COEFF = 0.7

BASE_ELEMENT_DP_PSI = 3.0
DP_POSITION_STEP = 0.1

LIMITING_RECOVERY = 0.85

# 저농도 기수(brackish) 근사 적용 상한
BRACKISH_TDS_LIMIT_MGL = 20000.0


# ---- TCF (온도 보정) ----
def temperature_correction_factor(
    T_C: float,
    k_warm: float = TCF_K_WARM,
    k_cold: float = TCF_K_COLD,
) -> float:
    """
    Arrhenius형 온도 보정계수. 25 °C에서 정확히 1.0.

    25 °C 기준으로 상수가 바뀌므로 기울기는 25 °C에서 불연속이다 (값은 연속).
    """
    k = k_warm if T_C >= REF_TEMP_C else k_cold
    return math.exp(k * (1.0 / T_REF_K - 1.0 / (T_ZERO_K + T_C)))


# ---- 삼투압 ----
def osmotic_pressure(tds_mgL: float, T_C: float) -> float:
    """
    Element 단위 삼투압 근사 [psi]: 1.12 * T[K] * (TDS / 58500).

    TDS <= 0 이면 0. 입력이 유한하지 않으면 NaN을 그대로 돌려준다
    (호출 측에서 치명적 입력 오류로 처리).
    """
    if not (math.isfinite(tds_mgL) and math.isfinite(T_C)):
        return math.nan
    if tds_mgL <= 0:
        return 0.0
    return OSMOTIC_COEFF * (T_ZERO_K + T_C) * (tds_mgL / NACL_EQUIV_MG_PER_MOL)


def brackish_osmotic_pressure(tds_mgL: float, T_C: float) -> float:
    """Normalization용 삼투압 [psi]. 20,000 mg/L 미만은 기수 근사식 사용."""
    if tds_mgL < BRACKISH_TDS_LIMIT_MGL:
        return max(0.0, tds_mgL) * (T_C + 320.0) / 491000.0
    return osmotic_pressure(tds_mgL, T_C)


# ---- 농도 분극 ----
def concentration_polarization(recovery: float, coeff: float = CP_COEFF) -> float:
    """exp(0.7 * recovery). recovery는 [0, 1) 로 클램프된 값이어야 한다."""
    if not recovery < 1.0:
        raise ValueError(f"recovery must be < 1 (got {recovery})")
    return math.exp(coeff * recovery)


def log_mean_concentration_factor(recovery: float) -> float:
    """ln(1/(1-r)) / r. r -> 0 극한은 1."""
    if recovery <= 0.0:
        return 1.0
    if recovery >= 1.0:
        raise ValueError(f"recovery must be < 1 (got {recovery})")
    return math.log(1.0 / (1.0 - recovery)) / recovery


# ---- 압력 손실 ----
def element_pressure_drop(
    position: int,
    base_dp_psi: float = BASE_ELEMENT_DP_PSI,
    step: float = DP_POSITION_STEP,
) -> float:
    """
    위치 의존 엘리먼트 압력 손실 [psi].
    position은 전체 traversal 기준 1-based 순번. 감쇠 계수는 0 아래로 내려가지 않는다.
    """
    factor = max(0.0, 1.0 - (position - 1) * step)
    return base_dp_psi * factor


def net_driving_pressure(
    feed_pressure: float,
    pressure_drop: float,
    permeate_pressure: float,
    feed_osmotic: float,
    permeate_osmotic: float = 0.0,
) -> float:
    """NDP = P_f - dP/2 - P_p - (π_f - π_p). 음수도 그대로 반환."""
    return (
        feed_pressure
        - pressure_drop / 2.0
        - permeate_pressure
        - (feed_osmotic - permeate_osmotic)
    )


# ---- 한계 회수율 ----
def calculate_limiting_recovery(
    feed_osmotic_pressure: float,
    polarization: float,
    salt_rejection: float,
    feed_pressure: float,
    pressure_drop: float,
    permeate_pressure: float,
    *,
    constant: float = LIMITING_RECOVERY,
) -> float:
    """
    Placeholder: 인자를 사용하지 않고 고정값(0.85)을 반환한다.
    실제 삼투압 한계식은 아직 정해지지 않았으므로 임의로 유도하지 않는다.
    """
    return float(constant)


# ---- 시스템 집계 ----
def system_permeate_flow(
    elements: int,
    water_permeability: float,
    area: float,
    tcf: float,
    fouling_factor: float,
    feed_pressure: float,
    pressure_drop: float,
    permeate_pressure: float,
    feed_osmotic: float,
    permeate_osmotic: float = 0.0,
    hours_per_day: float = 24.0,
) -> float:
    """Lumped 총 투과 유량 [m³/h]: 전체 엘리먼트를 한 번에 계산하는 간이식."""
    ndp = net_driving_pressure(
        feed_pressure, pressure_drop, permeate_pressure, feed_osmotic, permeate_osmotic
    )
    return (
        water_permeability * area * tcf * fouling_factor * ndp * elements
    ) / hours_per_day


def average_element_recovery(system_recovery: float, elements: int) -> float:
    """균일 회수율 모델의 엘리먼트 평균 회수율: 1 - (1 - Y)^(1/n). n = 0 이면 0."""
    if elements <= 0:
        return 0.0
    return 1.0 - (1.0 - system_recovery) ** (1.0 / elements)
