# tests/conftest.py
from __future__ import annotations

import pytest

from rotrain.schemas.simulation import SystemConfig
from tests.payloads import brackish_payload, scenario_a_payload


@pytest.fixture()
def scenario_a() -> SystemConfig:
    return SystemConfig(**scenario_a_payload())


@pytest.fixture()
def brackish() -> SystemConfig:
    return SystemConfig(**brackish_payload())


@pytest.fixture()
def default_config() -> SystemConfig:
    return SystemConfig()
