# tests/test_cli.py
from __future__ import annotations

import json

import pytest
from loguru import logger
from typer.testing import CliRunner

from rotrain.cli import app
from tests.payloads import scenario_a_payload

runner = CliRunner()


@pytest.fixture(autouse=True)
def _workdir(tmp_path, monkeypatch):
    # 로그 파일 sink(.logs)를 임시 디렉터리에 생성
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    # CLI가 CliRunner의 임시 stderr에 sink를 붙이므로 테스트마다 정리
    logger.remove()


def _write(path, payload) -> str:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_simulate_with_defaults():
    result = runner.invoke(app, ["simulate", "--no-pretty"])
    assert result.exit_code == 0, result.output

    data = json.loads(result.stdout)
    assert len(data["element_results"]) == 63
    assert data["system"]["total_elements"] == 63


def test_simulate_from_file(tmp_path):
    cfg = _write(tmp_path / "cfg.json", scenario_a_payload())

    result = runner.invoke(app, ["simulate", cfg])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["element_results"][0]["capped"] is True


def test_simulate_invalid_config_exits_1(tmp_path):
    bad = _write(tmp_path / "bad.json", scenario_a_payload(feed_flow_m3h=0))

    result = runner.invoke(app, ["simulate", bad])
    assert result.exit_code == 1
    assert "INVALID_INPUT" in result.output


def test_simulate_numeric_failure_exits_1(tmp_path):
    cfg = _write(
        tmp_path / "cp.json", scenario_a_payload(constants={"cp_coefficient": 5000})
    )

    result = runner.invoke(app, ["simulate", cfg])
    assert result.exit_code == 1
    assert "SIMULATION_DEGENERATE" in result.output


def test_simulate_missing_file_exits_1(tmp_path):
    result = runner.invoke(app, ["simulate", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert "INVALID_INPUT" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_simulate_malformed_json_exits_1(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["simulate", str(broken)])
    assert result.exit_code == 1
    assert "Cannot read config file" in result.output


def test_defaults_command():
    result = runner.invoke(app, ["defaults"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["stage_vessels"] == [6, 3]


def test_membranes_command():
    result = runner.invoke(app, ["membranes", "--family", "swro"])
    assert result.exit_code == 0
    assert "zekindo-sw-4040" in result.stdout
    assert "zekindo-ulp-4040" not in result.stdout

    bad = runner.invoke(app, ["membranes", "--family", "xx"])
    assert bad.exit_code == 2
