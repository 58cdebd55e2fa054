# rotrain/services/membranes.py
from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from rotrain.core.errors import ConfigValidationError
from rotrain.data.membranes import MEMBRANES
from rotrain.schemas.common import MembraneFamily
from rotrain.schemas.membrane import MembraneOut, MembraneSpec
from rotrain.schemas.simulation import SystemConfig


def _as_list() -> list[dict[str, Any]]:
    src = MEMBRANES
    if isinstance(src, dict):
        return [dict(id=k, **(v or {})) for k, v in src.items()]
    return list(src or [])


def _norm(x: Any) -> str:
    return str(x if x is not None else "").strip().lower()


def _family_key(x: Any) -> Optional[MembraneFamily]:
    v = _norm(x)
    if not v:
        return None
    try:
        return MembraneFamily(v)
    except ValueError:
        return None


def load_by_id(code: str) -> Optional[MembraneSpec]:
    """id 또는 표시 이름(대소문자 무시)으로 카탈로그 조회."""
    if not code:
        return None
    cid = _norm(code)
    for m in _as_list():
        if cid in (_norm(m.get("id")), _norm(m.get("name"))):
            return MembraneSpec(**m)
    return None


def list_membranes(family: str | MembraneFamily | None = None) -> list[MembraneOut]:
    fam = _family_key(family.value if isinstance(family, MembraneFamily) else family)
    if family and fam is None:
        raise ValueError(f"Unknown membrane family: {family!r}")

    out: list[MembraneOut] = []
    for raw in _as_list():
        spec = MembraneSpec(**raw)
        if fam and spec.family != fam:
            continue
        out.append(MembraneOut(**spec.model_dump()))
    return out


def get_membrane_out_by_id(membrane_id: str) -> Optional[MembraneOut]:
    spec = load_by_id(membrane_id)
    return MembraneOut(**spec.model_dump()) if spec else None


def apply_membrane(config: SystemConfig) -> SystemConfig:
    """
    config.membrane_model이 지정되어 있으면 카탈로그 제거율로 salt_rejection을 덮어쓴다.
    모델이 없으면 config를 그대로 반환.
    """
    if not config.membrane_model:
        return config

    spec = load_by_id(config.membrane_model)
    if spec is None or spec.salt_rejection is None:
        raise ConfigValidationError(
            f"Unknown membrane model: {config.membrane_model}",
            [{"loc": ["membrane_model"], "msg": "not found in catalog"}],
        )

    logger.debug(
        f"Membrane '{spec.name}' selected: salt rejection {spec.salt_rejection_pct}%"
    )
    return config.model_copy(update={"salt_rejection": spec.salt_rejection})
