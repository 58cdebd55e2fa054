# rotrain/schemas/common.py
from enum import Enum

from pydantic import BaseModel, ConfigDict


class AppBaseModel(BaseModel):
    """모든 모델의 부모 클래스: V2 설정 적용"""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        from_attributes=True,
    )


class FrozenModel(AppBaseModel):
    """생성 후 변경 불가한 레코드 (입력 설정 / 결과 레코드)."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        from_attributes=True,
        frozen=True,
    )


class MembraneFamily(str, Enum):
    BWRO = "bwro"
    SWRO = "swro"
