# rotrain/services/simulation/modules/base.py
from abc import ABC, abstractmethod
from typing import Tuple

from rotrain.schemas.simulation import ElementResult, ElementState, SystemConfig


class ElementModel(ABC):
    """
    엘리먼트 1개를 계산하는 모델의 공통 부모 클래스.
    Strategy 패턴의 Interface 역할: 멤브레인별 모델로 교체해도 traversal은 그대로.
    """

    @abstractmethod
    def step(
        self,
        state: ElementState,
        config: SystemConfig,
        *,
        stage: int,
        vessel: int,
        element: int,
    ) -> Tuple[ElementResult, ElementState]:
        """
        입력: 엘리먼트 유입 상태(state), 시스템 설정(config), 위치 인덱스
        출력: (ElementResult, 다음 엘리먼트 유입 상태)
        """
        pass
