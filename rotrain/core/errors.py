# rotrain/core/errors.py
from __future__ import annotations

from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

__all__ = [
    "RoTrainError",
    "ConfigValidationError",
    "SimulationError",
    "register_exception_handlers",
]


# =============================================================================
# Domain exceptions
# =============================================================================
class RoTrainError(Exception):
    """시뮬레이터 공통 예외."""

    code = "RO_TRAIN_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Any:
        return None


class ConfigValidationError(RoTrainError):
    """
    계산 시작 전 입력 검증 실패.
    errors: [{"loc": [...], "msg": "..."}] 형태 (pydantic 에러와 동일한 모양)
    """

    code = "INVALID_INPUT"

    def __init__(
        self, message: str, errors: Optional[List[dict[str, Any]]] = None
    ) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ConfigValidationError":
        items = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ]
        return cls("Invalid system configuration", items)

    def to_detail(self) -> Any:
        return self.errors


class SimulationError(RoTrainError):
    """Traversal 중 수치 이상(0 유량, NaN/Inf) 발생. 위치 정보를 포함한다."""

    code = "SIMULATION_DEGENERATE"

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[int] = None,
        vessel: Optional[int] = None,
        element: Optional[int] = None,
    ) -> None:
        loc = ""
        if stage is not None:
            loc = f" (stage {stage}, vessel {vessel}, element {element})"
        super().__init__(message + loc)
        self.reason = message
        self.stage = stage
        self.vessel = vessel
        self.element = element

    def to_detail(self) -> Any:
        return {
            "reason": self.reason,
            "stage": self.stage,
            "vessel": self.vessel,
            "element": self.element,
        }


# =============================================================================
# FastAPI handlers
# =============================================================================
def _build_problem_response(
    *,
    status_code: int,
    code: str,
    message: str,
    detail: Any | None = None,
) -> JSONResponse:
    """공통 에러 응답 포맷 생성."""
    payload: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if detail is not None:
        payload["detail"] = detail

    return JSONResponse(
        status_code=status_code,
        content=payload,
        headers={
            "Content-Type": "application/problem+json",
        },
    )


def _convert_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """RequestValidationError → 단순화된 에러 리스트로 변환."""
    return [
        {
            "loc": list(e.get("loc", ())),
            "msg": e.get("msg"),
            "type": e.get("type"),
        }
        for e in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """
    FastAPI 앱 전역 예외 핸들러 등록.

    - RequestValidationError / ConfigValidationError: 입력 검증 실패(422)
    - SimulationError: 계산 중 수치 이상(422, 위치 포함)
    - HTTPException: 일반 HTTP 에러(404 등)
    - Exception: 그 외 모든 예외(500)
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = _convert_validation_errors(exc)

        logger.info(
            "Request validation failed: {} {} ({} errors)",
            request.method,
            request.url.path,
            len(errors),
        )

        return _build_problem_response(
            status_code=422,
            code="INVALID_INPUT",
            message="입력 검증 실패",
            detail=errors,
        )

    @app.exception_handler(RoTrainError)
    async def domain_exception_handler(
        request: Request,
        exc: RoTrainError,
    ) -> JSONResponse:
        logger.warning(
            "{}: {} {} -> {}",
            exc.code,
            request.method,
            request.url.path,
            exc.message,
        )

        return _build_problem_response(
            status_code=422,
            code=exc.code,
            message=exc.message,
            detail=exc.to_detail(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        logger.warning(
            "HTTPException: {} {} -> {} ({})",
            request.method,
            request.url.path,
            exc.status_code,
            exc.detail,
        )

        return _build_problem_response(
            status_code=exc.status_code,
            code="HTTP_ERROR",
            message=str(exc.detail) if exc.detail else "HTTP error",
            detail=None,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """최상위 핸들러: 예상치 못한 모든 예외를 500으로 포장."""
        logger.opt(exception=exc).error(
            "Unhandled exception: {} {}",
            request.method,
            request.url.path,
        )

        return _build_problem_response(
            status_code=500,
            code="INTERNAL_SERVER_ERROR",
            message="알 수 없는 오류가 발생했습니다.",
            detail=None,
        )
