# rotrain/api/v1/endpoints/normalization.py
from __future__ import annotations

from fastapi import APIRouter

from rotrain.api.v1.schemas import NormalizationRequest, NormalizationResult
from rotrain.services.normalization import normalize_performance

router = APIRouter()


@router.post("", response_model=NormalizationResult)
def normalize(request: NormalizationRequest) -> NormalizationResult:
    return normalize_performance(request)
