# rotrain/api/v1/endpoints/membranes.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from rotrain.api.v1.schemas import MembraneOut
from rotrain.services import membranes as membrane_service

router = APIRouter()


@router.get("", response_model=List[MembraneOut])
def list_membranes(
    family: Optional[str] = Query(None, description="필터: bwro, swro"),
):
    """[멤브레인 목록 조회] family 필터 지원"""
    try:
        return membrane_service.list_membranes(family)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{membrane_id}", response_model=MembraneOut)
def get_membrane(membrane_id: str):
    m = membrane_service.get_membrane_out_by_id(membrane_id)
    if m is None:
        raise HTTPException(
            status_code=404, detail=f"Membrane '{membrane_id}' not found"
        )
    return m
