# rotrain/schemas/membrane.py
from typing import Optional

from pydantic import Field

from .common import AppBaseModel, MembraneFamily


class MembraneSpec(AppBaseModel):
    id: str
    name: Optional[str] = None
    vendor: Optional[str] = None

    family: MembraneFamily = MembraneFamily.BWRO
    type: Optional[str] = Field(None, description="ULP / BW / SW")
    size: Optional[str] = None

    # Performance Parameters (datasheet test conditions)
    flow_m3d: Optional[float] = Field(None, description="Nominal permeate flow")
    salt_rejection_pct: Optional[float] = Field(
        None, ge=0, le=100, description="Nominal salt rejection (%)"
    )
    test_pressure_psi: Optional[float] = Field(None, description="Test pressure")

    @property
    def salt_rejection(self) -> Optional[float]:
        """Rejection as a fraction (0-1)."""
        if self.salt_rejection_pct is None:
            return None
        return self.salt_rejection_pct / 100.0


class MembraneOut(MembraneSpec):
    pass
