from __future__ import annotations

from typing import List
from pydantic import BaseModel, Field


class GroupTotalModel(BaseModel):
    name: str
    total: float
    formatted: str = Field(examples=["1250.50"])


class SummaryResponse(BaseModel):
    total: float
    total_formatted: str = Field(examples=["510"])
    currency: str = Field(default="INR")
    rate: float = 1.0
    region: str = Field(default="all")
    groups: List[GroupTotalModel] = Field(default_factory=list)
    regions: List[str] = Field(default_factory=list)
    currencies: List[str] = Field(default_factory=list)
    records: int = 0
    included: int = 0
    warnings: List[str] = Field(default_factory=list)


class ColumnTotalResponse(BaseModel):
    column: str
    total: float
    total_formatted: str
    counted: int = 0
    skipped: int = 0


class HealthResponse(BaseModel):
    ok: bool = True
