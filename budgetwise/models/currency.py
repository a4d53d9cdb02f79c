from __future__ import annotations
from datetime import datetime
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class ConversionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    converted_amount: float = Field(..., alias="convertedAmount")
    rate: float = Field(..., gt=0)
    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")


class RatesOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base: str
    rates: Dict[str, float]
    fetched_at: datetime = Field(..., alias="fetchedAt")
    expires_at: datetime = Field(..., alias="expiresAt")


class ErrorOut(BaseModel):
    error: str
