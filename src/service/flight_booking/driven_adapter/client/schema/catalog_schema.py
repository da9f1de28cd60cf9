from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AddonPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', coerce_numbers_to_str=True)

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices('_id', 'id'))
    code: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    amount: float = 0
    category: Optional[str] = None
    currency: Optional[str] = None
    active: bool = True
    valid_from: Optional[datetime] = Field(default=None, validation_alias='validFrom')
    valid_to: Optional[datetime] = Field(default=None, validation_alias='validTo')
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CouponPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', coerce_numbers_to_str=True)

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices('_id', 'id'))
    code: Optional[str] = None
    title: Optional[str] = None
    name: Optional[str] = None
    percent: Optional[float] = None
    amount: Optional[float] = None
    cap: Optional[float] = None
    min_fare: Optional[float] = Field(default=None, validation_alias='minFare')
    active: bool = True
    valid_from: Optional[datetime] = Field(default=None, validation_alias='validFrom')
    valid_to: Optional[datetime] = Field(default=None, validation_alias='validTo')
    metadata: Dict[str, Any] = Field(default_factory=dict)
