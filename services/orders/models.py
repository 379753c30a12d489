from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class NewOrderRequest(BaseModel):
    """
    Body of POST /newOrder.

    The owner is never part of the body: unknown keys such as ``userId`` are
    dropped during validation.
    """
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1, max_length=64)
    qty: float = Field(gt=0)
    price: float = Field(ge=0)
    mode: str = Field(min_length=1, max_length=16)


class OrderResponse(BaseModel):
    """Stored order as returned by GET /allorders"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    owner_id: str = Field(serialization_alias="userId",
                          validation_alias=AliasChoices("owner_id", "userId"))
    instrument_name: str = Field(serialization_alias="name",
                                 validation_alias=AliasChoices("instrument_name", "name"))
    quantity: float = Field(serialization_alias="qty",
                            validation_alias=AliasChoices("quantity", "qty"))
    price: float
    mode: str
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt",
                                          validation_alias=AliasChoices("created_at", "createdAt"))
