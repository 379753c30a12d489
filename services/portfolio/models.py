from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class HoldingResponse(BaseModel):
    """
    Long-term holding row as listed by GET /allHoldings.
    """
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    qty: float
    avg: float
    price: float
    net: Optional[str] = None
    day: Optional[str] = None
    is_loss: bool = Field(default=False, serialization_alias="isLoss",
                          validation_alias=AliasChoices("is_loss", "isLoss"))


class PositionResponse(HoldingResponse):
    """
    Intraday position row as listed by GET /allPositions.
    """
    product: str
