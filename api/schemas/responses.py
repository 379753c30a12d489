from pydantic import BaseModel, Field
from typing import Optional, Any, Dict
from datetime import datetime, timezone
from enum import Enum


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. {"message": "Order saved!"}"""
    message: str


class ErrorResponse(BaseModel):
    """Error response model"""
    message: str
    details: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    environment: str
    database: HealthStatus
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
