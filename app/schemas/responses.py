from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    success: bool = True
    message: str
    data: Any = None


class TriggerCallRequest(BaseModel):
    name: str | None = ""
    phone: str | None = ""


class CallRecord(BaseModel):
    call_id: str
    name: str
    phone: str


class TriggeredCall(BaseModel):
    callId: str
    name: str
    phone: str
    status: str = "initiated"


class HealthResponse(BaseModel):
    success: bool = True
    status: str = "healthy"
    timestamp: datetime
