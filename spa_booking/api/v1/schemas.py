from pydantic import BaseModel, Field
from typing import Any


class CompleteRequestSchema(BaseModel):
    note: str | None = None


class CancelRequestSchema(BaseModel):
    reason: str | None = None


class PaymentSlipRequestSchema(BaseModel):
    slip_reference: str = Field(min_length=1)


class ForceStatusRequestSchema(BaseModel):
    status: str
    note: str | None = None


class ActionResponseSchema(BaseModel):
    success: bool = True
    booking_id: str | None = None
    booking: dict[str, Any] | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class ErrorDetailSchema(BaseModel):
    error: str
    message: str | None = None
