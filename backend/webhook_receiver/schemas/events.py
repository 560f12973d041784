from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Left undecoded; its shape depends on the event type.
    raw: dict[str, Any] = Field(..., alias="object")


class VerifiedEvent(BaseModel):
    """A provider event envelope whose signature has been checked."""

    id: str = Field(..., description="Provider event ID")
    type: str = Field(..., description="Event type, e.g. payment_intent.succeeded")
    created: int | None = None
    livemode: bool = False
    api_version: str | None = None
    data: EventData


class PaymentIntentRecord(BaseModel, extra="ignore", strict=True):
    id: str
    amount: int | None = None
    currency: str | None = None
    status: str | None = None
