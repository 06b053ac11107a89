"""
Schemas for the outbound Conversions API event.
"""

from typing import Any

from pydantic import BaseModel, Field


class ConversionEvent(BaseModel):
    """One server-side event, as sent inside ``{"data": [...]}``."""

    event_name: str
    event_time: int  # Unix seconds
    action_source: str = "system_generated"
    user_data: dict[str, Any] = Field(default_factory=dict)
    custom_data: dict[str, Any] = Field(default_factory=dict)


class DispatchAck(BaseModel):
    """What the platform answered for an accepted event batch."""

    events_received: int | None = None
    fbtrace_id: str | None = None
    body: dict[str, Any] = Field(default_factory=dict)
