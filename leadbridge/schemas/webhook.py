"""
Schemas for POST /webhook.

The CRM sends more than this; unknown keys are ignored.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class CrmTag(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: str | None = None


class CrmContact(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    email: str | None = None
    phone: str | None = None


class CrmWebhook(BaseModel):
    """Stage-change notification from the CRM."""

    model_config = ConfigDict(extra="ignore")

    tag: CrmTag | None = None
    lead: CrmContact | None = None

    @field_validator("tag", mode="before")
    @classmethod
    def _malformed_tag_has_no_name(cls, value):
        # A tag that is not an object carries no stage label.
        if value is not None and not isinstance(value, (dict, CrmTag)):
            return None
        return value


class PipelineStatus(str, Enum):
    delivered = "delivered"
    no_event_name = "no_event_name"
    not_found = "not_found"
    missing_fields = "missing_fields"
    missing_identity = "missing_identity"
    configuration_error = "configuration_error"
    store_error = "store_error"
    dispatch_error = "dispatch_error"


HTTP_STATUS_BY_PIPELINE_STATUS: dict[PipelineStatus, int] = {
    PipelineStatus.delivered: 200,
    PipelineStatus.no_event_name: 200,
    PipelineStatus.not_found: 200,
    PipelineStatus.missing_fields: 400,
    PipelineStatus.missing_identity: 400,
    PipelineStatus.configuration_error: 500,
    PipelineStatus.store_error: 500,
    PipelineStatus.dispatch_error: 500,
}


class PipelineResult(BaseModel):
    """Terminal outcome of one CRM event."""

    status: PipelineStatus
    message: str
    event_name: str | None = None
    lead_id: str | None = None
    upstream_error: Any = None

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_PIPELINE_STATUS[self.status]
