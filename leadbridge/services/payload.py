"""
Lead record → Conversions API event.

Identity fields leave the service only as SHA-256 hex digests of their
normalized form, each wrapped in a one-element list as CAPI expects.
Empty fields are left out of ``user_data`` entirely. The platform lead id
is not PII and goes in plaintext.
"""

import hashlib
import time
from collections.abc import Callable

from leadbridge.db.models import Lead
from leadbridge.schemas.conversion import ConversionEvent
from leadbridge.services.normalize import digits_only, normalize_email, normalize_text
from leadbridge.services.vocabulary import FIRST_TOUCH_EVENT

ACTION_SOURCE = "system_generated"

# Provenance tags on every event
EVENT_SOURCE = "crm"
LEAD_EVENT_SOURCE = "Greenn Sales"

# CAPI user_data key → (lead attribute, normalizer)
HASHED_FIELDS: tuple[tuple[str, str, Callable], ...] = (
    ("em", "email", normalize_email),
    ("ph", "phone", digits_only),
    ("fn", "first_name", normalize_text),
    ("ln", "last_name", normalize_text),
    ("db", "date_of_birth", digits_only),
    ("ct", "city", normalize_text),
    ("st", "region", normalize_text),
    ("zp", "postal_code", digits_only),
)

# Attribution copied verbatim into custom_data
ATTRIBUTION_FIELDS: tuple[str, ...] = (
    "campaign_id",
    "ad_id",
    "adset_id",
    "form_id",
    "platform",
    "is_organic",
    "lead_status",
)


def hash_value(normalized: str) -> str:
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def build_user_data(lead: Lead) -> dict:
    user_data: dict = {}
    for key, attribute, normalizer in HASHED_FIELDS:
        normalized = normalizer(getattr(lead, attribute))
        if normalized:
            user_data[key] = [hash_value(normalized)]
    if lead.external_lead_id:
        user_data["lead_id"] = lead.external_lead_id
    return user_data


def build_custom_data(lead: Lead) -> dict:
    custom_data = {"event_source": EVENT_SOURCE, "lead_event_source": LEAD_EVENT_SOURCE}
    for attribute in ATTRIBUTION_FIELDS:
        custom_data[attribute] = getattr(lead, attribute)
    return custom_data


def event_time_for(lead: Lead, event_name: str, now: int | None = None) -> int:
    """
    First-touch events keep the lead's creation time so late notifications
    still attribute correctly; everything else happens now.
    """
    if event_name == FIRST_TOUCH_EVENT and lead.created_time:
        return lead.created_time
    return now if now is not None else int(time.time())


def build_conversion_event(
    lead: Lead, event_name: str, *, now: int | None = None
) -> ConversionEvent:
    return ConversionEvent(
        event_name=event_name,
        event_time=event_time_for(lead, event_name, now),
        action_source=ACTION_SOURCE,
        user_data=build_user_data(lead),
        custom_data=build_custom_data(lead),
    )
