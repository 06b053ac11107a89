"""
Identity resolution: CRM contact fields → stored lead.

CRM events carry no lead id, so the only link to an imported lead is the
email or phone. Either one matching is enough.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from leadbridge.db.models import Lead
from leadbridge.db.repository import STORE_EXCEPTIONS, find_leads_by_contact
from leadbridge.errors import MissingIdentity, StoreError
from leadbridge.services.normalize import digits_only, normalize_email

logger = structlog.get_logger(__name__)


async def resolve_lead(
    session: AsyncSession, email: str | None, phone: str | None
) -> Lead | None:
    """
    Find the stored lead for a contact, or None when there is none.

    Raises MissingIdentity, without touching the store, when neither key
    survives normalization. When several leads match, the repository's
    ordering picks one and a warning is logged.
    """
    email_key = normalize_email(email)
    phone_key = digits_only(phone)
    if not email_key and not phone_key:
        raise MissingIdentity("email or phone is required")

    try:
        matches = await find_leads_by_contact(session, email_key or None, phone_key or None)
    except STORE_EXCEPTIONS as e:
        raise StoreError("lead lookup failed") from e
    if not matches:
        return None

    chosen = matches[0]
    if len(matches) > 1:
        logger.warning(
            "resolver.ambiguous_match",
            chosen_lead_id=chosen.external_lead_id,
            other_lead_id=matches[1].external_lead_id,
        )
    return chosen
