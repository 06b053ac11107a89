"""
CRM event → conversion event orchestration.

Received → mapped → resolving → (not found | built → dispatched). Every
outcome, including failures, comes back as a PipelineResult; nothing is
retried here.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leadbridge.db.repository import STORE_EXCEPTIONS
from leadbridge.errors import (
    ConfigurationError,
    DispatchError,
    MissingFields,
    MissingIdentity,
    StoreError,
)
from leadbridge.schemas.webhook import CrmContact, CrmWebhook, PipelineResult, PipelineStatus
from leadbridge.services.dispatcher import EventDispatcher
from leadbridge.services.payload import build_conversion_event
from leadbridge.services.resolver import resolve_lead
from leadbridge.services.vocabulary import map_crm_stage

logger = structlog.get_logger(__name__)


class ConversionPipeline:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: EventDispatcher,
    ) -> None:
        self._session_factory = session_factory
        self._dispatcher = dispatcher

    async def process(self, event: CrmWebhook) -> PipelineResult:
        stage = event.tag.name if event.tag else None
        if not stage:
            return PipelineResult(
                status=PipelineStatus.no_event_name,
                message="Webhook received without an event name.",
            )

        event_name = map_crm_stage(stage)
        try:
            contact = _require_contact(event)
        except MissingFields as e:
            return PipelineResult(
                status=PipelineStatus.missing_fields,
                message=str(e),
                event_name=event_name,
            )

        # The session lives only for the lookup; dispatch runs without it.
        # Connecting happens inside the block, so driver errors surface here too.
        try:
            async with self._session_factory() as session:
                lead = await resolve_lead(session, contact.email, contact.phone)
        except MissingIdentity:
            return PipelineResult(
                status=PipelineStatus.missing_identity,
                message="Email or phone is missing.",
                event_name=event_name,
            )
        except (StoreError, *STORE_EXCEPTIONS) as e:
            logger.error("pipeline.store_error", error=str(e.__cause__ or e))
            return PipelineResult(
                status=PipelineStatus.store_error,
                message="Lead lookup failed.",
                event_name=event_name,
            )

        if lead is None:
            logger.info("pipeline.lead_not_found", event_name=event_name)
            return PipelineResult(
                status=PipelineStatus.not_found,
                message="No imported lead matches this contact.",
                event_name=event_name,
            )

        conversion = build_conversion_event(lead, event_name)

        try:
            await self._dispatcher.dispatch(conversion)
        except ConfigurationError as e:
            logger.error("pipeline.configuration_error", error=str(e))
            return PipelineResult(
                status=PipelineStatus.configuration_error,
                message="Server configuration error.",
                event_name=event_name,
                lead_id=lead.external_lead_id,
            )
        except DispatchError as e:
            logger.error(
                "pipeline.dispatch_error",
                error=str(e),
                upstream_status=e.status_code,
                upstream_body=e.body,
                lead_id=lead.external_lead_id,
            )
            return PipelineResult(
                status=PipelineStatus.dispatch_error,
                message=str(e),
                event_name=event_name,
                lead_id=lead.external_lead_id,
                upstream_error=e.body,
            )

        logger.info(
            "pipeline.delivered",
            event_name=event_name,
            lead_id=lead.external_lead_id,
        )
        return PipelineResult(
            status=PipelineStatus.delivered,
            message="Conversion event sent.",
            event_name=event_name,
            lead_id=lead.external_lead_id,
        )


def _require_contact(event: CrmWebhook) -> CrmContact:
    if event.lead is None:
        raise MissingFields("Lead data is missing.")
    return event.lead
