"""
POST /webhook — CRM stage change → Conversions API event.

Always answers with the pipeline's terminal status; "not found" and
"no event name" are 200 so the CRM does not keep redelivering them.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from leadbridge.deps import get_pipeline
from leadbridge.schemas.webhook import CrmWebhook, PipelineResult, PipelineStatus
from leadbridge.services.pipeline import ConversionPipeline

router = APIRouter(tags=["webhook"])
logger = structlog.get_logger(__name__)


@router.post("/webhook", response_model=PipelineResult)
async def crm_webhook(request: Request, pipeline: ConversionPipeline = Depends(get_pipeline)):
    logger.info("webhook.received")

    try:
        payload = await request.json()
        event = CrmWebhook.model_validate(payload)
    except (ValueError, ValidationError):
        result = PipelineResult(
            status=PipelineStatus.missing_fields,
            message="Payload must be a JSON object with tag and lead.",
        )
    else:
        result = await pipeline.process(event)

    return JSONResponse(
        status_code=result.http_status,
        content=result.model_dump(mode="json", exclude_none=True),
    )
