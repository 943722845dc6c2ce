import logging

from fastapi import APIRouter

from app.dependencies import MakeWebhookDep, VerificationCallDep
from app.schemas.responses import ApiResponse, TriggerCallRequest, TriggeredCall

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/demo")


@router.post("/trigger-call", response_model=ApiResponse)
async def trigger_call(
    request: TriggerCallRequest,
    service: VerificationCallDep,
    make_webhook: MakeWebhookDep,
) -> ApiResponse:
    if make_webhook.enabled:
        logger.info("Spreadsheet storage enabled: %s", make_webhook.display_url)
    else:
        logger.warning("Spreadsheet storage disabled: MAKE_HOOK_URL not configured")

    logger.info("Triggering verification call for %s", request.name)
    record = await service.trigger_call(request.name, request.phone)

    return ApiResponse(
        message="Call initiated successfully. AI agent will verify name and phone number.",
        data=TriggeredCall(callId=record.call_id, name=record.name, phone=record.phone),
    )
