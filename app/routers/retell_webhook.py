import logging
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Body
from fastapi.responses import JSONResponse

from app.dependencies import MakeWebhookDep, RetellWebhookDep
from app.exceptions.custom import MalformedWebhookError
from app.mappers.call_summary import NOT_VERIFIED, flatten_value
from app.schemas.responses import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/call")


@router.post("/retell/ai-wbh")
async def retell_webhook(
    payload: Annotated[dict[str, Any], Body()],
    service: RetellWebhookDep,
    make_webhook: MakeWebhookDep,
    background_tasks: BackgroundTasks,
) -> JSONResponse:
    try:
        outcome = await service.handle(payload)
    except MalformedWebhookError as exc:
        logger.warning("Rejected webhook without call id: %s", exc.message)
        return JSONResponse(status_code=400, content={"message": exc.message})
    except Exception:
        logger.exception("Retell webhook error")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    if outcome.summary is not None:
        # Runs after the response is produced; forward() never raises
        background_tasks.add_task(make_webhook.forward, outcome.summary)

    if outcome.hung_up:
        return JSONResponse(content={"msg": "OK", "action": "call_hung_up"})
    return JSONResponse(content={"msg": "OK"})


def synthetic_record(overrides: dict[str, Any] | None = None) -> dict:
    now = datetime.now(timezone.utc)
    record: dict = {
        "call_id": f"test_call_{int(now.timestamp() * 1000)}",
        "call_status": "ended",
        "name": "Test User",
        "phone": "+15555550100",
        "expected_name": "Test User",
        "expected_phone": "+15555550100",
        "from_number": "+15555550199",
        "to_number": "+15555550100",
        "duration_seconds": 0,
        "transcript": "",
        "call_summary": "Synthetic record sent from the test endpoint",
        "call_successful": False,
        "verified": False,
        "verification_status": NOT_VERIFIED,
    }
    for key, value in (overrides or {}).items():
        flatten_value(value, key, record)
    record["timestamp"] = now.isoformat()
    return record


@router.post("/retell/test/make-webhook", response_model=ApiResponse)
async def test_make_webhook(
    make_webhook: MakeWebhookDep,
    overrides: Annotated[dict[str, Any] | None, Body()] = None,
) -> ApiResponse:
    record = synthetic_record(overrides)
    await make_webhook.send(record)
    return ApiResponse(message="Test record sent to Make.com webhook", data=record)
