import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx
from httpx import Response

from app.exceptions.custom import ConfigurationError, InvalidRequestError, RetellError
from app.services.retell import DEFAULT_BASE_URL, RetellService
from app.services.verification_call import VerificationCallService

CREATE_CALL_URL = f"{DEFAULT_BASE_URL}/v2/create-phone-call"


@respx.mock
async def test_trigger_call_success():
    route = respx.post(CREATE_CALL_URL).mock(
        return_value=Response(201, json={"call_id": "call-123"})
    )

    async with httpx.AsyncClient() as client:
        retell = RetellService(client, "key", from_number="+13137662804")
        service = VerificationCallService(retell, "agent-1")
        record = await service.trigger_call("Jane Doe", "(313) 555-1234")

    assert record.call_id == "call-123"
    assert record.name == "Jane Doe"
    assert record.phone == "+13135551234"

    body = json.loads(route.calls.last.request.content)
    assert body["agent_id"] == "agent-1"
    assert body["from_number"] == "+13137662804"
    assert body["to_number"] == "+13135551234"
    assert body["metadata"] == {
        "name": "Jane Doe",
        "phone": "+13135551234",
        "verificationRequired": True,
    }
    assert body["retell_llm_dynamic_variables"] == {
        "full_name": "Jane Doe",
        "phone_number": "+13135551234",
        "expected_name": "Jane Doe",
        "expected_phone": "+13135551234",
    }


@pytest.mark.parametrize(
    "name, phone",
    [("", "3135551234"), ("Jane Doe", ""), (None, None), ("   ", "3135551234")],
)
async def test_trigger_call_requires_name_and_phone(name, phone):
    service = VerificationCallService(MagicMock(spec=RetellService), "agent-1")
    with pytest.raises(InvalidRequestError, match="Name and phone are required"):
        await service.trigger_call(name, phone)


async def test_trigger_call_rejects_bad_phone():
    service = VerificationCallService(MagicMock(spec=RetellService), "agent-1")
    with pytest.raises(InvalidRequestError, match="Invalid phone number format"):
        await service.trigger_call("Jane Doe", "call me maybe")


async def test_trigger_call_without_api_key():
    service = VerificationCallService(None, "agent-1")
    with pytest.raises(ConfigurationError, match="RETELL_API_KEY"):
        await service.trigger_call("Jane Doe", "3135551234")


async def test_trigger_call_without_agent():
    service = VerificationCallService(MagicMock(spec=RetellService), "")
    with pytest.raises(ConfigurationError, match="RETELL_AGENT_ID"):
        await service.trigger_call("Jane Doe", "3135551234")


async def test_trigger_call_provider_error_passes_through():
    retell = MagicMock(spec=RetellService)
    retell.resolve_from_number = AsyncMock(return_value="+13137662804")
    retell.create_phone_call = AsyncMock(side_effect=RetellError("Retell API error: nope", 400))

    service = VerificationCallService(retell, "agent-1")
    with pytest.raises(RetellError, match="nope"):
        await service.trigger_call("Jane Doe", "3135551234")


async def test_trigger_call_passes_explicit_from_number():
    retell = MagicMock(spec=RetellService)
    retell.resolve_from_number = AsyncMock(return_value="+13137669999")
    retell.create_phone_call = AsyncMock(return_value=MagicMock(call_id="call-9"))

    service = VerificationCallService(retell, "agent-1")
    record = await service.trigger_call("Jane Doe", "3135551234", from_number="+13137669999")

    retell.resolve_from_number.assert_awaited_once_with("agent-1", explicit="+13137669999")
    assert retell.create_phone_call.await_args.kwargs["from_number"] == "+13137669999"
    assert record.call_id == "call-9"
