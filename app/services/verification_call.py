import logging

from app.exceptions.custom import ConfigurationError, InvalidRequestError
from app.mappers.phone import is_valid_phone, normalize_phone
from app.schemas.responses import CallRecord
from app.services.retell import RetellService

logger = logging.getLogger(__name__)


class VerificationCallService:
    def __init__(
        self,
        retell: RetellService | None,
        agent_id: str,
        country_code: str = "1",
    ):
        self._retell = retell
        self._agent_id = agent_id
        self._country_code = country_code

    async def trigger_call(
        self, name: str | None, phone: str | None, from_number: str | None = None
    ) -> CallRecord:
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name or not phone:
            raise InvalidRequestError("Name and phone are required")
        if not is_valid_phone(phone):
            raise InvalidRequestError("Invalid phone number format")

        if self._retell is None:
            raise ConfigurationError("RETELL_API_KEY is not configured")
        if not self._agent_id:
            raise ConfigurationError("RETELL_AGENT_ID is not configured")

        to_number = normalize_phone(phone, self._country_code)
        caller = await self._retell.resolve_from_number(self._agent_id, explicit=from_number)

        call = await self._retell.create_phone_call(
            agent_id=self._agent_id,
            from_number=caller,
            to_number=to_number,
            metadata={
                "name": name,
                "phone": to_number,
                "verificationRequired": True,
            },
            dynamic_variables={
                "full_name": name,
                "phone_number": to_number,
                "expected_name": name,
                "expected_phone": to_number,
            },
        )

        logger.info("Verification call %s placed to %s for %s", call.call_id, to_number, name)
        return CallRecord(call_id=call.call_id, name=name, phone=to_number)
