import logging
from urllib.parse import quote

import httpx

from app.exceptions.custom import ConfigurationError, NetworkError, RetellError
from app.mappers.phone import normalize_phone
from app.schemas.retell import CreatePhoneCallResponse, RetellAgent, RetellPhoneNumber

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.retellai.com"

NO_OUTBOUND_AGENT = "No outbound agent id set up for phone number"


def network_error_message(exc: Exception) -> str:
    return (
        f"Network error connecting to Retell API: {exc}\n\n"
        "Possible causes:\n"
        "1. No internet connection\n"
        "2. DNS resolution failure (cannot resolve api.retellai.com)\n"
        "3. Firewall or proxy blocking the connection\n"
        "4. Retell API might be temporarily unavailable\n\n"
        "Solutions:\n"
        "- Check your internet connection\n"
        "- Verify DNS settings\n"
        "- Check firewall/proxy settings\n"
        "- Try again in a few moments\n"
        "- Verify RETELL_API_BASE_URL environment variable if using a custom endpoint"
    )


def outbound_agent_message(provider_message: str, from_number: str, agent_id: str) -> str:
    return (
        f"Retell API error: {provider_message}\n\n"
        "SOLUTION: Link your phone number to your agent in Retell Dashboard:\n"
        "1. Go to https://retellai.com → Phone Numbers\n"
        f"2. Click on your phone number: {from_number}\n"
        f'3. Set "Outbound Agent" to: {agent_id}\n'
        "4. Save and try again.\n\n"
        "Alternatively, you can link it via API using:\n"
        f"PATCH /v2/update-phone-number/{quote(from_number, safe='')}\n"
        f'Body: {{ "outbound_agent_id": "{agent_id}" }}'
    )


def error_message(resp: httpx.Response) -> str:
    """Pull the most useful message out of a provider error response."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    if isinstance(data, str):
        return data
    return resp.text or f"HTTP {resp.status_code}"


class RetellService:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        from_number: str = "",
        country_code: str = "1",
    ):
        self._client = client
        self._api_key = api_key
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._from_number = from_number.strip()
        self._country_code = country_code
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if not self._api_key:
            raise ConfigurationError("RETELL_API_KEY is not configured")
        try:
            resp = await self._client.request(
                method, self._url(path), headers=self._headers, **kwargs
            )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise NetworkError(network_error_message(exc)) from exc

        if resp.status_code >= 400:
            raise RetellError(
                f"Retell API error: {error_message(resp)}", status_code=resp.status_code
            )
        return resp

    async def create_phone_call(
        self,
        agent_id: str,
        from_number: str,
        to_number: str,
        metadata: dict | None = None,
        dynamic_variables: dict[str, str] | None = None,
    ) -> CreatePhoneCallResponse:
        payload: dict = {
            "agent_id": agent_id,
            "from_number": from_number,
            "to_number": to_number,
        }
        if metadata:
            payload["metadata"] = metadata
        if dynamic_variables:
            payload["retell_llm_dynamic_variables"] = dynamic_variables

        logger.info("Creating phone call %s -> %s", from_number, to_number)
        try:
            resp = await self._request("POST", "/v2/create-phone-call", json=payload)
        except RetellError as exc:
            if NO_OUTBOUND_AGENT in exc.message:
                raise ConfigurationError(
                    outbound_agent_message(
                        exc.message.removeprefix("Retell API error: "), from_number, agent_id
                    )
                ) from exc
            raise

        data = resp.json()
        logger.info("Phone call created: call_id=%s", data.get("call_id"))
        return CreatePhoneCallResponse(**data)

    async def get_agent(self, agent_id: str) -> RetellAgent:
        resp = await self._request("GET", f"/v2/get-agent/{agent_id}")
        return RetellAgent(**resp.json())

    async def list_phone_numbers(self) -> list[RetellPhoneNumber]:
        resp = await self._request("GET", "/v2/list-phone-numbers")
        data = resp.json()
        items = data if isinstance(data, list) else (data or {}).get("phone_numbers") or []
        return [RetellPhoneNumber(**item) for item in items if isinstance(item, dict)]

    async def get_call(self, call_id: str) -> dict:
        resp = await self._request("GET", f"/v2/get-call/{call_id}")
        return resp.json()

    async def list_calls(
        self,
        limit: int | None = None,
        sort_order: str | None = None,
        call_statuses: list[str] | None = None,
    ) -> list[dict]:
        params: dict = {}
        if limit is not None:
            params["limit"] = limit
        if sort_order:
            params["sort_order"] = sort_order
        if call_statuses:
            params["filter_criteria"] = {"call_status": call_statuses}
        resp = await self._request("POST", "/v2/list-calls", json=params)
        data = resp.json()
        return data if isinstance(data, list) else (data or {}).get("calls", [])

    async def end_call(self, call_id: str) -> None:
        await self._request("PATCH", f"/v2/update-call/{call_id}", json={"end_call": True})
        logger.info("Hung up call %s", call_id)

    async def link_phone_number(self, phone_number: str, agent_id: str) -> str:
        normalized = normalize_phone(phone_number, self._country_code)
        path = f"/v2/update-phone-number/{quote(normalized, safe='')}"
        await self._request("PATCH", path, json={"outbound_agent_id": agent_id})
        logger.info("Linked phone number %s to agent %s", normalized, agent_id)
        return normalized

    async def resolve_from_number(self, agent_id: str, explicit: str | None = None) -> str:
        """Pick the caller number: explicit, configured default, agent record, inventory."""
        candidate = (explicit or "").strip() or self._from_number
        if candidate:
            return normalize_phone(candidate, self._country_code)

        try:
            agent = await self.get_agent(agent_id)
            if agent.phone_number:
                return normalize_phone(agent.phone_number, self._country_code)
        except (RetellError, NetworkError) as exc:
            logger.warning("Could not read phone number from agent %s: %s", agent_id, exc)

        try:
            numbers = await self.list_phone_numbers()
            for number in numbers:
                if number.value:
                    return normalize_phone(number.value, self._country_code)
        except (RetellError, NetworkError) as exc:
            logger.warning("Could not list Retell phone numbers: %s", exc)

        raise ConfigurationError(
            "from_number is required. Please provide it in params, set "
            "RETELL_FROM_NUMBER environment variable, or ensure your agent "
            "has a phone_number configured."
        )
