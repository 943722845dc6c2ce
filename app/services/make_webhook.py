import logging

import httpx

from app.exceptions.custom import ConfigurationError, MakeWebhookError

logger = logging.getLogger(__name__)


def _truncate(text: str, max_len: int = 50) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


class MakeWebhookService:
    """Posts flat call summaries to a Make.com hook that appends spreadsheet rows."""

    def __init__(self, client: httpx.AsyncClient, hook_url: str = ""):
        self._client = client
        self._hook_url = hook_url.strip()

    @property
    def enabled(self) -> bool:
        return bool(self._hook_url)

    @property
    def display_url(self) -> str:
        return _truncate(self._hook_url)

    async def send(self, payload: dict) -> int:
        if not self.enabled:
            raise ConfigurationError("MAKE_HOOK_URL is not configured")

        logger.info(
            "Sending call %s to Make.com webhook %s",
            payload.get("call_id"),
            self.display_url,
        )
        try:
            resp = await self._client.post(self._hook_url, json=payload)
        except httpx.HTTPError as exc:
            raise MakeWebhookError(f"Make.com webhook request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise MakeWebhookError(
                f"HTTP {resp.status_code}: {resp.reason_phrase}",
                status_code=resp.status_code,
            )

        logger.info("Stored call %s in spreadsheet (status=%d)", payload.get("call_id"), resp.status_code)
        return resp.status_code

    async def forward(self, payload: dict) -> bool:
        """Best-effort delivery; failures are logged and never raised."""
        if not self.enabled:
            logger.info("Spreadsheet storage disabled: MAKE_HOOK_URL not configured")
            return False
        try:
            await self.send(payload)
        except MakeWebhookError as exc:
            logger.error(
                "Failed to store call %s in spreadsheet: %s",
                payload.get("call_id"),
                exc.message,
            )
            return False
        return True
