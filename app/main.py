import logging
import sys
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings
from app.exceptions.custom import (
    ConfigurationError,
    InvalidRequestError,
    MakeWebhookError,
    MalformedWebhookError,
    NetworkError,
    RetellError,
)
from app.exceptions.handlers import (
    configuration_error_handler,
    http_exception_handler,
    invalid_request_error_handler,
    make_webhook_error_handler,
    malformed_webhook_error_handler,
    network_error_handler,
    request_validation_error_handler,
    retell_error_handler,
    unhandled_error_handler,
)
from app.routers.demo import router as demo_router
from app.routers.health import router as health_router
from app.routers.retell_webhook import router as retell_webhook_router
from app.services.make_webhook import MakeWebhookService
from app.services.retell import RetellService
from app.services.retell_webhook import RetellWebhookService
from app.services.verification_call import VerificationCallService

logger = logging.getLogger(__name__)

# Import-time settings only configure CORS and run(); services load theirs in lifespan
_settings = Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        retell: RetellService | None = None
        if settings.retell_api_key:
            retell = RetellService(
                client,
                settings.retell_api_key,
                base_url=settings.retell_api_base_url,
                from_number=settings.retell_from_number,
                country_code=settings.default_country_code,
            )
        else:
            logger.warning("RETELL_API_KEY is not configured; calls cannot be placed")

        make_webhook = MakeWebhookService(client, settings.make_hook_url)
        if not make_webhook.enabled:
            logger.warning("MAKE_HOOK_URL is not configured; spreadsheet storage disabled")

        app.state.expose_errors = settings.node_env == "development"
        app.state.make_webhook_service = make_webhook
        app.state.verification_call_service = VerificationCallService(
            retell,
            settings.retell_agent_id,
            country_code=settings.default_country_code,
        )
        app.state.retell_webhook_service = RetellWebhookService(
            retell,
            debug=settings.debug_webhook,
            name_min_length=settings.name_mismatch_min_length,
            phone_min_length=settings.phone_mismatch_min_length,
        )

        logger.info("Environment: %s", settings.node_env)
        logger.info("Webhook endpoint: /api/call/retell/ai-wbh")
        yield


app = FastAPI(title="Retell Verification Relay", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(InvalidRequestError, invalid_request_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(MalformedWebhookError, malformed_webhook_error_handler)
app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(NetworkError, network_error_handler)
app.add_exception_handler(RetellError, retell_error_handler)
app.add_exception_handler(MakeWebhookError, make_webhook_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(health_router)
app.include_router(demo_router)
app.include_router(retell_webhook_router)


def run() -> None:
    uvicorn.run("app.main:app", host="0.0.0.0", port=_settings.port)
