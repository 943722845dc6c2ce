from typing import Annotated

from fastapi import Depends, Request

from app.services.make_webhook import MakeWebhookService
from app.services.retell_webhook import RetellWebhookService
from app.services.verification_call import VerificationCallService


def get_verification_call_service(request: Request) -> VerificationCallService:
    return request.app.state.verification_call_service


def get_retell_webhook_service(request: Request) -> RetellWebhookService:
    return request.app.state.retell_webhook_service


def get_make_webhook_service(request: Request) -> MakeWebhookService:
    return request.app.state.make_webhook_service


VerificationCallDep = Annotated[VerificationCallService, Depends(get_verification_call_service)]
RetellWebhookDep = Annotated[RetellWebhookService, Depends(get_retell_webhook_service)]
MakeWebhookDep = Annotated[MakeWebhookService, Depends(get_make_webhook_service)]
