from pydantic import BaseModel, ConfigDict


class CreatePhoneCallResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    call_id: str
    call_status: str | None = None
    agent_id: str | None = None
    from_number: str | None = None
    to_number: str | None = None


class RetellAgent(BaseModel):
    model_config = ConfigDict(extra="allow")

    agent_id: str | None = None
    agent_name: str | None = None
    phone_number: str | None = None


class RetellPhoneNumber(BaseModel):
    model_config = ConfigDict(extra="allow")

    phone_number: str | None = None
    number: str | None = None
    outbound_agent_id: str | None = None

    @property
    def value(self) -> str | None:
        return self.phone_number or self.number


class WebhookEvent(BaseModel):
    """Canonical view of one inbound provider webhook delivery."""

    event: str | None = None
    call_id: str
    call_status: str | None = None
    transcript: str | None = None
    conversation_state: dict | None = None
    function_call: dict | None = None
    metadata: dict | None = None
    dynamic_variables: dict | None = None
    call_analysis: dict | None = None
    duration_ms: float | None = None
    from_number: str | None = None
    to_number: str | None = None
