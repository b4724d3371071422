"""Domain models for recorded provider calls."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from modelviz.types import CallStatus, InputFormat


class CallRecordBase(BaseModel):
    """Fields shared by recorded calls and their creation payload."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    provider: str = Field(min_length=1, description="Provider name (e.g. OpenAI)")
    model: str = Field(min_length=1, description="Model name (e.g. gpt-4)")
    input_format: InputFormat = Field(
        default=InputFormat.TEXT, description="Prompt format: json, text or code"
    )

    # Performance
    latency_ms: float = Field(ge=0, description="Call latency in milliseconds")
    tokens_used: int = Field(default=0, ge=0, description="Total tokens")
    prompt_tokens: int = Field(default=0, ge=0, description="Input tokens")
    completion_tokens: int = Field(default=0, ge=0, description="Output tokens")

    # Status
    status: CallStatus = Field(description="Call outcome")
    error_message: str | None = Field(
        default=None, description="Error details, only for failed calls"
    )

    # Cost and context
    estimated_cost: float = Field(default=0.0, ge=0, description="Cost in USD")
    prompt_length: int = Field(default=0, ge=0, description="Prompt characters")
    response_length: int = Field(default=0, ge=0, description="Response characters")
    confidence: float | None = Field(
        default=None, ge=0, le=1, description="Optional confidence score (0-1)"
    )

    @model_validator(mode="after")
    def _check_error_message(self) -> "CallRecordBase":
        if self.status == CallStatus.SUCCESS and self.error_message is not None:
            raise ValueError("error_message is only allowed for failed calls")
        return self

    @property
    def is_success(self) -> bool:
        return self.status == CallStatus.SUCCESS


class CallRecordCreate(CallRecordBase):
    """Payload for recording a call; id and timestamp are assigned on record."""

    timestamp: int | None = Field(
        default=None, ge=0, description="Milliseconds since epoch (defaults to now)"
    )


class CallRecord(CallRecordBase):
    """Immutable record of one provider call.

    Once persisted a record is never modified; corrections are new records.
    """

    id: str = Field(min_length=1, description="Unique record identifier")
    timestamp: int = Field(ge=0, description="Milliseconds since epoch")
