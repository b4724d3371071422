"""SQLModel database models for the historical store."""

from sqlmodel import Field, Index, SQLModel

from modelviz.models.domain.call_record import CallRecord
from modelviz.types import CallStatus, InputFormat


class CallRecordRow(SQLModel, table=True):
    """Persisted provider call, keyed by the record id."""

    __tablename__ = "call_record"
    __table_args__ = (
        Index("idx_call_record_timestamp", "timestamp"),  # Range scans, retention
        Index("idx_call_record_provider", "provider"),
        Index("idx_call_record_model", "model"),
        Index("idx_call_record_status", "status"),
        Index("idx_call_record_provider_timestamp", "provider", "timestamp"),
    )

    id: str = Field(primary_key=True, description="Record identifier")
    timestamp: int = Field(description="Milliseconds since epoch")
    provider: str = Field(description="Provider name")
    model: str = Field(description="Model name")
    input_format: str = Field(default=InputFormat.TEXT.value)
    latency_ms: float = Field(description="Latency in milliseconds")
    tokens_used: int = Field(default=0)
    prompt_tokens: int = Field(default=0)
    completion_tokens: int = Field(default=0)
    status: str = Field(description="success, error or timeout")
    error_message: str | None = Field(default=None)
    estimated_cost: float = Field(default=0.0, description="Estimated cost in USD")
    prompt_length: int = Field(default=0)
    response_length: int = Field(default=0)
    confidence: float | None = Field(default=None)

    @classmethod
    def from_record(cls, record: CallRecord) -> "CallRecordRow":
        return cls(
            id=record.id,
            timestamp=record.timestamp,
            provider=record.provider,
            model=record.model,
            input_format=InputFormat(record.input_format).value,
            latency_ms=record.latency_ms,
            tokens_used=record.tokens_used,
            prompt_tokens=record.prompt_tokens,
            completion_tokens=record.completion_tokens,
            status=CallStatus(record.status).value,
            error_message=record.error_message,
            estimated_cost=record.estimated_cost,
            prompt_length=record.prompt_length,
            response_length=record.response_length,
            confidence=record.confidence,
        )

    def to_record(self) -> CallRecord:
        return CallRecord(
            id=self.id,
            timestamp=self.timestamp,
            provider=self.provider,
            model=self.model,
            input_format=self.input_format,
            latency_ms=self.latency_ms,
            tokens_used=self.tokens_used,
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            status=self.status,
            error_message=self.error_message,
            estimated_cost=self.estimated_cost,
            prompt_length=self.prompt_length,
            response_length=self.response_length,
            confidence=self.confidence,
        )
