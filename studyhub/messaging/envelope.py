"""
Envelope Protocol - uniform message framing for every queue.

Wire shape (JSON, camelCase):
    {type, version, correlationId?, causationId?, source, timestamp, payload}

Each message kind is one pydantic model with a Literal ``type`` tag. Decoding
goes through a discriminated union, so an unknown tag is rejected instead of
being guessed at.
"""
import json
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ..core.config import SERVICE_NAME
from ..core.exceptions import EnvelopeError
from ..core.logging_config import get_logger
from .queues import MessageType

logger = get_logger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class WireModel(BaseModel):
    """Base for everything that crosses the broker."""
    model_config = ConfigDict(populate_by_name=True)


# Payloads

class FileProcessingJob(WireModel):
    """Summarize one stored file. ``source_url`` may be missing on legacy messages."""
    file_id: str = Field(validation_alias=_alias("fileId", "id", "file_id"), serialization_alias="fileId")
    source_url: Optional[str] = Field(
        None,
        validation_alias=_alias("sourceUrl", "cloudinaryUrl", "url", "source_url"),
        serialization_alias="sourceUrl",
    )
    user_id: Optional[str] = Field(None, validation_alias=_alias("userId", "user_id"), serialization_alias="userId")
    mime_type: Optional[str] = Field(None, validation_alias=_alias("mimeType", "mime_type"), serialization_alias="mimeType")


class QuizGenerationJob(FileProcessingJob):
    """Generate a multiple-choice quiz from one stored file."""
    num_questions: int = Field(
        10, ge=1, le=50,
        validation_alias=_alias("numQuestions", "num_questions"),
        serialization_alias="numQuestions",
    )
    difficulty: Literal["easy", "medium", "hard"] = "medium"

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class NotificationPayload(WireModel):
    """An email to render from a template and deliver."""
    template: Literal["verify-email", "reset-password", "summary-ready"]
    email: Union[str, List[str]]
    subject: str
    data: Dict[str, Any] = Field(default_factory=dict)

    def recipients(self) -> List[str]:
        return [self.email] if isinstance(self.email, str) else list(self.email)


# Envelopes

class EnvelopeBase(WireModel):
    type: str
    version: str = "1"
    correlation_id: Optional[str] = Field(
        None, validation_alias=_alias("correlationId", "correlation_id"), serialization_alias="correlationId"
    )
    causation_id: Optional[str] = Field(
        None, validation_alias=_alias("causationId", "causation_id"), serialization_alias="causationId"
    )
    source: str = Field(default_factory=lambda: SERVICE_NAME)
    timestamp: str = Field(default_factory=_utc_timestamp)

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_string(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value

    def to_json(self) -> str:
        """Serialize to the wire form shared by producers and consumers."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def message_ref(self) -> str:
        """Reference used as causationId by messages this one causes."""
        return f"{self.type}@{self.timestamp}"


class FileProcessEnvelope(EnvelopeBase):
    type: Literal["file-process"] = MessageType.FILE_PROCESS
    payload: FileProcessingJob


class QuizGenerateEnvelope(EnvelopeBase):
    type: Literal["quiz-generate"] = MessageType.QUIZ_GENERATE
    payload: QuizGenerationJob


class NotificationEnvelope(EnvelopeBase):
    type: Literal["notification.send.v1"] = MessageType.NOTIFICATION_SEND
    payload: NotificationPayload


Envelope = Annotated[
    Union[FileProcessEnvelope, QuizGenerateEnvelope, NotificationEnvelope],
    Field(discriminator="type"),
]

_envelope_adapter = TypeAdapter(Envelope)

ENVELOPE_TYPES = {
    MessageType.FILE_PROCESS: FileProcessEnvelope,
    MessageType.QUIZ_GENERATE: QuizGenerateEnvelope,
    MessageType.NOTIFICATION_SEND: NotificationEnvelope,
}


def create_envelope(
    message_type: str,
    payload: Union[BaseModel, Dict[str, Any]],
    correlation_id: Optional[str] = None,
    causation_id: Optional[str] = None,
    version: str = "1",
    source: Optional[str] = None,
) -> EnvelopeBase:
    """
    Build a typed envelope for publishing.

    Args:
        message_type: One of MessageType
        payload: Payload model or a dict in wire or field-name form
        correlation_id: Id shared by every message of one logical operation (generated if omitted)
        causation_id: Reference of the message that caused this one
        version: Payload schema version
        source: Producing service (defaults to SERVICE_NAME)

    Raises:
        EnvelopeError: If the type is unknown or the payload does not match it
    """
    envelope_cls = ENVELOPE_TYPES.get(message_type)
    if envelope_cls is None:
        raise EnvelopeError(f"Unknown envelope type: {message_type}")

    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True)

    try:
        return envelope_cls(
            payload=payload,
            version=version,
            correlation_id=correlation_id or str(uuid.uuid4()),
            causation_id=causation_id,
            source=source or SERVICE_NAME,
        )
    except ValidationError as e:
        raise EnvelopeError(f"Invalid payload for {message_type}: {e}") from e


def caused_by(parent: EnvelopeBase) -> Dict[str, Optional[str]]:
    """Tracing ids for a message published while handling ``parent``."""
    return {
        "correlation_id": parent.correlation_id,
        "causation_id": parent.message_ref(),
    }


def parse_envelope(raw: Union[bytes, str, Dict[str, Any]], legacy_type: Optional[str] = None) -> EnvelopeBase:
    """
    Decode a message body into a typed envelope.

    Args:
        raw: Message body (JSON bytes/str) or an already-decoded dict
        legacy_type: Type assumed for messages without a ``type`` field; such
                     messages may be ``{"payload": job}`` or a bare job object

    Returns:
        One of the envelope variants

    Raises:
        EnvelopeError: Malformed JSON, missing or unknown type, invalid payload
    """
    if isinstance(raw, (bytes, bytearray, str)):
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise EnvelopeError(f"Malformed message body: {e}") from e
    else:
        data = raw

    if not isinstance(data, dict):
        raise EnvelopeError(f"Envelope must be a JSON object, got {type(data).__name__}")

    if "type" not in data:
        if not legacy_type:
            raise EnvelopeError("Envelope is missing 'type'")
        if "payload" in data:
            data = {**data, "type": legacy_type}
        else:
            logger.debug(f"Wrapping bare payload as '{legacy_type}' envelope")
            data = {"type": legacy_type, "payload": data}

    try:
        return _envelope_adapter.validate_python(data)
    except ValidationError as e:
        raise EnvelopeError(f"Invalid envelope of type '{data.get('type')}': {e}") from e
