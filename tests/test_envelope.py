import json

import pytest

from studyhub.core.exceptions import EnvelopeError
from studyhub.messaging.envelope import (
    FileProcessEnvelope,
    FileProcessingJob,
    NotificationEnvelope,
    QuizGenerateEnvelope,
    caused_by,
    create_envelope,
    parse_envelope,
)
from studyhub.messaging.queues import MessageType


def test_create_envelope_fills_tracing_fields():
    job = FileProcessingJob(file_id="f1", source_url="http://files.test/a.pdf", user_id="u1")
    envelope = create_envelope(MessageType.FILE_PROCESS, job)

    assert isinstance(envelope, FileProcessEnvelope)
    assert envelope.correlation_id
    assert envelope.version == "1"
    assert envelope.timestamp.endswith("Z")


def test_wire_form_is_camel_case():
    envelope = create_envelope(
        MessageType.FILE_PROCESS,
        {"fileId": "f1", "sourceUrl": "http://files.test/a.pdf", "mimeType": "application/pdf"},
        correlation_id="corr-1",
    )
    wire = json.loads(envelope.to_json())

    assert wire["type"] == "file-process"
    assert wire["correlationId"] == "corr-1"
    assert wire["payload"] == {"fileId": "f1", "sourceUrl": "http://files.test/a.pdf", "mimeType": "application/pdf"}
    assert "causationId" not in wire


def test_parse_returns_the_matching_variant():
    envelope = create_envelope(
        MessageType.QUIZ_GENERATE,
        {"fileId": "f1", "sourceUrl": "http://x", "numQuestions": 5, "difficulty": "HARD"},
    )
    parsed = parse_envelope(envelope.to_json().encode())

    assert isinstance(parsed, QuizGenerateEnvelope)
    assert parsed.payload.num_questions == 5
    assert parsed.payload.difficulty == "hard"
    assert parsed == envelope


def test_unknown_type_is_rejected():
    with pytest.raises(EnvelopeError):
        parse_envelope(json.dumps({"type": "file-delete", "payload": {"fileId": "f1"}}))


def test_missing_type_without_legacy_fallback_is_rejected():
    with pytest.raises(EnvelopeError):
        parse_envelope(json.dumps({"payload": {"fileId": "f1"}}))


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'"text"'])
def test_malformed_bodies_are_rejected(body):
    with pytest.raises(EnvelopeError):
        parse_envelope(body)


def test_bare_legacy_payload_is_wrapped():
    parsed = parse_envelope(
        json.dumps({"id": "f1", "cloudinaryUrl": "http://files.test/a.pdf"}),
        legacy_type=MessageType.FILE_PROCESS,
    )

    assert isinstance(parsed, FileProcessEnvelope)
    assert parsed.payload.file_id == "f1"
    assert parsed.payload.source_url == "http://files.test/a.pdf"


def test_legacy_message_may_omit_source_url():
    parsed = parse_envelope(json.dumps({"fileId": "f1"}), legacy_type=MessageType.FILE_PROCESS)
    assert parsed.payload.source_url is None


def test_invalid_payload_is_rejected():
    with pytest.raises(EnvelopeError):
        create_envelope(MessageType.QUIZ_GENERATE, {"fileId": "f1", "numQuestions": 0})


def test_notification_recipients_accept_one_or_many():
    single = create_envelope(
        MessageType.NOTIFICATION_SEND,
        {"template": "verify-email", "email": "a@example.com", "subject": "Verify"},
    )
    many = create_envelope(
        MessageType.NOTIFICATION_SEND,
        {"template": "verify-email", "email": ["a@example.com", "b@example.com"], "subject": "Verify"},
    )

    assert isinstance(single, NotificationEnvelope)
    assert single.payload.recipients() == ["a@example.com"]
    assert many.payload.recipients() == ["a@example.com", "b@example.com"]


def test_caused_by_keeps_correlation_and_points_at_parent():
    parent = create_envelope(MessageType.FILE_PROCESS, {"fileId": "f1"}, correlation_id="corr-9")
    child = create_envelope(
        MessageType.NOTIFICATION_SEND,
        {"template": "summary-ready", "email": "a@example.com", "subject": "Ready"},
        **caused_by(parent),
    )

    assert child.correlation_id == "corr-9"
    assert child.causation_id == parent.message_ref()
