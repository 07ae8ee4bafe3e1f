import pytest

from studyhub.core.exceptions import PermanentJobError, RetryableJobError
from studyhub.messaging.envelope import create_envelope
from studyhub.messaging.queues import ExchangeName, MessageType, RoutingKey
from studyhub.services.mail import EmailProvider, EmailSendResult, JinjaTemplateRenderer
from studyhub.services.mail.smtp_provider import SMTPEmailProvider
from studyhub.services.notification_service import NotificationService, publish_notification


class OutboxProvider(EmailProvider):
    name = "outbox"

    def __init__(self, results=None):
        self.sent = []
        self.results = results or {}

    async def send_email(self, to, subject, html_content, text_content):
        self.sent.append({"to": to, "subject": subject, "html": html_content, "text": text_content})
        return self.results.get(to, EmailSendResult(success=True))


def notification(template="summary-ready", email="ada@example.com", data=None):
    return create_envelope(
        MessageType.NOTIFICATION_SEND,
        {"template": template, "email": email, "subject": "Your summary is ready", "data": data or {}},
    )


@pytest.mark.asyncio
async def test_summary_ready_email_is_rendered_and_sent():
    outbox = OutboxProvider()
    service = NotificationService(JinjaTemplateRenderer(), outbox)

    await service.handle(notification(data={"name": "Ada", "file_name": "cells.pdf", "ai_match_score": 0.42}))

    [mail] = outbox.sent
    assert mail["to"] == "ada@example.com"
    assert "cells.pdf" in mail["html"]
    assert "Match score: 42%" in mail["text"]
    assert "<" not in mail["text"]


@pytest.mark.asyncio
async def test_every_recipient_gets_a_copy():
    outbox = OutboxProvider()
    service = NotificationService(JinjaTemplateRenderer(), outbox)

    await service.handle(notification(email=["a@example.com", "b@example.com"], data={"file_name": "x.pdf"}))

    assert [m["to"] for m in outbox.sent] == ["a@example.com", "b@example.com"]


@pytest.mark.asyncio
async def test_template_variables_are_escaped():
    outbox = OutboxProvider()
    service = NotificationService(JinjaTemplateRenderer(), outbox)

    await service.handle(notification(data={"file_name": "<script>x</script>.pdf"}))

    assert "<script>" not in outbox.sent[0]["html"]


@pytest.mark.asyncio
async def test_transient_send_failure_is_retryable():
    outbox = OutboxProvider({"ada@example.com": EmailSendResult(False, "timed out", retryable=True)})
    service = NotificationService(JinjaTemplateRenderer(), outbox)

    with pytest.raises(RetryableJobError):
        await service.handle(notification(data={"file_name": "x.pdf"}))


@pytest.mark.asyncio
async def test_rejected_recipient_is_permanent():
    outbox = OutboxProvider({"ada@example.com": EmailSendResult(False, "mailbox unavailable")})
    service = NotificationService(JinjaTemplateRenderer(), outbox)

    with pytest.raises(PermanentJobError):
        await service.handle(notification(data={"file_name": "x.pdf"}))


@pytest.mark.asyncio
async def test_missing_template_is_permanent(tmp_path):
    service = NotificationService(JinjaTemplateRenderer(template_dir=tmp_path), OutboxProvider())

    with pytest.raises(PermanentJobError):
        await service.handle(notification())


def test_html_to_text():
    html = "<h2>Hello</h2><p>Tom &amp; Jerry<br>line two</p>"
    assert JinjaTemplateRenderer.html_to_text(html) == "Hello\nTom & Jerry\nline two"


def test_smtp_message_has_text_and_html_parts():
    provider = SMTPEmailProvider(from_email="no-reply@studyhub.test", from_name="StudyHub")
    msg = provider._build_message("ada@example.com", "Hi", "<p>Hi</p>", "Hi")

    assert msg["From"] == "StudyHub <no-reply@studyhub.test>"
    assert [part.get_content_type() for part in msg.iter_parts()] == ["text/plain", "text/html"]


def test_publish_notification_goes_to_app_events():
    published = []

    class RecordingBroker:
        def publish_event(self, exchange, routing_key, envelope):
            published.append((exchange, routing_key, envelope))

    parent = create_envelope(MessageType.FILE_PROCESS, {"fileId": "f1"}, correlation_id="corr-1")
    [envelope] = publish_notification(
        RecordingBroker(), RoutingKey.SUMMARY_READY, "summary-ready", "ada@example.com", "Ready", parent=parent
    )

    assert published == [(ExchangeName.APP_EVENTS, RoutingKey.SUMMARY_READY, envelope)]
    assert envelope.correlation_id == "corr-1"


@pytest.mark.asyncio
async def test_retry_after_transient_failure_only_resends_failed_recipient():
    published = []

    class RecordingBroker:
        def publish_event(self, exchange, routing_key, envelope):
            published.append(envelope)

    publish_notification(
        RecordingBroker(),
        RoutingKey.SUMMARY_READY,
        "summary-ready",
        ["a@example.com", "b@example.com"],
        "Ready",
        data={"file_name": "x.pdf"},
    )
    assert [e.payload.recipients() for e in published] == [["a@example.com"], ["b@example.com"]]

    outbox = OutboxProvider({"b@example.com": EmailSendResult(False, "timed out", retryable=True)})
    service = NotificationService(JinjaTemplateRenderer(), outbox)
    await service.handle(published[0])
    with pytest.raises(RetryableJobError):
        await service.handle(published[1])

    outbox.results = {}
    await service.handle(published[1])

    assert [m["to"] for m in outbox.sent] == ["a@example.com", "b@example.com", "b@example.com"]
