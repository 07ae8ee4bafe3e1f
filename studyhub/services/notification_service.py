"""
Notification Service - consumes ``notification.send.v1`` envelopes and emails
the rendered template to every recipient.

publish_notification emits one envelope per address, so the bounded retry of a
transient SMTP failure never re-sends to recipients already served.
"""
from typing import Any, Dict, List, Optional, Union

from ..core.exceptions import PermanentJobError, RetryableJobError
from ..core.logging_config import get_logger
from ..messaging.broker import BrokerClient
from ..messaging.envelope import EnvelopeBase, NotificationEnvelope, NotificationPayload, caused_by, create_envelope
from ..messaging.queues import ExchangeName, MessageType
from .mail import EmailProvider, JinjaTemplateRenderer

logger = get_logger(__name__)


class NotificationService:
    """Renders and delivers notification emails."""

    def __init__(self, renderer: JinjaTemplateRenderer, provider: EmailProvider):
        self.renderer = renderer
        self.provider = provider

    async def handle(self, envelope: NotificationEnvelope) -> None:
        """
        Deliver one notification.

        Raises:
            RetryableJobError: A recipient failed with a transient SMTP error
            PermanentJobError: Missing template or a permanent SMTP failure
        """
        payload = envelope.payload
        rendered = await self.renderer.render(payload.template, payload.data)

        failures = []
        retryable = False
        for recipient in payload.recipients():
            result = await self.provider.send_email(
                to=recipient,
                subject=payload.subject,
                html_content=rendered.html_content,
                text_content=rendered.text_content,
            )
            if not result.success:
                failures.append(f"{recipient}: {result.error_message}")
                retryable = retryable or result.retryable

        if failures:
            message = f"Failed to send '{payload.template}': {'; '.join(failures)}"
            if retryable:
                raise RetryableJobError(message)
            raise PermanentJobError(message)

        logger.info(
            f"Sent '{payload.template}' to {len(payload.recipients())} recipient(s) "
            f"(correlation_id={envelope.correlation_id})"
        )


def publish_notification(
    broker: BrokerClient,
    routing_key: str,
    template: str,
    email: Union[str, List[str]],
    subject: str,
    data: Optional[Dict[str, Any]] = None,
    parent: Optional[EnvelopeBase] = None,
) -> List[EnvelopeBase]:
    """
    Publish notification events on the app_events exchange, one per recipient.

    A transient failure for one address then only redelivers that address.

    Args:
        parent: Envelope being handled, if any; every event keeps its correlation id

    Returns:
        The published envelopes, in recipient order
    """
    recipients = [email] if isinstance(email, str) else list(email)
    tracing = caused_by(parent) if parent is not None else {}
    published = []
    for recipient in recipients:
        payload = NotificationPayload(template=template, email=recipient, subject=subject, data=data or {})
        envelope = create_envelope(MessageType.NOTIFICATION_SEND, payload, **tracing)
        broker.publish_event(ExchangeName.APP_EVENTS, routing_key, envelope)
        published.append(envelope)
    return published
