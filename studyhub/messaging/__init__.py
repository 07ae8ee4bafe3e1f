"""
Messaging layer: queue topology, envelope protocol and the kombu broker client.
"""
from .broker import BrokerClient
from .envelope import (
    EnvelopeBase,
    FileProcessEnvelope,
    FileProcessingJob,
    NotificationEnvelope,
    NotificationPayload,
    QuizGenerateEnvelope,
    QuizGenerationJob,
    caused_by,
    create_envelope,
    parse_envelope,
)
from .queues import ExchangeName, MessageType, QueueName, RoutingKey

__all__ = [
    "BrokerClient",
    "EnvelopeBase",
    "FileProcessEnvelope",
    "FileProcessingJob",
    "NotificationEnvelope",
    "NotificationPayload",
    "QuizGenerateEnvelope",
    "QuizGenerationJob",
    "caused_by",
    "create_envelope",
    "parse_envelope",
    "ExchangeName",
    "MessageType",
    "QueueName",
    "RoutingKey",
]
