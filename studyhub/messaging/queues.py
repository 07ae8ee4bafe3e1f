"""
Queue topology shared by the API process and the worker process.

One durable queue per job kind. Notification fan-out goes through the
topic exchange APP_EVENTS.
"""


class QueueName:
    FILE_PROCESS = "file_process"
    QUIZ_GENERATE = "quiz_generate"
    NOTIFICATION_SERVICE = "notification.service.queue"


class MessageType:
    FILE_PROCESS = "file-process"
    QUIZ_GENERATE = "quiz-generate"
    NOTIFICATION_SEND = "notification.send.v1"


class ExchangeName:
    APP_EVENTS = "app_events"
    DEAD_LETTER = "dlx"


class RoutingKey:
    NOTIFICATION_ALL = "notification.#"
    SUMMARY_READY = "notification.summary.ready"


# Message header carrying the redelivery count for bounded retries
RETRY_HEADER = "x-retry-count"


def dead_letter_queue_name(queue: str) -> str:
    return f"{queue}.dlq"
