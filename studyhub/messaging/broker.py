"""
Message Broker Client - one shared kombu connection per process.

Both processes build a BrokerClient in their composition root and hand it to
the services that need it:
- The API process publishes jobs (from a thread executor).
- The worker process registers consumers and drains deliveries one at a time.

Acknowledgment policy for every consumer:
- handler returns            -> ack
- RetryableJobError          -> republish with x-retry-count + 1, then ack
                                (reject once BROKER_MAX_RETRIES is reached)
- EnvelopeError / any other  -> reject without requeue (dead-letter)
"""
import asyncio
import inspect
import socket
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from kombu import Connection, Consumer, Exchange, Producer, Queue
from kombu.exceptions import OperationalError

from ..core.config import (
    BROKER_CONNECT_RETRIES,
    BROKER_MAX_RETRIES,
    BROKER_PUBLISH_RETRIES,
    BROKER_RETRY_INTERVAL_MAX,
    BROKER_RETRY_INTERVAL_START,
    BROKER_RETRY_INTERVAL_STEP,
    BROKER_URL,
)
from ..core.exceptions import (
    BrokerConnectionError,
    BrokerUnavailableError,
    EnvelopeError,
    RetryableJobError,
)
from ..core.logging_config import get_logger
from .envelope import EnvelopeBase, parse_envelope
from .queues import RETRY_HEADER, ExchangeName, dead_letter_queue_name

logger = get_logger(__name__)

PERSISTENT = 2
CONTENT_TYPE = "application/json"

Handler = Callable[[EnvelopeBase], Any]


@dataclass
class ConsumerRegistration:
    queue: str
    handler: Handler
    legacy_type: Optional[str] = None
    accept: Optional[Tuple[str, ...]] = None
    consumer: Optional[Consumer] = field(default=None, repr=False)


class BrokerClient:
    """
    Thin wrapper over a kombu connection.

    Declarations are idempotent and remembered, so a reconnect can replay them.
    """

    def __init__(
        self,
        url: str = BROKER_URL,
        connect_retries: int = BROKER_CONNECT_RETRIES,
        publish_retries: int = BROKER_PUBLISH_RETRIES,
        max_retries: int = BROKER_MAX_RETRIES,
        interval_start: float = BROKER_RETRY_INTERVAL_START,
        interval_step: float = BROKER_RETRY_INTERVAL_STEP,
        interval_max: float = BROKER_RETRY_INTERVAL_MAX,
    ):
        self.url = url
        self.connect_retries = connect_retries
        self.publish_retries = publish_retries
        self.max_retries = max_retries
        self.interval_start = interval_start
        self.interval_step = interval_step
        self.interval_max = interval_max

        self._connection: Optional[Connection] = None
        self._channel = None
        self._producer: Optional[Producer] = None
        # Re-entrant: handlers publish follow-up messages from inside a delivery
        self._lock = threading.RLock()
        self._queues: Dict[str, Queue] = {}
        self._bindings: List[Queue] = []
        self._registrations: List[ConsumerRegistration] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stopped = threading.Event()

    # Connection lifecycle

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and bool(self._connection.connected)

    def connect(self, max_retries: Optional[int] = None) -> None:
        """
        Open the shared connection, retrying with exponential backoff.

        Queues, bindings and consumers registered earlier are declared again
        on the new channel.

        Args:
            max_retries: Attempts after the first; defaults to ``connect_retries``

        Raises:
            BrokerConnectionError: When every attempt failed
        """
        with self._lock:
            if self.is_connected:
                return

            connection = Connection(self.url)

            def _log_retry(exc, interval):
                logger.warning(f"Broker connection failed ({exc}), retrying in {interval:.1f}s")

            try:
                connection.ensure_connection(
                    errback=_log_retry,
                    max_retries=self.connect_retries if max_retries is None else max_retries,
                    interval_start=self.interval_start,
                    interval_step=self.interval_step,
                    interval_max=self.interval_max,
                )
            except (OperationalError, OSError) as e:
                connection.release()
                logger.error(f"Could not connect to broker at {connection.as_uri()}: {e}")
                raise BrokerConnectionError(f"Could not connect to broker: {e}") from e

            self._connection = connection
            self._channel = connection.channel()
            self._producer = Producer(self._channel)
            logger.info(f"Connected to broker at {connection.as_uri()}")

            for queue in list(self._queues.values()) + self._bindings:
                queue.bind(self._channel).declare()
            for registration in self._registrations:
                self._start_consumer(registration)

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        with self._lock:
            for registration in self._registrations:
                if registration.consumer is not None:
                    try:
                        registration.consumer.cancel()
                    except (OperationalError, OSError) as e:
                        logger.debug(f"Ignoring consumer cancel error on close: {e}")
                    registration.consumer = None
            if self._connection is not None:
                self._connection.release()
                logger.info("Broker connection closed")
            self._connection = None
            self._channel = None
            self._producer = None
        if self._loop is not None:
            self._loop.close()
            self._loop = None

    def _drop_connection(self) -> None:
        """Release a broken connection so the next connect() starts clean."""
        with self._lock:
            for registration in self._registrations:
                registration.consumer = None
            if self._connection is not None:
                try:
                    self._connection.release()
                except (OperationalError, OSError) as e:
                    logger.debug(f"Ignoring release error on a broken connection: {e}")
            self._connection = None
            self._channel = None
            self._producer = None

    def _require_channel(self):
        if not self.is_connected or self._channel is None:
            raise BrokerUnavailableError("Broker is not connected")
        return self._channel

    # Topology

    def declare_queue(self, name: str, durable: bool = True, dead_letter: bool = True) -> Queue:
        """
        Declare a work queue on the default exchange (idempotent).

        With ``dead_letter`` the queue routes rejected messages to the ``dlx``
        exchange, which feeds ``<name>.dlq``. While disconnected the queue is
        only remembered and gets declared by the next connect().
        """
        with self._lock:
            if name in self._queues:
                return self._queues[name]

            arguments = None
            if dead_letter:
                dlx = Exchange(ExchangeName.DEAD_LETTER, type="direct", durable=True)
                dlq = Queue(dead_letter_queue_name(name), exchange=dlx, routing_key=name, durable=True)
                self._declare(dlq)
                self._bindings.append(dlq)
                arguments = {
                    "x-dead-letter-exchange": ExchangeName.DEAD_LETTER,
                    "x-dead-letter-routing-key": name,
                }

            queue = Queue(
                name,
                exchange=Exchange(""),
                routing_key=name,
                durable=durable,
                queue_arguments=arguments,
            )
            self._declare(queue)
            self._queues[name] = queue
            logger.info(f"Declared queue '{name}' (durable={durable}, dead_letter={dead_letter})")
            return queue

    def bind_queue(
        self,
        queue: str,
        exchange: str,
        routing_keys: Iterable[str],
        exchange_type: str = "topic",
    ) -> None:
        """Declare ``exchange`` and bind ``queue`` to it once per routing key."""
        with self._lock:
            self.declare_queue(queue)
            target = Exchange(exchange, type=exchange_type, durable=True)
            for routing_key in routing_keys:
                binding = Queue(queue, exchange=target, routing_key=routing_key, durable=True,
                                queue_arguments=self._queues[queue].queue_arguments)
                self._declare(binding)
                self._bindings.append(binding)
                logger.info(f"Bound queue '{queue}' to '{exchange}' with '{routing_key}'")

    def _declare(self, queue: Queue) -> None:
        if self.is_connected:
            queue.bind(self._channel).declare()

    # Publishing

    def publish(self, queue: str, envelope: EnvelopeBase) -> None:
        """
        Send one envelope to a queue through the default exchange.

        Returns as soon as the broker has the message; never waits for a consumer.

        Raises:
            BrokerUnavailableError: If the broker cannot be reached
        """
        self._publish_raw(envelope.to_json(), exchange="", routing_key=queue)
        logger.info(
            f"Published {envelope.type} to '{queue}' (correlation_id={envelope.correlation_id})"
        )

    def publish_event(self, exchange: str, routing_key: str, envelope: EnvelopeBase) -> None:
        """Send one envelope to an exchange (notification fan-out)."""
        self._publish_raw(envelope.to_json(), exchange=exchange, routing_key=routing_key)
        logger.info(f"Published {envelope.type} to '{exchange}' with '{routing_key}'")

    def _publish_raw(
        self,
        body: Any,
        exchange: str,
        routing_key: str,
        headers: Optional[Dict[str, Any]] = None,
    ) -> None:
        with self._lock:
            if not self.is_connected:
                try:
                    self.connect(max_retries=self.publish_retries)
                except BrokerConnectionError as e:
                    raise BrokerUnavailableError(f"Broker unavailable: {e}") from e
            try:
                self._producer.publish(
                    body,
                    exchange=exchange,
                    routing_key=routing_key,
                    content_type=CONTENT_TYPE,
                    content_encoding="utf-8",
                    delivery_mode=PERSISTENT,
                    headers=headers or {},
                    retry=self.publish_retries > 0,
                    retry_policy={
                        "max_retries": self.publish_retries,
                        "interval_start": self.interval_start,
                        "interval_step": self.interval_step,
                        "interval_max": self.interval_max,
                    },
                )
            except (OperationalError, OSError) as e:
                logger.error(f"Publish to '{exchange or routing_key}' failed: {e}")
                self._drop_connection()
                raise BrokerUnavailableError(f"Broker unavailable: {e}") from e

    # Consuming

    def register_consumer(
        self,
        queue: str,
        handler: Handler,
        legacy_type: Optional[str] = None,
        accept: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Start consuming ``queue`` with manual acknowledgment and prefetch 1.

        Args:
            queue: Queue name (declared if needed)
            handler: Called with the decoded envelope; may be a coroutine function
            legacy_type: Envelope type assumed for messages without ``type``
            accept: Envelope types this queue handles; others are dead-lettered
        """
        with self._lock:
            self.declare_queue(queue)
            registration = ConsumerRegistration(
                queue=queue,
                handler=handler,
                legacy_type=legacy_type,
                accept=tuple(accept) if accept else None,
            )
            self._registrations.append(registration)
            if self.is_connected:
                self._start_consumer(registration)
            logger.info(f"Registered consumer on '{queue}'")

    def _start_consumer(self, registration: ConsumerRegistration) -> None:
        consumer = Consumer(
            self._channel,
            queues=[self._queues[registration.queue]],
            on_message=lambda message: self._on_message(registration, message),
            prefetch_count=1,
            no_ack=False,
        )
        consumer.consume()
        registration.consumer = consumer

    def _on_message(self, registration: ConsumerRegistration, message) -> None:
        try:
            envelope = parse_envelope(message.body, legacy_type=registration.legacy_type)
            if registration.accept and envelope.type not in registration.accept:
                raise EnvelopeError(f"'{envelope.type}' is not handled on '{registration.queue}'")
        except EnvelopeError as e:
            logger.error(f"Rejecting message on '{registration.queue}': {e}")
            message.reject(requeue=False)
            return

        try:
            self._run_handler(registration.handler, envelope)
        except RetryableJobError as e:
            self._retry_or_reject(registration.queue, message, e)
        except Exception as e:
            logger.error(
                f"Handler for {envelope.type} on '{registration.queue}' failed, dead-lettering: {e}",
                exc_info=True,
            )
            message.reject(requeue=False)
        else:
            message.ack()

    def run_coroutine(self, coro):
        """
        Run a coroutine on the loop that async handlers use.

        Async clients (motor, httpx) created through here stay bound to the
        same loop as the handlers that use them.
        """
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop.run_until_complete(coro)

    def _run_handler(self, handler: Handler, envelope: EnvelopeBase) -> None:
        if inspect.iscoroutinefunction(handler):
            self.run_coroutine(handler(envelope))
        else:
            handler(envelope)

    def _retry_or_reject(self, queue: str, message, error: Exception) -> None:
        headers = dict(message.headers or {})
        attempts = int(headers.get(RETRY_HEADER, 0))
        if attempts >= self.max_retries:
            logger.error(f"Giving up on message in '{queue}' after {attempts} retries: {error}")
            message.reject(requeue=False)
            return

        headers[RETRY_HEADER] = attempts + 1
        try:
            self._publish_raw(message.body, exchange="", routing_key=queue, headers=headers)
        except BrokerUnavailableError:
            logger.error(f"Could not requeue message in '{queue}', the broker will redeliver it: {error}")
            return
        logger.warning(f"Transient failure in '{queue}', retry {attempts + 1}/{self.max_retries}: {error}")
        message.ack()

    def purge_queue(self, name: str) -> int:
        """Drop every ready message in ``name``. Returns how many were removed."""
        with self._lock:
            channel = self._require_channel()
            return channel.queue_purge(name) or 0

    def drain(self, timeout: float = 1.0) -> int:
        """
        Process deliveries until none arrives within ``timeout`` seconds.

        Returns:
            Number of deliveries handled
        """
        handled = 0
        while True:
            try:
                self._require_channel()
                self._connection.drain_events(timeout=timeout)
            except socket.timeout:
                return handled
            handled += 1

    def run_forever(self, poll_interval: float = 1.0) -> None:
        """Consume until stop() is called, reconnecting on connection loss."""
        self._stopped.clear()
        logger.info("Consuming messages")
        while not self._stopped.is_set():
            try:
                if not self.is_connected:
                    self.connect()
                self._connection.drain_events(timeout=poll_interval)
            except socket.timeout:
                continue
            except (OperationalError, OSError) as e:
                logger.error(f"Lost broker connection: {e}")
                self._drop_connection()
                self.connect()

    def stop(self) -> None:
        self._stopped.set()
