"""AMQP job queue: publish requests and pull them one at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

import pika
import pika.exceptions

from bb_common.errors import ChannelError, DecodeError
from bb_common.models import JobRequest

logger = logging.getLogger(__name__)

QUEUE_NAME = "benchmark"


def decode_job(body: bytes) -> JobRequest:
    """Decode a queue message body into a JobRequest."""
    try:
        return JobRequest.model_validate_json(body)
    except ValueError as exc:
        preview = body[:200].decode("utf-8", errors="replace")
        raise DecodeError(
            "Malformed job message",
            context={"body": preview},
            cause=exc,
        ) from exc


@dataclass
class Delivery:
    """One received message plus its acknowledgment handle."""

    body: bytes
    redelivered: bool
    delivery_tag: int
    _ack: Callable[[], None] = field(repr=False)
    _nack: Callable[[bool], None] = field(repr=False)
    settled: bool = False

    def decode(self) -> JobRequest:
        return decode_job(self.body)

    def ack(self) -> None:
        self._ack()
        self.settled = True

    def nack(self, requeue: bool = True) -> None:
        self._nack(requeue)
        self.settled = True


class MessageChannel:
    """Process-wide connection to the job queue."""

    def __init__(
        self,
        uri: str,
        queue: str = QUEUE_NAME,
        connection_factory: Optional[Callable[[pika.URLParameters], Any]] = None,
    ) -> None:
        self._uri = uri
        self._queue = queue
        self._connection_factory = connection_factory or pika.BlockingConnection
        self._connection: Any = None
        self._channel: Any = None

    @property
    def queue(self) -> str:
        return self._queue

    def _ensure_channel(self) -> Any:
        if self._channel is not None and self._channel.is_open:
            return self._channel
        try:
            if self._connection is None or not self._connection.is_open:
                self._connection = self._connection_factory(pika.URLParameters(self._uri))
            self._channel = self._connection.channel()
            self._channel.queue_declare(queue=self._queue)
        except pika.exceptions.AMQPError as exc:
            raise ChannelError(
                "Could not connect to the job queue",
                context={"queue": self._queue},
                cause=exc,
            ) from exc
        return self._channel

    def publish(self, job: JobRequest) -> None:
        """Send ``job`` to the queue; failures are not retried."""
        channel = self._ensure_channel()
        try:
            channel.basic_publish(
                exchange="",
                routing_key=self._queue,
                body=job.to_json().encode("utf-8"),
                properties=pika.BasicProperties(content_type="application/json"),
            )
        except pika.exceptions.AMQPError as exc:
            raise ChannelError(
                "Failed to publish job", context={"queue": self._queue}, cause=exc
            ) from exc
        logger.info("Published job for %s@%s", job.repository, job.commit)

    def consume(self) -> Iterator[Delivery]:
        """Block on the queue and yield deliveries one at a time, forever."""
        channel = self._ensure_channel()
        try:
            channel.basic_qos(prefetch_count=1)
            for method, _properties, body in channel.consume(self._queue):
                tag = method.delivery_tag
                yield Delivery(
                    body=body,
                    redelivered=bool(method.redelivered),
                    delivery_tag=tag,
                    _ack=lambda tag=tag: self._settle(channel.basic_ack, delivery_tag=tag),
                    _nack=lambda requeue, tag=tag: self._settle(
                        channel.basic_nack, delivery_tag=tag, requeue=requeue
                    ),
                )
        except pika.exceptions.AMQPError as exc:
            raise ChannelError(
                "Consumer stopped", context={"queue": self._queue}, cause=exc
            ) from exc

    def _settle(self, method: Callable[..., Any], **kwargs: Any) -> None:
        try:
            method(**kwargs)
        except pika.exceptions.AMQPError as exc:
            raise ChannelError(
                "Failed to settle message",
                context={"queue": self._queue, **kwargs},
                cause=exc,
            ) from exc

    def close(self) -> None:
        connection, self._connection, self._channel = self._connection, None, None
        if connection is not None and connection.is_open:
            try:
                connection.close()
            except pika.exceptions.AMQPError:
                logger.debug("Ignoring error while closing queue connection", exc_info=True)
