import logging

import aio_pika

from .config import RABBIT_URL

logger = logging.getLogger(__name__)

EXCHANGE_NAME = "domain_events"


class RabbitPublisher:
    """Booking events on the topic exchange. Without a RABBIT_URL it does nothing."""

    def __init__(self, url: str | None = RABBIT_URL):
        self.url = url
        self.enabled = bool(url)
        self._connection: aio_pika.abc.AbstractRobustConnection | None = None
        self._exchange: aio_pika.abc.AbstractExchange | None = None

    async def connect(self) -> None:
        if not self.enabled or self._exchange is not None:
            return

        connection = await aio_pika.connect_robust(self.url)
        try:
            channel = await connection.channel()
            self._exchange = await channel.declare_exchange(
                EXCHANGE_NAME,
                aio_pika.ExchangeType.TOPIC,
                durable=True,
            )
        except Exception:
            await connection.close()
            raise
        self._connection = connection

    async def publish(self, routing_key: str, message_body: str) -> None:
        if not self.enabled:
            return

        message = aio_pika.Message(
            body=message_body.encode("utf-8"),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
        )
        try:
            await self.connect()
            await self._exchange.publish(message, routing_key=routing_key)
        except Exception as e:
            # the booking is already committed
            logger.warning("event %s not published: %s", routing_key, e)

    async def close(self) -> None:
        connection, self._connection, self._exchange = self._connection, None, None
        if connection is not None and not connection.is_closed:
            await connection.close()


publisher = RabbitPublisher()
