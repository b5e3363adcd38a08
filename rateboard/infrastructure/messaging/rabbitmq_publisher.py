# rateboard/infrastructure/messaging/rabbitmq_publisher.py

import json
from typing import Optional

import aio_pika

from rateboard.config.settings import settings


class RabbitMQPublisher:
    """Announces committed rate changes to downstream consumers. Implements RatesAnnouncer."""

    def __init__(self, url: Optional[str] = None):
        self._url = url or settings.rabbitmq_url
        self._connection = None
        self._channel = None

    async def connect(self):
        self._connection = await aio_pika.connect_robust(self._url)
        self._channel = await self._connection.channel()
        await self._channel.set_qos(prefetch_count=10)

    async def publish(
        self,
        exchange_name: str,
        routing_key: str,
        message: dict,
        message_id: str,
    ):

        if not self._channel:
            await self.connect()

        exchange = await self._channel.declare_exchange(
            exchange_name,
            aio_pika.ExchangeType.TOPIC,
            durable=True,
        )

        msg = aio_pika.Message(
            body=json.dumps(message).encode(),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            message_id=message_id,
        )

        await exchange.publish(msg, routing_key=routing_key)

    async def close(self):
        if self._connection is not None:
            await self._connection.close()
        self._connection = None
        self._channel = None
