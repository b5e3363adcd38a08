# scripts/check_rabbit.py
import asyncio
import uuid

from rateboard.config.settings import settings
from rateboard.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher

async def check():
    publisher = RabbitMQPublisher()

    await publisher.publish(
        exchange_name=settings.rates_exchange,
        routing_key="rates.updated",
        message={"event": "rates.updated", "currencies": {}},
        message_id=str(uuid.uuid4()),
    )

    print("Published")
    await publisher.close()

asyncio.run(check())
