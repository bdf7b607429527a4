"""
RabbitMQ Event Publisher for order lifecycle events
"""
import pika
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

import structlog

from veggie_shop.config import settings
from veggie_shop.schemas.order import OrderEvent

logger = structlog.get_logger(__name__)

ORDER_CREATED = "OrderCreated"
ORDER_CANCELLED = "OrderCancelled"
ORDER_DELETED = "OrderDeleted"
ORDER_STATUS_CHANGED = "OrderStatusChanged"

ROUTING_KEYS = {
    ORDER_CREATED: "order.created",
    ORDER_CANCELLED: "order.cancelled",
    ORDER_DELETED: "order.deleted",
    ORDER_STATUS_CHANGED: "order.status.changed",
}


class EventPublisher:
    """
    Publisher for sending order events to RabbitMQ

    Publishing is best-effort: it happens after the order transaction has
    committed, and a broker failure is logged and reported as False.
    """

    def __init__(self, enabled: Optional[bool] = None):
        self.enabled = settings.EVENTS_ENABLED if enabled is None else enabled
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE

    def build_event(self, event_type: str, data: Dict) -> OrderEvent:
        """Wrap event data in the standard envelope"""
        return OrderEvent(
            event_type=event_type,
            event_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=settings.SERVICE_NAME,
            data=data
        )

    def publish(self, event_type: str, data: Dict) -> bool:
        """
        Publish an order event

        Args:
            event_type: One of the ORDER_* event names
            data: JSON-serializable event payload

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug("Event publishing disabled", event_type=event_type)
            return False

        event = self.build_event(event_type, data)
        try:
            connection = pika.BlockingConnection(
                pika.URLParameters(self.rabbitmq_url)
            )
            try:
                channel = connection.channel()

                channel.exchange_declare(
                    exchange=self.exchange,
                    exchange_type='topic',
                    durable=True
                )

                # Enable publisher confirms
                channel.confirm_delivery()

                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=ROUTING_KEYS[event_type],
                    body=event.model_dump_json(),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # Persistent message
                        content_type='application/json',
                        correlation_id=event.event_id
                    )
                )
            finally:
                connection.close()

            logger.info("Event published", event_type=event_type, event_id=event.event_id)
            return True

        except Exception as e:
            logger.warning(
                "Failed to publish event",
                event_type=event_type,
                event_id=event.event_id,
                error=str(e)
            )
            return False
