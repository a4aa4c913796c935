"""Event publishers delivering normalized events to a message broker."""

from opcbridge.core.config import Settings
from opcbridge.publish.amqp import AMQPConfig, AMQPPublisher
from opcbridge.publish.base import WaitingPublisher
from opcbridge.publish.mqtt import MQTTConfig, MQTTPublisher
from opcbridge.publish.protocol import ConnectionState, EventPublisher


def create_publisher(settings: Settings) -> WaitingPublisher:
    """Build the publisher selected by settings.publisher.

    Must be called inside a running event loop; the connection starts
    establishing immediately.

    Raises:
        ValueError: If the publisher kind is unknown
    """
    if settings.publisher == "amqp":
        return AMQPPublisher(
            AMQPConfig(
                url=settings.amqp_url,
                exchange=settings.exchange,
                exchange_type=settings.exchange_type,
                routing_key=settings.routing_key,
                durable=settings.exchange_durable,
            )
        )
    if settings.publisher == "mqtt":
        return MQTTPublisher(
            MQTTConfig(
                host=settings.mqtt_host,
                port=settings.mqtt_port,
                username=settings.mqtt_username,
                password=settings.mqtt_password,
                topic=f"{settings.exchange}/{settings.routing_key}",
                qos=settings.mqtt_qos,
            )
        )
    raise ValueError(f"Unknown publisher: {settings.publisher!r}")


__all__ = [
    "AMQPConfig",
    "AMQPPublisher",
    "ConnectionState",
    "EventPublisher",
    "MQTTConfig",
    "MQTTPublisher",
    "WaitingPublisher",
    "create_publisher",
]
