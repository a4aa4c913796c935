"""MQTT event publisher backed by aiomqtt.

Alternative to the AMQP publisher for sites that run an MQTT broker. Every
event is published as one JSON document to a single topic.
"""

from dataclasses import dataclass

import structlog
from aiomqtt import Client

from opcbridge.publish.base import WaitingPublisher

logger = structlog.get_logger(__name__)


@dataclass
class MQTTConfig:
    """Configuration for the MQTT publisher.

    Attributes:
        host: MQTT broker hostname or IP address
        port: MQTT broker port (default: 1883)
        username: Optional username for authentication
        password: Optional password for authentication
        client_id: Unique client identifier
        keepalive: Keepalive interval in seconds
        topic: Topic every event is published to
        qos: Quality of Service level (0, 1, or 2)
    """

    host: str = "localhost"
    port: int = 1883
    username: str | None = None
    password: str | None = None
    client_id: str = "opcbridge"
    keepalive: int = 60
    topic: str = "opcua/data"
    qos: int = 1


class MQTTPublisher(WaitingPublisher[Client]):
    """Publishes events to an MQTT topic.

    Example:
        >>> publisher = MQTTPublisher(MQTTConfig(host="mqtt.example.com"))
        >>> await publisher.publish(event)
        >>> await publisher.close()
    """

    def __init__(self, config: MQTTConfig):
        self._config = config
        super().__init__()

    async def _open(self) -> Client:
        logger.info(
            "connecting_to_broker",
            host=self._config.host,
            port=self._config.port,
        )
        client = Client(
            hostname=self._config.host,
            port=self._config.port,
            username=self._config.username,
            password=self._config.password,
            identifier=self._config.client_id,
            keepalive=self._config.keepalive,
        )
        await client.__aenter__()
        return client

    async def _send(self, resource: Client, body: bytes) -> None:
        await resource.publish(self._config.topic, body, qos=self._config.qos)
        logger.debug("publishing", topic=self._config.topic, payload_size=len(body))

    async def _release(self, resource: Client) -> None:
        await resource.__aexit__(None, None, None)
