"""Kafka sink publishing receipt and route-closing events."""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from confluent_kafka import KafkaException, Producer
from confluent_kafka.serialization import MessageField, SerializationContext

from microlending.config import KafkaConfig
from microlending.exceptions import SinkError
from microlending.models.base import Event
from microlending.sinks.serialization import to_dict

logger = logging.getLogger(__name__)

SCHEMA_NAMESPACE = "com.microlending"

_MONEY = {"type": "bytes", "logicalType": "decimal", "precision": 15, "scale": 2}

# Avro schemas for event payloads
AVRO_SCHEMAS = {
    "receipts": {
        "type": "record",
        "name": "Receipt",
        "namespace": SCHEMA_NAMESPACE,
        "fields": [
            {"name": "receipt_id", "type": "string"},
            {"name": "date", "type": {"type": "long", "logicalType": "timestamp-millis"}},
            {"name": "loan_id", "type": "string"},
            {"name": "client_id", "type": "string"},
            {"name": "client_name", "type": "string"},
            {"name": "installment_number", "type": "int"},
            {"name": "amount", "type": _MONEY},
            {"name": "penalty_amount", "type": _MONEY},
            {"name": "remaining_balance", "type": _MONEY},
            {"name": "installment_id", "type": ["null", "string"], "default": None},
            {"name": "due_amount", "type": ["null", _MONEY], "default": None},
            {"name": "collector_id", "type": ["null", "string"], "default": None},
        ],
    },
    "route_closings": {
        "type": "record",
        "name": "RouteClosing",
        "namespace": SCHEMA_NAMESPACE,
        "fields": [
            {"name": "closing_id", "type": "string"},
            {"name": "collector_id", "type": "string"},
            {"name": "date", "type": {"type": "int", "logicalType": "date"}},
            {"name": "total_amount", "type": _MONEY},
            {"name": "receipts_count", "type": "int"},
            {"name": "created_at", "type": {"type": "long", "logicalType": "timestamp-millis"}},
            {"name": "notes", "type": ["null", "string"], "default": None},
        ],
    },
}


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


class KafkaSink:
    """Publish engine records and events to Kafka topics."""

    # Topic suffix to key field mapping
    KEY_FIELDS = {
        "receipts": "loan_id",
        "route-closings": "collector_id",
        "events": "subject",
    }

    def __init__(self, config: KafkaConfig | str, schema_registry_url: str | None = None) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        schema_registry_url : str | None
            Schema Registry for Avro payloads, overriding
            ``config.schema_registry_url``. JSON is used when neither is set.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()
        self._avro_serializers: dict[str, Any] = {}

        registry_url = schema_registry_url or config.schema_registry_url
        if registry_url:
            self._init_avro_serializers(registry_url)

    def topic(self, name: str) -> str:
        """Full topic name for a suffix, e.g. ``receipts`` -> ``dev.lending.receipts``."""
        return f"{self.config.topic_prefix}.{name}"

    def _init_avro_serializers(self, schema_registry_url: str) -> None:
        """Initialize Avro serializers for each entity type."""
        try:
            from confluent_kafka.schema_registry import SchemaRegistryClient
            from confluent_kafka.schema_registry.avro import AvroSerializer
        except ImportError:
            logger.warning(
                "confluent-kafka[avro] not installed. Using JSON serialization. "
                "Install with: pip install 'confluent-kafka[avro]'"
            )
            return

        client = SchemaRegistryClient({"url": schema_registry_url})
        for entity_type, schema in AVRO_SCHEMAS.items():
            self._avro_serializers[entity_type] = AvroSerializer(
                client,
                json.dumps(schema),
                to_dict=self._to_avro_dict,
            )
        logger.info("Avro serializers initialized for: %s", list(AVRO_SCHEMAS.keys()))

    @staticmethod
    def _to_avro_dict(obj: Any, ctx: SerializationContext) -> dict:
        """Convert a record to an Avro-compatible dict."""
        result = {}
        for key, value in vars(obj).items():
            if isinstance(value, Decimal):
                # precision=15, scale=2: cents as big-endian signed bytes
                scaled = int(value * 100)
                byte_length = max(1, (scaled.bit_length() + 8) // 8)
                result[key] = scaled.to_bytes(byte_length, byteorder="big", signed=True)
            elif isinstance(value, datetime):
                result[key] = int(value.timestamp() * 1000)
            elif isinstance(value, date):
                result[key] = (value - date(1970, 1, 1)).days
            else:
                result[key] = value
        return result

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def _get_key(self, topic: str, record: Any) -> str | None:
        """Extract message key from record based on topic suffix."""
        key_field = self.KEY_FIELDS.get(topic.split(".")[-1])
        if not key_field:
            return None
        if isinstance(record, dict):
            return record.get(key_field)
        return getattr(record, key_field, None)

    def send(self, topic: str, record: Any, key: str | None = None) -> None:
        """Send a single record to a Kafka topic."""
        entity_type = topic.split(".")[-1].replace("-", "_")

        if entity_type in self._avro_serializers:
            value = self._avro_serializers[entity_type](record, SerializationContext(topic, MessageField.VALUE))
        else:
            value = json.dumps(to_dict(record), ensure_ascii=False).encode("utf-8")

        if key is None:
            key = self._get_key(topic, record)

        try:
            self.producer.produce(
                topic=topic,
                key=key.encode("utf-8") if key else None,
                value=value,
                callback=self._delivery_callback,
            )
        except (BufferError, KafkaException) as e:
            raise SinkError(f"Failed to produce to {topic}: {e}") from e
        self.stats.sent += 1
        self.producer.poll(0)

    def publish_event(self, event: Event) -> None:
        """Send an event envelope to the events topic, keyed by its subject."""
        self.send(self.topic("events"), event)

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Write a batch of records to a Kafka topic."""
        logger.info("Writing batch to %s: %d records", topic, len(records))

        for record in records:
            self.send(topic, record)

        self.flush()
        logger.info(
            "Batch complete: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
