"""Configuration management for microlending."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from microlending.exceptions import ConfigurationError

PENALTY_MODES = ("none", "percent", "per_day")


@dataclass
class PenaltyConfig:
    """Late-payment penalty (mora) policy.

    ``percent`` charges ``rate`` percent of the installment payment;
    ``per_day`` charges ``daily_amount`` for every day late beyond
    ``grace_days``.
    """

    mode: str = "none"
    rate: Decimal = Decimal("0")  # Percent of the installment payment
    daily_amount: Decimal = Decimal("0")
    grace_days: int = 0

    def __post_init__(self) -> None:
        if self.mode not in PENALTY_MODES:
            raise ConfigurationError(f"Unknown penalty mode: {self.mode!r}")
        if self.rate < 0 or self.daily_amount < 0:
            raise ConfigurationError("Penalty rate and daily amount must be non-negative")
        if self.grace_days < 0:
            raise ConfigurationError("Penalty grace days must be non-negative")


@dataclass
class RouteConfig:
    """Route selection and reconciliation settings."""

    include_future_installments: bool = False
    discrepancy_tolerance: Decimal = Decimal("0.01")


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "dev.lending"
    schema_registry_url: str | None = None  # Avro payloads when set, JSON otherwise

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class EngineConfig:
    """Main configuration for microlending."""

    penalty: PenaltyConfig = field(default_factory=PenaltyConfig)
    route: RouteConfig = field(default_factory=RouteConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        import os

        try:
            penalty = PenaltyConfig(
                mode=os.getenv("PENALTY_MODE", "none"),
                rate=Decimal(os.getenv("PENALTY_RATE", "0")),
                daily_amount=Decimal(os.getenv("PENALTY_DAILY_AMOUNT", "0")),
                grace_days=int(os.getenv("PENALTY_GRACE_DAYS", "0")),
            )
            route = RouteConfig(
                include_future_installments=os.getenv("ROUTE_INCLUDE_FUTURE", "false").lower() == "true",
            )
            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except (InvalidOperation, ValueError) as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "dev.lending"),
            schema_registry_url=os.getenv("SCHEMA_REGISTRY_URL") or None,
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            penalty=penalty,
            route=route,
            kafka=kafka,
            output=output,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
