"""Client and collector models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Client:
    """Borrower entity."""

    client_id: str
    name: str
    address: str
    phone: str | None = None
    collector_id: str | None = None  # Collector whose route covers this client
    created_at: datetime | None = None


@dataclass
class Collector:
    """Field agent who visits clients and collects installments."""

    collector_id: str
    name: str
    phone: str | None = None
    created_at: datetime | None = None
