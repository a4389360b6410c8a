"""Client and collector generators for simulations."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Iterator

from microlending.generators.base import BaseGenerator
from microlending.models.client import Client, Collector


class ClientGenerator(BaseGenerator):
    """Generate synthetic borrower records."""

    def generate(self, collector_id: str | None = None) -> Client:
        """Generate a single client.

        Parameters
        ----------
        collector_id : str | None
            Collector whose route covers the client.

        Returns
        -------
        Client
            Generated client.
        """
        return Client(
            client_id=self.new_id(),
            name=self.fake.name(),
            address=f"{self.fake.street_name()} {random.randint(1, 999)}, {self.fake.city()}",
            phone=self.fake.phone_number(),
            collector_id=collector_id,
            created_at=datetime.now() - timedelta(days=random.randint(30, 720)),
        )

    def generate_batch(self, count: int, collector_ids: list[str] | None = None) -> Iterator[Client]:
        """Generate multiple clients, spread round-robin over ``collector_ids``."""
        for i in range(count):
            collector_id = collector_ids[i % len(collector_ids)] if collector_ids else None
            yield self.generate(collector_id)


class CollectorGenerator(BaseGenerator):
    """Generate synthetic collector records."""

    def generate(self) -> Collector:
        """Generate a single collector."""
        return Collector(
            collector_id=self.new_id(),
            name=self.fake.name(),
            phone=self.fake.phone_number(),
            created_at=datetime.now() - timedelta(days=random.randint(30, 720)),
        )
