"""Event envelopes for receipts and route closings."""

from microlending.engine.receipts import ReceiptFactory
from microlending.generators.base import BaseGenerator
from microlending.models.base import Event
from microlending.models.receipt import Receipt
from microlending.models.route import RouteClosing
from microlending.sinks.serialization import dataclass_to_dict, serialize_value

SOURCE = "microlending"


class EventFactory(BaseGenerator):
    """Wrap engine records in ``Event`` envelopes for the notification consumer.

    Event ids come from the seeded Faker instance and event times from the
    record itself, so a seeded run publishes the same events every time.
    """

    def receipt_created(self, receipt: Receipt) -> Event:
        """Wrap a receipt in a ``receipt.created`` event keyed by its loan."""
        return Event(
            event_id=self.new_id(),
            event_type="receipt.created",
            event_time=receipt.date,
            source=SOURCE,
            subject=receipt.loan_id,
            data=serialize_value(ReceiptFactory.to_record(receipt)),
            metadata={"collector_id": receipt.collector_id, "client_id": receipt.client_id},
        )

    def route_closing_created(self, closing: RouteClosing) -> Event:
        """Wrap a route closing in a ``route_closing.created`` event keyed by its collector."""
        return Event(
            event_id=self.new_id(),
            event_type="route_closing.created",
            event_time=closing.created_at,
            source=SOURCE,
            subject=closing.collector_id,
            data=dataclass_to_dict(closing),
        )
