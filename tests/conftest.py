"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from microlending.engine import PaymentProcessor
from microlending.generators import ScheduleGenerator
from microlending.models import Client, Frequency, Loan


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def sample_client() -> Client:
    """Client on collector col-001's route."""
    return Client(
        client_id="client-test-001",
        name="María Pérez",
        address="Calle Duarte 12, Santiago",
        phone="+18095550001",
        collector_id="col-001",
    )


@pytest.fixture
def clients(sample_client: Client) -> dict[str, Client]:
    """Client lookup table."""
    return {sample_client.client_id: sample_client}


@pytest.fixture
def payment_time() -> datetime:
    """Fixed timestamp for payments."""
    return datetime(2024, 1, 31, 10, 30)


@pytest.fixture
def schedule_generator(seed: int) -> ScheduleGenerator:
    """Seeded schedule generator."""
    return ScheduleGenerator(seed=seed)


@pytest.fixture
def example_loan(schedule_generator: ScheduleGenerator, sample_client: Client) -> Loan:
    """10 000 at 10% annual, 12 monthly installments from 2024-01-01."""
    return schedule_generator.create_loan(
        client_id=sample_client.client_id,
        principal=Decimal("10000"),
        rate=Decimal("10"),
        term=12,
        frequency=Frequency.MONTHLY,
        start_date=date(2024, 1, 1),
        loan_id="loan-test-001",
    )


@pytest.fixture
def processor(clients: dict[str, Client], seed: int, payment_time: datetime) -> PaymentProcessor:
    """Payment processor resolving clients from the ``clients`` fixture."""
    return PaymentProcessor(clients.get, seed=seed, clock=lambda: payment_time)
