"""Tests for receipt export and rendering shapes."""

from datetime import datetime
from decimal import Decimal

from microlending.engine import PaymentProcessor, ReceiptFactory
from microlending.engine.receipts import RECEIPT_FIELDS
from microlending.models import Loan, Receipt


class TestReceiptFactory:
    """Tests for ReceiptFactory."""

    def test_to_record(self, processor: PaymentProcessor, example_loan: Loan, payment_time: datetime) -> None:
        receipt = processor.apply_payment(example_loan, example_loan.schedule[0].installment_id, Decimal("879.16"))

        record = ReceiptFactory.to_record(receipt)

        assert tuple(record) == RECEIPT_FIELDS
        assert record["id"] == receipt.receipt_id
        assert record["date"] == payment_time
        assert record["loanId"] == "loan-test-001"
        assert record["clientId"] == "client-test-001"
        assert record["clientName"] == "María Pérez"
        assert record["installmentNumber"] == 1
        assert record["amount"] == Decimal("879.16")
        assert record["penaltyAmount"] == Decimal("0")
        assert record["remainingBalance"] == receipt.remaining_balance

    def test_values_pass_through(self) -> None:
        """Formatting never recomputes amounts."""
        receipt = Receipt(
            receipt_id="r-1",
            date=datetime(2024, 1, 1),
            loan_id="loan-1",
            client_id="client-1",
            client_name="Cliente",
            installment_number=2,
            amount=Decimal("10.00"),
            penalty_amount=Decimal("1.00"),
            remaining_balance=Decimal("123.45"),
        )

        assert ReceiptFactory.to_record(receipt)["remainingBalance"] == Decimal("123.45")

    def test_for_rendering(self, processor: PaymentProcessor, example_loan: Loan) -> None:
        receipt = processor.apply_payment(example_loan, example_loan.schedule[0].installment_id, Decimal("879.16"))

        rendered = ReceiptFactory.for_rendering(receipt, "Préstamos del Cibao", logo_url="https://example.com/logo.png")

        assert rendered["companyName"] == "Préstamos del Cibao"
        assert rendered["logoUrl"] == "https://example.com/logo.png"
        assert {k: rendered[k] for k in RECEIPT_FIELDS} == ReceiptFactory.to_record(receipt)

    def test_installment_record(self, example_loan: Loan) -> None:
        record = ReceiptFactory.installment_record(example_loan.schedule[0])

        assert record["number"] == 1
        assert record["payment"] == Decimal("879.16")
        assert record["status"] == "PENDING"
        assert record["paidDate"] is None

    def test_loan_record(self, example_loan: Loan) -> None:
        record = ReceiptFactory.loan_record(example_loan)

        assert record["id"] == "loan-test-001"
        assert record["amount"] == Decimal("10000.00")
        assert record["frequency"] == "MONTHLY"
        assert record["status"] == "ACTIVE"
        assert len(record["schedule"]) == 12
        assert record["totalInterest"] == example_loan.total_interest
        assert record["totalPaid"] == Decimal("0")
        assert record["totalPenalty"] == Decimal("0")
