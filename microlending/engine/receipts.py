"""Export shapes for receipts, loans and installments."""

from typing import Any

from microlending.models.loan import Installment, Loan
from microlending.models.receipt import Receipt

RECEIPT_FIELDS = (
    "id",
    "date",
    "loanId",
    "clientId",
    "clientName",
    "installmentNumber",
    "amount",
    "penaltyAmount",
    "remainingBalance",
)


class ReceiptFactory:
    """Format engine records into the persistence/rendering contract.

    Field selection and renaming only; values are passed through unchanged.
    """

    @staticmethod
    def to_record(receipt: Receipt) -> dict[str, Any]:
        """Receipt in the export shape."""
        return {
            "id": receipt.receipt_id,
            "date": receipt.date,
            "loanId": receipt.loan_id,
            "clientId": receipt.client_id,
            "clientName": receipt.client_name,
            "installmentNumber": receipt.installment_number,
            "amount": receipt.amount,
            "penaltyAmount": receipt.penalty_amount,
            "remainingBalance": receipt.remaining_balance,
        }

    @classmethod
    def for_rendering(
        cls,
        receipt: Receipt,
        company_name: str,
        logo_url: str | None = None,
    ) -> dict[str, Any]:
        """Receipt record plus display-only fields for ticket/PDF renderers."""
        display = {"companyName": company_name, "logoUrl": logo_url}
        return {**display, **cls.to_record(receipt)}

    @staticmethod
    def installment_record(installment: Installment) -> dict[str, Any]:
        """Installment in the export shape."""
        return {
            "id": installment.installment_id,
            "number": installment.number,
            "date": installment.due_date,
            "payment": installment.payment,
            "interest": installment.interest,
            "principal": installment.principal,
            "balance": installment.balance,
            "status": installment.status.value,
            "paidAmount": installment.paid_amount,
            "paidDate": installment.paid_date,
        }

    @classmethod
    def loan_record(cls, loan: Loan) -> dict[str, Any]:
        """Loan in the export shape, schedule included."""
        return {
            "id": loan.loan_id,
            "clientId": loan.client_id,
            "amount": loan.principal,
            "rate": loan.rate,
            "term": loan.term,
            "frequency": loan.frequency.value,
            "startDate": loan.start_date,
            "status": loan.status.value,
            "schedule": [cls.installment_record(inst) for inst in loan.schedule],
            "totalInterest": loan.total_interest,
            "totalPaid": loan.total_paid,
            "totalPenalty": loan.total_penalty,
        }
