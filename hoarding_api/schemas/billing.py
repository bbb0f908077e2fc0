from datetime import datetime

from pydantic import Field

from hoarding_api.models.enums import PaymentStatus
from hoarding_api.schemas.base import CamelModel


class InvoiceCreate(CamelModel):
    contract_id: str
    amount: float = Field(gt=0)
    due_date: datetime
    notes: str | None = None


class InvoiceUpdate(CamelModel):
    payment_status: PaymentStatus | None = None
    payment_date: datetime | None = None
    payment_method: str | None = None
    transaction_id: str | None = None
    notes: str | None = None


class InvoiceResponse(CamelModel):
    id: str
    invoice_number: str
    contract_id: str
    client_id: str
    owner_id: str
    amount: float
    payment_status: PaymentStatus
    due_date: str
    payment_date: str | None = None
    payment_method: str | None = None
    transaction_id: str | None = None
    notes: str | None = None
    created_at: str
    updated_at: str


class BillingAnalytics(CamelModel):
    total_amount: float
    paid_amount: float
    pending_amount: float
    overdue_amount: float
    invoices_by_status: dict[str, int]
    recent_invoices: list[InvoiceResponse]
    upcoming_invoices: list[InvoiceResponse]
