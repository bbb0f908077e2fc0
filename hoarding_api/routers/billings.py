import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api import policy
from hoarding_api.database import get_db
from hoarding_api.dependencies import get_current_user
from hoarding_api.models.billing import Billing
from hoarding_api.models.contract import Contract
from hoarding_api.models.enums import PaymentStatus, Role
from hoarding_api.models.hoarding import Hoarding
from hoarding_api.models.user import User
from hoarding_api.schemas.billing import BillingAnalytics, InvoiceCreate, InvoiceResponse, InvoiceUpdate
from hoarding_api.schemas.contract import ContractResponse
from hoarding_api.schemas.hoarding import HoardingResponse
from hoarding_api.schemas.user import UserResponse
from hoarding_api.services.numbering import INVOICE_TAG, next_number
from hoarding_api.utils.dates import to_iso, utcnow_iso
from hoarding_api.utils.exceptions import AppException
from hoarding_api.utils.lookup import get_or_404
from hoarding_api.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billings", tags=["billings"])

REMINDABLE = (PaymentStatus.PENDING.value, PaymentStatus.OVERDUE.value)


@router.post("/invoice", status_code=201)
async def create_invoice(
    payload: InvoiceCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    contract = await get_or_404(db, Contract, payload.contract_id, "Contract")
    policy.require(current_user, "billing", "create", "Only owners can create invoices")
    await policy.authorize(
        db, current_user, "contract", "update", contract,
        "You can only invoice your own contracts",
    )

    invoice = Billing(
        id=str(uuid.uuid4()),
        invoice_number=await next_number(db, INVOICE_TAG),
        contract_id=contract.id,
        client_id=contract.client_id,
        owner_id=contract.owner_id,
        amount=payload.amount,
        payment_status=PaymentStatus.PENDING.value,
        due_date=to_iso(payload.due_date),
        notes=payload.notes,
    )
    db.add(invoice)
    await db.commit()
    await db.refresh(invoice)

    logger.info("Invoice %s created for contract %s", invoice.invoice_number, contract.contract_number)
    return success_response(
        data=InvoiceResponse.serialize(invoice),
        message="Invoice created successfully",
        status_code=201,
    )


@router.get("")
async def list_invoices(
    status: PaymentStatus | None = None,
    contract_id: str | None = Query(default=None, alias="contractId"),
    client_id: str | None = Query(default=None, alias="clientId"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    filters = policy.scope(current_user, "billing", "read", "You don't have permission to view invoices")
    if status:
        filters.append(Billing.payment_status == status.value)
    if contract_id:
        filters.append(Billing.contract_id == contract_id)
    if client_id:
        filters.append(Billing.client_id == client_id)

    result = await db.execute(select(Billing).where(*filters).order_by(Billing.created_at.desc()))
    data = [InvoiceResponse.serialize(b) for b in result.scalars().all()]
    return success_response(data=data, message="Invoices fetched successfully")


@router.get("/analytics")
async def billing_analytics(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    policy.require(current_user, "billing", "analytics", "Only owners can view billing analytics")
    filters = policy.scope(current_user, "billing")

    totals_result = await db.execute(
        select(Billing.payment_status, func.count(), func.coalesce(func.sum(Billing.amount), 0.0))
        .where(*filters)
        .group_by(Billing.payment_status)
    )
    counts: dict[str, int] = {s.value: 0 for s in PaymentStatus}
    amounts: dict[str, float] = {s.value: 0.0 for s in PaymentStatus}
    for status, count, amount in totals_result.all():
        counts[status] = count
        amounts[status] = float(amount)

    recent = await db.execute(
        select(Billing).where(*filters).order_by(Billing.created_at.desc()).limit(5)
    )
    upcoming = await db.execute(
        select(Billing)
        .where(
            *filters,
            Billing.payment_status == PaymentStatus.PENDING.value,
            Billing.due_date >= utcnow_iso(),
        )
        .order_by(Billing.due_date)
        .limit(5)
    )

    analytics = BillingAnalytics(
        total_amount=sum(amounts.values()),
        paid_amount=amounts[PaymentStatus.PAID.value],
        pending_amount=amounts[PaymentStatus.PENDING.value],
        overdue_amount=amounts[PaymentStatus.OVERDUE.value],
        invoices_by_status=counts,
        recent_invoices=[InvoiceResponse.model_validate(b) for b in recent.scalars().all()],
        upcoming_invoices=[InvoiceResponse.model_validate(b) for b in upcoming.scalars().all()],
    )
    return success_response(
        data=analytics.model_dump(by_alias=True, mode="json"),
        message="Billing analytics fetched successfully",
    )


@router.get("/invoice/{invoice_id}")
async def get_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = await get_or_404(db, Billing, invoice_id, "Invoice")
    await policy.authorize(db, current_user, "billing", "read", invoice, "You don't have access to this invoice")
    return success_response(data=InvoiceResponse.serialize(invoice), message="Invoice fetched successfully")


@router.put("/invoice/{invoice_id}")
async def update_invoice(
    invoice_id: str,
    payload: InvoiceUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = await get_or_404(db, Billing, invoice_id, "Invoice")
    await policy.authorize(
        db, current_user, "billing", "update", invoice,
        "You don't have permission to update this invoice",
    )

    if policy.role_of(current_user) == Role.CLIENT:
        if payload.payment_status is None or payload.payment_status.value not in policy.CLIENT_PAYMENT_STATUSES:
            raise AppException("Clients can only mark invoices as paid", status_code=403)

    if payload.payment_status:
        invoice.payment_status = payload.payment_status.value
        if payload.payment_status == PaymentStatus.PAID and payload.payment_date is None:
            invoice.payment_date = utcnow_iso()
    if payload.payment_date is not None:
        invoice.payment_date = to_iso(payload.payment_date)
    if payload.payment_method:
        invoice.payment_method = payload.payment_method
    if payload.transaction_id:
        invoice.transaction_id = payload.transaction_id
    if payload.notes:
        invoice.notes = payload.notes

    await db.commit()
    await db.refresh(invoice)

    logger.info("Invoice %s set to %s by %s", invoice.invoice_number, invoice.payment_status, current_user.id)
    return success_response(data=InvoiceResponse.serialize(invoice), message="Invoice updated successfully")


@router.delete("/invoice/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = await get_or_404(db, Billing, invoice_id, "Invoice")
    await policy.authorize(
        db, current_user, "billing", "delete", invoice,
        "You don't have permission to delete this invoice",
    )

    await db.delete(invoice)
    await db.commit()
    return success_response(message="Invoice deleted successfully")


@router.get("/invoice/{invoice_id}/download")
async def download_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = await get_or_404(db, Billing, invoice_id, "Invoice")
    await policy.authorize(db, current_user, "billing", "read", invoice, "You don't have access to this invoice")

    contract = await db.get(Contract, invoice.contract_id)
    hoarding = await db.get(Hoarding, contract.hoarding_id) if contract else None
    client = await db.get(User, invoice.client_id)
    owner = await db.get(User, invoice.owner_id)

    data = {
        "invoice": InvoiceResponse.serialize(invoice),
        "contract": ContractResponse.serialize(contract) if contract else None,
        "hoarding": HoardingResponse.serialize(hoarding) if hoarding else None,
        "client": UserResponse.serialize(client) if client else None,
        "owner": UserResponse.serialize(owner) if owner else None,
    }
    return success_response(data=data, message="Invoice details for PDF generation")


@router.post("/invoice/{invoice_id}/remind")
async def send_reminder(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invoice = await get_or_404(db, Billing, invoice_id, "Invoice")
    await policy.authorize(
        db, current_user, "billing", "remind", invoice,
        "You don't have permission to send reminders for this invoice",
    )

    if invoice.payment_status not in REMINDABLE:
        raise AppException(
            f"Cannot send reminder for invoice with status: {invoice.payment_status}",
            status_code=400,
        )

    client = await db.get(User, invoice.client_id)
    logger.info(
        "Payment reminder for invoice %s sent to %s",
        invoice.invoice_number,
        client.email if client else invoice.client_id,
    )
    return success_response(
        data={"invoiceId": invoice.id, "invoiceNumber": invoice.invoice_number},
        message="Payment reminder sent successfully",
    )
