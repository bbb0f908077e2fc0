"""Free-text search fanned out over every resource type.

Each type runs its own case-insensitive substring match, restricted to what
the caller may list and capped per type. There is no ranking: rows come back
in storage order.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api import policy
from hoarding_api.database import get_db
from hoarding_api.dependencies import get_current_user
from hoarding_api.models import Assignment, Billing, Contract, Hoarding, Photo, User
from hoarding_api.models.enums import HoardingStatus
from hoarding_api.schemas.assignment import AssignmentResponse
from hoarding_api.schemas.billing import InvoiceResponse
from hoarding_api.schemas.contract import ContractResponse
from hoarding_api.schemas.hoarding import HoardingResponse
from hoarding_api.schemas.photo import PhotoResponse
from hoarding_api.schemas.user import UserResponse
from hoarding_api.utils.dates import to_iso
from hoarding_api.utils.exceptions import AppException
from hoarding_api.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])

SEARCH_LIMIT = 20
PUBLIC_SEARCH_LIMIT = 10


@dataclass(frozen=True)
class SearchTarget:
    resource: str
    model: Any
    text_columns: tuple
    serializer: Any
    status_column: Any = None


TARGETS: dict[str, SearchTarget] = {
    "hoardings": SearchTarget(
        "hoarding", Hoarding, (Hoarding.name, Hoarding.address, Hoarding.city),
        HoardingResponse, Hoarding.status,
    ),
    "contracts": SearchTarget(
        "contract", Contract, (Contract.contract_number, Contract.terms_and_conditions),
        ContractResponse, Contract.status,
    ),
    "photos": SearchTarget(
        "photo", Photo, (Photo.caption, Photo.file_name),
        PhotoResponse, Photo.status,
    ),
    "users": SearchTarget("user", User, (User.name, User.email), UserResponse),
    "assignments": SearchTarget(
        "assignment", Assignment, (Assignment.notes,),
        AssignmentResponse, Assignment.status,
    ),
    "billings": SearchTarget(
        "billing", Billing, (Billing.invoice_number, Billing.notes),
        InvoiceResponse, Billing.payment_status,
    ),
}


def _matches(columns: tuple, term: str):
    pattern = f"%{term}%"
    return or_(*(column.ilike(pattern) for column in columns))


def _parse_date_range(date_range: str) -> tuple[str, str] | None:
    parts = [part.strip() for part in date_range.split(",")]
    if len(parts) != 2 or not all(parts):
        return None
    try:
        start, end = (datetime.fromisoformat(part) for part in parts)
    except ValueError:
        raise AppException("dateRange must be two ISO dates separated by a comma", status_code=400)
    return to_iso(start), to_iso(end)


@router.get("/search")
async def search(
    query: str | None = None,
    type: str | None = None,
    status: str | None = None,
    city: str | None = None,
    role: str | None = None,
    date_range: str | None = Query(default=None, alias="dateRange"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    wanted = [type] if type else list(TARGETS)
    results: dict[str, list[dict]] = {}

    for name in wanted:
        target = TARGETS.get(name)
        if target is None or not policy.is_allowed(current_user, target.resource, "read"):
            continue

        filters = policy.scope(current_user, target.resource)
        if query:
            filters.append(_matches(target.text_columns, query))
        if status and target.status_column is not None:
            filters.append(target.status_column == status)
        if target.model is Hoarding and city:
            filters.append(Hoarding.city.ilike(f"%{city}%"))
        if target.model is User and role:
            filters.append(User.role == role)
        if target.model is Contract and date_range:
            bounds = _parse_date_range(date_range)
            if bounds:
                filters.extend([Contract.start_date >= bounds[0], Contract.end_date <= bounds[1]])

        result = await db.execute(select(target.model).where(*filters).limit(SEARCH_LIMIT))
        results[name] = [target.serializer.serialize(row) for row in result.scalars().all()]

    logger.debug("Search %r by %s returned %s", query, current_user.id, {k: len(v) for k, v in results.items()})
    return success_response(data=results, message="Search results")


@router.get("/public-search")
async def public_search(
    query: str | None = None,
    type: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    results: dict[str, list[dict]] = {}
    if not type or type == "hoardings":
        filters = [Hoarding.status == HoardingStatus.ACTIVE.value]
        if query:
            filters.append(_matches((Hoarding.name, Hoarding.city), query))
        result = await db.execute(select(Hoarding).where(*filters).limit(PUBLIC_SEARCH_LIMIT))
        results["hoardings"] = [HoardingResponse.serialize(h) for h in result.scalars().all()]

    return success_response(data=results, message="Public search results")
