import logging
import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api import policy
from hoarding_api.database import get_db
from hoarding_api.dependencies import get_current_user
from hoarding_api.models.enums import HoardingStatus, Role
from hoarding_api.models.hoarding import Hoarding
from hoarding_api.models.user import User
from hoarding_api.schemas.base import parse_payload
from hoarding_api.schemas.hoarding import (
    HoardingResponse,
    Location,
    RemoveImageRequest,
    Size,
    location_columns,
    size_columns,
)
from hoarding_api.services import storage
from hoarding_api.services.numbering import HOARDING_TAG, next_number
from hoarding_api.utils.exceptions import AppException
from hoarding_api.utils.lookup import get_or_404
from hoarding_api.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hoardings", tags=["hoardings"])


def _parse_status(status: str | None) -> HoardingStatus | None:
    if not status:
        return None
    try:
        return HoardingStatus(status)
    except ValueError:
        raise AppException(f"Invalid hoarding status '{status}'", status_code=400)


def _parse_rate(daily_rate: str | None) -> float | None:
    if daily_rate in (None, ""):
        return None
    try:
        rate = float(daily_rate)
    except ValueError:
        raise AppException("dailyRate must be a number", status_code=400)
    if rate <= 0:
        raise AppException("dailyRate must be greater than zero", status_code=400)
    return rate


async def _read_images(images: list[UploadFile] | None) -> list[tuple[UploadFile, bytes]]:
    return [(image, await storage.read_image(image)) for image in images or [] if image.filename]


def _store_images(uploads: list[tuple[UploadFile, bytes]]) -> list[str]:
    return [
        storage.write_file("hoardings", storage.build_filename("hoarding", image.filename), content)
        for image, content in uploads
    ]


async def _commit_or_discard(db: AsyncSession, stored_paths: list[str]) -> None:
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        for stored_path in stored_paths:
            storage.remove_stored_file(stored_path)
        raise


async def _list(db: AsyncSession, current_user: User, *filters) -> list[dict]:
    query = (
        select(Hoarding)
        .where(*policy.scope(current_user, "hoarding"), *filters)
        .order_by(Hoarding.created_at.desc())
    )
    result = await db.execute(query)
    return [HoardingResponse.serialize(h) for h in result.scalars().all()]


@router.post("", status_code=201)
async def create_hoarding(
    name: str = Form(...),
    location: str = Form(...),
    size: str = Form(...),
    daily_rate: str = Form(..., alias="dailyRate"),
    status: str | None = Form(default=None),
    hoarding_number: str | None = Form(default=None, alias="hoardingNumber"),
    images: list[UploadFile] | None = File(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not name.strip():
        raise AppException("Missing required fields", status_code=400)
    parsed_location = parse_payload(Location, location, "location")
    parsed_size = parse_payload(Size, size, "size")
    rate = _parse_rate(daily_rate)
    parsed_status = _parse_status(status) or HoardingStatus.ACTIVE
    uploads = await _read_images(images)

    policy.require(current_user, "hoarding", "create", "Only owners can create hoardings")

    number = hoarding_number or await next_number(db, HOARDING_TAG)
    stored_paths = _store_images(uploads)
    hoarding = Hoarding(
        id=str(uuid.uuid4()),
        hoarding_number=number,
        name=name.strip(),
        daily_rate=rate,
        status=parsed_status.value,
        owner_id=current_user.id,
        images=stored_paths,
        **location_columns(parsed_location),
        **size_columns(parsed_size),
    )
    db.add(hoarding)
    await _commit_or_discard(db, stored_paths)
    await db.refresh(hoarding)

    logger.info("Hoarding %s created by %s", hoarding.hoarding_number, current_user.id)
    return success_response(
        data=HoardingResponse.serialize(hoarding),
        message="Hoarding created successfully",
        status_code=201,
    )


@router.get("")
async def list_hoardings(
    status: HoardingStatus | None = None,
    city: str | None = None,
    price_min: float | None = Query(default=None, alias="priceMin"),
    price_max: float | None = Query(default=None, alias="priceMax"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    filters = []
    if status:
        filters.append(Hoarding.status == status.value)
    if city:
        filters.append(Hoarding.city.ilike(f"%{city}%"))
    if price_min is not None:
        filters.append(Hoarding.daily_rate >= price_min)
    if price_max is not None:
        filters.append(Hoarding.daily_rate <= price_max)

    data = await _list(db, current_user, *filters)
    return success_response(data=data, message="Hoardings fetched successfully")


@router.get("/status/{status}")
async def list_hoardings_by_status(
    status: HoardingStatus,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if policy.role_of(current_user) != Role.OWNER and status != HoardingStatus.ACTIVE:
        raise AppException("You don't have permission to view hoardings with this status", status_code=403)

    data = await _list(db, current_user, Hoarding.status == status.value)
    return success_response(data=data, message="Hoardings fetched successfully")


@router.get("/location/{city}")
async def list_hoardings_by_location(
    city: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = await _list(db, current_user, Hoarding.city.ilike(f"%{city}%"))
    return success_response(data=data, message="Hoardings fetched successfully")


@router.get("/{hoarding_id}")
async def get_hoarding(
    hoarding_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hoarding = await get_or_404(db, Hoarding, hoarding_id, "Hoarding")
    await policy.authorize(db, current_user, "hoarding", "read", hoarding, "You don't have access to this hoarding")
    return success_response(data=HoardingResponse.serialize(hoarding), message="Hoarding fetched successfully")


@router.put("/{hoarding_id}")
async def update_hoarding(
    hoarding_id: str,
    name: str | None = Form(default=None),
    location: str | None = Form(default=None),
    size: str | None = Form(default=None),
    daily_rate: str | None = Form(default=None, alias="dailyRate"),
    status: str | None = Form(default=None),
    images: list[UploadFile] | None = File(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hoarding = await get_or_404(db, Hoarding, hoarding_id, "Hoarding")
    parsed_location = parse_payload(Location, location, "location") if location else None
    parsed_size = parse_payload(Size, size, "size") if size else None
    rate = _parse_rate(daily_rate)
    parsed_status = _parse_status(status)
    uploads = await _read_images(images)

    await policy.authorize(
        db, current_user, "hoarding", "update", hoarding,
        "You don't have permission to update this hoarding",
    )

    if name and name.strip():
        hoarding.name = name.strip()
    if parsed_location:
        for column, value in location_columns(parsed_location).items():
            setattr(hoarding, column, value)
    if parsed_size:
        for column, value in size_columns(parsed_size).items():
            setattr(hoarding, column, value)
    if rate is not None:
        hoarding.daily_rate = rate
    if parsed_status:
        hoarding.status = parsed_status.value
    stored_paths = _store_images(uploads)
    if stored_paths:
        hoarding.images = list(hoarding.images or []) + stored_paths

    await _commit_or_discard(db, stored_paths)
    await db.refresh(hoarding)
    return success_response(data=HoardingResponse.serialize(hoarding), message="Hoarding updated successfully")


@router.delete("/{hoarding_id}")
async def delete_hoarding(
    hoarding_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hoarding = await get_or_404(db, Hoarding, hoarding_id, "Hoarding")
    await policy.authorize(
        db, current_user, "hoarding", "delete", hoarding,
        "You don't have permission to delete this hoarding",
    )

    images = list(hoarding.images or [])
    await db.delete(hoarding)
    await db.commit()

    for image_path in images:
        storage.remove_stored_file(image_path)

    logger.info("Hoarding %s deleted with %d image(s)", hoarding_id, len(images))
    return success_response(message="Hoarding deleted successfully")


@router.delete("/{hoarding_id}/images")
async def remove_hoarding_image(
    hoarding_id: str,
    request: RemoveImageRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hoarding = await get_or_404(db, Hoarding, hoarding_id, "Hoarding")
    await policy.authorize(
        db, current_user, "hoarding", "update", hoarding,
        "You don't have permission to update this hoarding",
    )

    images = list(hoarding.images or [])
    if request.image_path not in images:
        raise AppException("Image not found in hoarding", status_code=404)

    storage.remove_stored_file(request.image_path)
    hoarding.images = [image for image in images if image != request.image_path]
    await db.commit()
    await db.refresh(hoarding)

    return success_response(data=HoardingResponse.serialize(hoarding), message="Image removed successfully")
