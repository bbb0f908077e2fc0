import logging
import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api import policy
from hoarding_api.database import get_db
from hoarding_api.dependencies import get_current_user
from hoarding_api.models.assignment import Assignment
from hoarding_api.models.enums import PhotoStatus, Role
from hoarding_api.models.hoarding import Hoarding
from hoarding_api.models.photo import Photo
from hoarding_api.models.profile import PhotographerProfile
from hoarding_api.models.user import User
from hoarding_api.schemas.photo import PhotoResponse, PhotoUpdate
from hoarding_api.services import storage
from hoarding_api.utils.exceptions import AppException
from hoarding_api.utils.lookup import get_or_404, validate_id
from hoarding_api.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"])


async def _list(db: AsyncSession, current_user: User, *filters) -> list[dict]:
    filters = policy.scope(current_user, "photo", "read", "You don't have permission to view photos") + list(filters)
    result = await db.execute(select(Photo).where(*filters).order_by(Photo.taken_at.desc()))
    return [PhotoResponse.serialize(p) for p in result.scalars().all()]


@router.post("", status_code=201)
async def upload_photo(
    photo: UploadFile | None = File(default=None),
    hoarding: str = Form(...),
    assignment: str | None = Form(default=None),
    caption: str | None = Form(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if photo is None or not photo.filename:
        raise AppException("No photo uploaded", status_code=400)

    target = await get_or_404(db, Hoarding, hoarding, "Hoarding")
    linked = await get_or_404(db, Assignment, assignment, "Assignment") if assignment else None

    policy.require(current_user, "photo", "create", "Only owners and photographers can upload photos")
    if policy.role_of(current_user) == Role.OWNER:
        await policy.authorize(
            db, current_user, "hoarding", "update", target,
            "You can only upload photos for your own hoardings",
        )
    if linked is not None:
        await policy.authorize(
            db, current_user, "assignment", "update", linked,
            "You can only upload photos for your own assignments",
        )
        if linked.hoarding_id != target.id:
            raise AppException("Assignment does not belong to this hoarding", status_code=400)

    filename, stored_path, size = await storage.save_image(photo, "photos", "photo")

    record = Photo(
        id=str(uuid.uuid4()),
        file_name=filename,
        file_path=stored_path,
        hoarding_id=target.id,
        uploaded_by_id=current_user.id,
        assignment_id=linked.id if linked else None,
        size=size,
        format=storage.image_format(photo.filename),
        caption=caption,
        status=PhotoStatus.PENDING.value,
    )
    db.add(record)

    result = await db.execute(
        select(PhotographerProfile).where(PhotographerProfile.user_id == current_user.id)
    )
    profile = result.scalars().first()
    if profile is not None:
        profile.photos_uploaded += 1

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        storage.remove_stored_file(stored_path)
        raise
    await db.refresh(record)

    logger.info("Photo %s uploaded for hoarding %s by %s", record.id, target.id, current_user.id)
    return success_response(
        data=PhotoResponse.serialize(record),
        message="Photo uploaded successfully",
        status_code=201,
    )


@router.get("")
async def list_photos(
    status: PhotoStatus | None = None,
    hoarding_id: str | None = Query(default=None, alias="hoardingId"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    filters = []
    if status:
        filters.append(Photo.status == status.value)
    if hoarding_id:
        filters.append(Photo.hoarding_id == hoarding_id)

    data = await _list(db, current_user, *filters)
    return success_response(data=data, message="Photos fetched successfully")


@router.get("/hoarding/{hoarding_id}")
async def list_photos_by_hoarding(
    hoarding_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    validate_id(hoarding_id, "hoarding")
    data = await _list(db, current_user, Photo.hoarding_id == hoarding_id)
    return success_response(data=data, message="Photos fetched successfully")


@router.get("/assignment/{assignment_id}")
async def list_photos_by_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    validate_id(assignment_id, "assignment")
    data = await _list(db, current_user, Photo.assignment_id == assignment_id)
    return success_response(data=data, message="Photos fetched successfully")


@router.get("/{photo_id}")
async def get_photo(
    photo_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    photo = await get_or_404(db, Photo, photo_id, "Photo")
    await policy.authorize(db, current_user, "photo", "read", photo, "You don't have access to this photo")
    return success_response(data=PhotoResponse.serialize(photo), message="Photo fetched successfully")


@router.put("/{photo_id}")
async def update_photo(
    photo_id: str,
    payload: PhotoUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    photo = await get_or_404(db, Photo, photo_id, "Photo")
    await policy.authorize(
        db, current_user, "photo", "update", photo,
        "You don't have permission to update this photo",
    )

    if payload.status and policy.role_of(current_user) not in policy.PHOTO_STATUS_ROLES:
        raise AppException("Only owners can change a photo's status", status_code=403)

    if payload.caption is not None:
        photo.caption = payload.caption
    if payload.status:
        photo.status = payload.status.value

    await db.commit()
    await db.refresh(photo)
    return success_response(data=PhotoResponse.serialize(photo), message="Photo updated successfully")


@router.delete("/{photo_id}")
async def delete_photo(
    photo_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    photo = await get_or_404(db, Photo, photo_id, "Photo")
    await policy.authorize(
        db, current_user, "photo", "delete", photo,
        "You don't have permission to delete this photo",
    )

    file_path = photo.file_path
    await db.delete(photo)
    await db.commit()
    storage.remove_stored_file(file_path)

    logger.info("Photo %s deleted by %s", photo_id, current_user.id)
    return success_response(message="Photo deleted successfully")
