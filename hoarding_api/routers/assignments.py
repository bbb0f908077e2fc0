import logging
import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api import policy
from hoarding_api.database import get_db
from hoarding_api.dependencies import get_current_user
from hoarding_api.models.assignment import Assignment
from hoarding_api.models.enums import AssignmentStatus, Role
from hoarding_api.models.hoarding import Hoarding
from hoarding_api.models.photo import Photo
from hoarding_api.models.profile import PhotographerProfile
from hoarding_api.models.user import User
from hoarding_api.schemas.assignment import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentStatusUpdate,
    PhotographerStats,
)
from hoarding_api.utils.dates import to_iso, utcnow
from hoarding_api.utils.exceptions import AppException
from hoarding_api.utils.lookup import get_or_404, validate_id
from hoarding_api.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["assignments"])


async def _resolve_photographer(db: AsyncSession, photographer_id: str) -> tuple[User, PhotographerProfile | None]:
    """Accept either a photographer's user id or their profile id."""
    validate_id(photographer_id, "photographer")

    user = await db.get(User, photographer_id)
    if user is not None:
        if user.role != Role.PHOTOGRAPHER.value:
            raise AppException("Photographer not found", status_code=404)
        result = await db.execute(
            select(PhotographerProfile).where(PhotographerProfile.user_id == user.id)
        )
        return user, result.scalars().first()

    profile = await db.get(PhotographerProfile, photographer_id)
    if profile is None:
        raise AppException("Photographer not found", status_code=404)
    user = await db.get(User, profile.user_id)
    if user is None or user.role != Role.PHOTOGRAPHER.value:
        raise AppException("Photographer not found or invalid", status_code=404)
    return user, profile


@router.get("/photographers/stats")
async def photographer_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    policy.require(current_user, "assignment", "stats", "Only photographers can access their stats")

    counts_result = await db.execute(
        select(Assignment.status, func.count())
        .where(Assignment.photographer_id == current_user.id)
        .group_by(Assignment.status)
    )
    counts = dict(counts_result.all())
    assigned = counts.get(AssignmentStatus.ASSIGNED.value, 0)
    in_progress = counts.get(AssignmentStatus.IN_PROGRESS.value, 0)
    completed = counts.get(AssignmentStatus.COMPLETED.value, 0)

    now = utcnow()
    due_soon = (await db.execute(
        select(func.count()).select_from(Assignment).where(
            Assignment.photographer_id == current_user.id,
            Assignment.status.in_([AssignmentStatus.ASSIGNED.value, AssignmentStatus.IN_PROGRESS.value]),
            Assignment.due_date >= to_iso(now),
            Assignment.due_date <= to_iso(now + timedelta(hours=48)),
        )
    )).scalar_one()

    locations = (await db.execute(
        select(func.count(func.distinct(Hoarding.city)))
        .select_from(Assignment)
        .join(Hoarding, Hoarding.id == Assignment.hoarding_id)
        .where(Assignment.photographer_id == current_user.id)
    )).scalar_one()

    photos_uploaded = (await db.execute(
        select(func.count()).select_from(Photo).where(Photo.uploaded_by_id == current_user.id)
    )).scalar_one()

    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    this_month = (await db.execute(
        select(func.count()).select_from(Assignment).where(
            Assignment.photographer_id == current_user.id,
            Assignment.status == AssignmentStatus.COMPLETED.value,
            Assignment.updated_at >= to_iso(start_of_month),
        )
    )).scalar_one()

    stats = PhotographerStats(
        assigned=assigned,
        in_progress=in_progress,
        completed=completed,
        assigned_hoardings=assigned + in_progress,
        pending_uploads=assigned + in_progress,
        due_soon=due_soon,
        locations=locations,
        photos_uploaded=photos_uploaded,
        this_month=this_month,
    )
    return success_response(
        data=stats.model_dump(by_alias=True),
        message="Photographer stats fetched successfully",
    )


@router.post("", status_code=201)
async def create_assignment(
    payload: AssignmentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hoarding = await get_or_404(db, Hoarding, payload.hoarding_id, "Hoarding")
    photographer, profile = await _resolve_photographer(db, payload.photographer_id)

    policy.require(current_user, "assignment", "create", "Only owners can create assignments")
    await policy.authorize(
        db, current_user, "hoarding", "update", hoarding,
        "You can only assign photographers to your own hoardings",
    )

    assignment = Assignment(
        id=str(uuid.uuid4()),
        hoarding_id=hoarding.id,
        photographer_id=photographer.id,
        assigned_by_id=current_user.id,
        due_date=to_iso(payload.due_date),
        notes=payload.notes,
        status=AssignmentStatus.ASSIGNED.value,
    )
    db.add(assignment)
    if profile is not None:
        profile.assigned_hoardings += 1
    await db.commit()
    await db.refresh(assignment)

    logger.info("Assignment %s created for photographer %s", assignment.id, photographer.id)
    return success_response(
        data=AssignmentResponse.serialize(assignment),
        message="Assignment created successfully",
        status_code=201,
    )


@router.get("")
async def list_assignments(
    status: AssignmentStatus | None = None,
    photographer_id: str | None = Query(default=None, alias="photographerId"),
    hoarding_id: str | None = Query(default=None, alias="hoardingId"),
    id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    # Photographers are scoped to themselves whatever filters they pass.
    filters = policy.scope(current_user, "assignment", "read", "You don't have permission to view assignments")
    if status:
        filters.append(Assignment.status == status.value)
    if hoarding_id:
        filters.append(Assignment.hoarding_id == hoarding_id)
    if id:
        filters.append(Assignment.id == id)
    if photographer_id and policy.role_of(current_user) == Role.OWNER:
        filters.append(Assignment.photographer_id == photographer_id)

    result = await db.execute(select(Assignment).where(*filters).order_by(Assignment.due_date))
    data = [AssignmentResponse.serialize(a) for a in result.scalars().all()]
    return success_response(data=data, message="Assignments fetched successfully")


@router.get("/{assignment_id}")
async def get_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    assignment = await get_or_404(db, Assignment, assignment_id, "Assignment")
    await policy.authorize(
        db, current_user, "assignment", "read", assignment,
        "You don't have access to this assignment",
    )
    return success_response(data=AssignmentResponse.serialize(assignment), message="Assignment fetched successfully")


@router.put("/{assignment_id}/status")
async def update_assignment_status(
    assignment_id: str,
    payload: AssignmentStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    assignment = await get_or_404(db, Assignment, assignment_id, "Assignment")
    await policy.authorize(
        db, current_user, "assignment", "update", assignment,
        "You don't have permission to update this assignment",
    )

    if policy.role_of(current_user) == Role.PHOTOGRAPHER:
        transition = (assignment.status, payload.status.value)
        if transition not in policy.PHOTOGRAPHER_TRANSITIONS:
            raise AppException(
                f"Photographers cannot move an assignment from {transition[0]} to {transition[1]}",
                status_code=403,
            )

    assignment.status = payload.status.value
    if payload.notes:
        assignment.notes = payload.notes

    await db.commit()
    await db.refresh(assignment)
    return success_response(data=AssignmentResponse.serialize(assignment), message="Assignment updated successfully")


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    assignment = await get_or_404(db, Assignment, assignment_id, "Assignment")
    await policy.authorize(
        db, current_user, "assignment", "delete", assignment,
        "You don't have permission to delete this assignment",
    )

    await db.delete(assignment)
    await db.commit()
    return success_response(message="Assignment deleted successfully")
