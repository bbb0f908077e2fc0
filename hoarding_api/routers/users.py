import logging
import math
import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api import policy
from hoarding_api.database import get_db
from hoarding_api.dependencies import get_current_user
from hoarding_api.models.enums import ProfileStatus, Role
from hoarding_api.models.profile import ClientProfile, PhotographerProfile
from hoarding_api.models.user import User
from hoarding_api.schemas.base import parse_payload
from hoarding_api.schemas.user import (
    ChangePasswordRequest,
    ClientResponse,
    LoginRequest,
    PhotographerResponse,
    ProfileUpdate,
    RegisterRequest,
    UserAdminUpdate,
    UserResponse,
)
from hoarding_api.services import storage
from hoarding_api.services.security import create_access_token, hash_password, verify_password
from hoarding_api.utils.exceptions import AppException
from hoarding_api.utils.lookup import get_or_404
from hoarding_api.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _pagination(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "limit": limit, "pages": math.ceil(total / limit)}


def _name_or_email(term: str):
    pattern = f"%{term}%"
    return or_(User.name.ilike(pattern), User.email.ilike(pattern))


async def _email_taken(db: AsyncSession, email: str, exclude_id: str | None = None) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_id:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.first() is not None


@router.post("/register", status_code=201)
async def register(
    name: str = Form(...),
    email: str = Form(...),
    role: str = Form(...),
    password: str = Form(...),
    avatar: UploadFile | None = File(default=None),
    db: AsyncSession = Depends(get_db),
):
    payload = parse_payload(
        RegisterRequest,
        {"name": name, "email": email, "role": role, "password": password},
        "registration data",
    )
    email = payload.email.lower()

    if await _email_taken(db, email):
        raise AppException("User with this email already exists", status_code=409)

    avatar_content = await storage.read_image(avatar) if avatar and avatar.filename else None
    avatar_path = None

    # User, role profile and token are committed together or not at all.
    try:
        if avatar_content is not None:
            filename = f"{email}-{storage.build_filename('avatar', avatar.filename)}"
            avatar_path = storage.write_file("users", filename, avatar_content)

        user = User(
            id=str(uuid.uuid4()),
            name=payload.name,
            email=email,
            role=payload.role.value,
            password_hash=hash_password(payload.password),
            avatar=avatar_path,
        )
        db.add(user)
        await db.flush()

        if payload.role == Role.PHOTOGRAPHER:
            db.add(PhotographerProfile(id=str(uuid.uuid4()), user_id=user.id))
        elif payload.role == Role.CLIENT:
            db.add(ClientProfile(id=str(uuid.uuid4()), user_id=user.id, contact_person=user.name))

        token = create_access_token(user)
        await db.commit()
    except Exception:
        await db.rollback()
        storage.remove_stored_file(avatar_path)
        logger.exception("Registration aborted for %s", email)
        raise

    await db.refresh(user)
    logger.info("Registered %s user %s", user.role, user.id)
    return success_response(
        data={"user": UserResponse.serialize(user), "token": token},
        message="User registered successfully",
        status_code=201,
    )


@router.post("/login")
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == request.email.lower()))
    user = result.scalars().first()

    if user is None:
        raise AppException("User not found", status_code=404)

    if not verify_password(request.password, user.password_hash):
        raise AppException("Invalid credentials", status_code=401)

    return success_response(
        data={"user": UserResponse.serialize(user), "token": create_access_token(user)},
        message="Logged in successfully",
    )


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return success_response(data=UserResponse.serialize(current_user), message="User profile fetched successfully")


@router.put("/profile")
async def update_profile(
    name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    phone: str | None = Form(default=None),
    location: str | None = Form(default=None),
    avatar: UploadFile | None = File(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    payload = parse_payload(
        ProfileUpdate,
        {"name": name or None, "email": email or None, "phone": phone, "location": location},
        "profile data",
    )

    if payload.email:
        new_email = payload.email.lower()
        if await _email_taken(db, new_email, exclude_id=current_user.id):
            raise AppException("Email already in use by another account", status_code=409)
        current_user.email = new_email
    if payload.name:
        current_user.name = payload.name
    if payload.phone is not None:
        current_user.phone = payload.phone
    if payload.location is not None:
        current_user.location = payload.location

    if avatar and avatar.filename:
        content = await storage.read_image(avatar)
        filename = f"{current_user.email}-{storage.build_filename('avatar', avatar.filename)}"
        old_avatar = current_user.avatar
        current_user.avatar = storage.write_file("users", filename, content)
        storage.remove_stored_file(old_avatar)

    await db.commit()
    await db.refresh(current_user)
    return success_response(data=UserResponse.serialize(current_user), message="User profile updated successfully")


@router.put("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not verify_password(request.current_password, current_user.password_hash):
        raise AppException("Current password is incorrect", status_code=401)

    current_user.password_hash = hash_password(request.new_password)
    await db.commit()
    return success_response(message="Password changed successfully")


@router.get("")
async def list_users(
    role: Role | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    policy.require(current_user, "user", "read")
    query = select(User)
    if role:
        query = query.where(User.role == role.value)
    if search:
        query = query.where(_name_or_email(search))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(query.order_by(User.created_at).offset((page - 1) * limit).limit(limit))
    users = [UserResponse.serialize(u) for u in result.scalars().all()]

    return success_response(
        data={"users": users, "pagination": _pagination(total, page, limit)},
        message="Users fetched successfully",
    )


@router.get("/photographers")
async def list_photographers(
    search: str | None = None,
    status: ProfileStatus | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    policy.require(current_user, "user", "read")
    query = select(PhotographerProfile, User).join(User, User.id == PhotographerProfile.user_id)
    if status:
        query = query.where(PhotographerProfile.status == status.value)
    if search:
        query = query.where(_name_or_email(search))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(PhotographerProfile.created_at).offset((page - 1) * limit).limit(limit)
    )

    photographers = [
        PhotographerResponse.serialize({
            "id": profile.id,
            "uid": user.id,
            "status": profile.status,
            "assigned_hoardings": profile.assigned_hoardings,
            "photos_uploaded": profile.photos_uploaded,
            "bio": profile.bio,
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "location": user.location,
            "avatar": user.avatar,
            "role": user.role,
        })
        for profile, user in result.all()
    ]

    return success_response(
        data={"photographers": photographers, "pagination": _pagination(total, page, limit)},
        message="Photographers fetched successfully",
    )


@router.get("/clients")
async def list_clients(
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    policy.require(current_user, "user", "read")
    query = select(ClientProfile, User).join(User, User.id == ClientProfile.user_id)
    if search:
        query = query.where(_name_or_email(search))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(query.order_by(ClientProfile.created_at).offset((page - 1) * limit).limit(limit))

    clients = [
        ClientResponse.serialize({
            "id": profile.id,
            "uid": UserResponse.model_validate(user),
            "contact_person": profile.contact_person,
            "status": profile.status,
            "hoardings_count": profile.hoardings_count,
            "contracts_count": profile.contracts_count,
            "created_at": profile.created_at,
            "updated_at": profile.updated_at,
        })
        for profile, user in result.all()
    ]

    return success_response(
        data={"clients": clients, "pagination": _pagination(total, page, limit)},
        message="Clients fetched successfully",
    )


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await get_or_404(db, User, user_id, "User")
    await policy.authorize(db, current_user, "user", "read", user)
    return success_response(data=UserResponse.serialize(user), message="User fetched successfully")


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    request: UserAdminUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await get_or_404(db, User, user_id, "User")
    await policy.authorize(db, current_user, "user", "update", user, "Forbidden - Admin access required")

    if request.name:
        user.name = request.name
    if request.email:
        new_email = request.email.lower()
        if await _email_taken(db, new_email, exclude_id=user.id):
            raise AppException("Email already in use by another account", status_code=409)
        user.email = new_email
    if request.role:
        user.role = request.role.value

    await db.commit()
    await db.refresh(user)
    return success_response(data=UserResponse.serialize(user), message="User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    policy.require(current_user, "user", "delete", "Forbidden - Admin access required")
    if user_id == current_user.id:
        raise AppException("Cannot delete your own account", status_code=400)

    user = await get_or_404(db, User, user_id, "User")

    for profile_model in (PhotographerProfile, ClientProfile):
        result = await db.execute(select(profile_model).where(profile_model.user_id == user.id))
        for profile in result.scalars().all():
            await db.delete(profile)

    avatar = user.avatar
    await db.delete(user)
    await db.commit()
    storage.remove_stored_file(avatar)

    logger.info("User %s deleted by %s", user_id, current_user.id)
    return success_response(message="User deleted successfully")
