import logging

import jwt
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api.database import get_db
from hoarding_api.models.user import User
from hoarding_api.services.security import decode_access_token
from hoarding_api.utils.exceptions import AppException

logger = logging.getLogger(__name__)


async def get_current_user(
    authorization: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not authorization.startswith("Bearer "):
        raise AppException("Authorization header is missing or invalid", status_code=401)

    token = authorization[len("Bearer "):].strip()
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as exc:
        logger.info("Rejected access token: %s", exc)
        raise AppException("Unauthorized user", status_code=401)

    user_id = payload.get("sub")
    user = await db.get(User, user_id) if user_id else None
    if user is None:
        raise AppException("Unauthorized user", status_code=401)
    return user
