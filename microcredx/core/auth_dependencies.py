from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Dict, Optional
import logging

from microcredx.core.exceptions import UnauthorizedError, ForbiddenError
from microcredx.core.security import decode_token
from microcredx.database.models import RoleEnum
from microcredx.services.user_service import UserDirectoryService

logger = logging.getLogger(__name__)

# auto_error is off so a missing header produces our own 401 body instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_user_service(request: Request) -> UserDirectoryService:
    return request.app.state.user_service


# Verifies the bearer token and returns the decoded identity (uid, email)
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict:
    if credentials is None or not credentials.credentials:
        logger.warning("Request without a bearer token rejected")
        raise UnauthorizedError("Unauthorized")

    payload = decode_token(credentials.credentials)
    if payload is None:
        logger.warning("Bearer token failed verification")
        raise UnauthorizedError("Invalid token")

    email = payload.get("email")
    if not email:
        logger.warning("Verified token carries no email claim")
        raise UnauthorizedError("Invalid token")

    return {"uid": payload.get("sub") or payload.get("uid"), "email": email}


# Validates that the current user holds the admin role in the user directory
async def get_admin_user(
    current_user: Dict = Depends(get_current_user),
    user_service: UserDirectoryService = Depends(get_user_service),
) -> Dict:
    user = await user_service.find_by_email(current_user["email"])
    if user is None or user.role != RoleEnum.admin:
        logger.warning("Non-admin %s attempted an admin-only action", current_user["email"])
        raise ForbiddenError("Forbidden")
    return {**current_user, "role": user.role.value}
