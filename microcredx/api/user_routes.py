from fastapi import APIRouter, Depends, HTTPException, status
from typing import Any, Dict, List
import logging

from microcredx.core.auth_dependencies import get_admin_user, get_user_service
from microcredx.core.exceptions import ServiceError
from microcredx.helpers.response_builder import serialize_document, serialize_documents, update_result
from microcredx.schemas import RoleResponse, RoleUpdate, UserRegister
from microcredx.services.user_service import UserDirectoryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.get("/all-user", response_model=List[Dict[str, Any]])
async def list_users(service: UserDirectoryService = Depends(get_user_service)):
    try:
        return serialize_documents(await service.list_all())
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error listing users: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch users")


# Registers the user on first sight, otherwise returns the stored record unchanged
@router.post("/save-user", response_model=Dict[str, Any])
async def save_user(payload: UserRegister, service: UserDirectoryService = Depends(get_user_service)):
    try:
        user = await service.register_or_fetch(payload.email, name=payload.name, role=payload.role)
        return serialize_document(user)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error saving user {payload.email}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save user")


@router.get("/user-role/{email}", response_model=RoleResponse)
async def get_user_role(email: str, service: UserDirectoryService = Depends(get_user_service)):
    try:
        role = await service.get_role(email)
        return RoleResponse(role=role.value)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching role for {email}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch role")


# Changing roles is reserved to admins
@router.patch("/update-role/{user_id}", response_model=Dict[str, Any])
async def update_role(
    user_id: str,
    payload: RoleUpdate,
    admin_user: Dict = Depends(get_admin_user),
    service: UserDirectoryService = Depends(get_user_service),
):
    try:
        result = await service.set_role(user_id, payload.role)
        logger.info(f"Role of user {user_id} changed by {admin_user['email']}")
        return update_result(result)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error updating role of user {user_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update role")


@router.get("/pending-loans-count", response_model=Dict[str, int])
async def pending_loans_count(service: UserDirectoryService = Depends(get_user_service)):
    try:
        return {"count": await service.count_pending()}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error counting pending loans: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to get count")
