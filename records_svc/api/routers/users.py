"""
Users router - account administration, ADMIN role only.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from core.auth import CallerIdentity, get_caller_identity
from core.dependencies import get_user_service
from services import UserService

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("", summary="List users")
async def list_users(
    caller: CallerIdentity = Depends(get_caller_identity),
    user_service: UserService = Depends(get_user_service)
):
    return {"users": user_service.list_users(caller)}


@router.put("/{user_id}", summary="Update a user's name, email or role")
async def update_user(
    user_id: str,
    body: Optional[Dict[str, Any]] = Body(None),
    caller: CallerIdentity = Depends(get_caller_identity),
    user_service: UserService = Depends(get_user_service)
):
    return {"updated": user_service.update_user(user_id, body, caller)}


@router.delete("/{user_id}", summary="Delete a user")
async def delete_user(
    user_id: str,
    caller: CallerIdentity = Depends(get_caller_identity),
    user_service: UserService = Depends(get_user_service)
):
    return {"deleted": user_service.delete_user(user_id, caller)}
