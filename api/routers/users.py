"""
Users API Endpoints.

User management for super admins. Other roles may list users but every
mutation returns 403.
"""

from typing import List

from fastapi import APIRouter, Depends

from api.dependencies import get_actor, get_platform
from api.models import AddUserRequest, UpdateUserRequest, UserResponse
from domain.user import Actor
from services.platform import Platform

router = APIRouter()


@router.get("/users", response_model=List[UserResponse], summary="List Users")
def list_users(platform: Platform = Depends(get_platform)):
    return [UserResponse.from_domain(u) for u in platform.users.list_users()]


@router.post("/users", response_model=UserResponse, status_code=201, summary="Add User")
def add_user(
    request: AddUserRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    user = platform.users.add_user(actor, request.username, request.role)
    return UserResponse.from_domain(user)


@router.put("/users/{user_id}", response_model=UserResponse, summary="Update User")
def update_user(
    user_id: str,
    request: UpdateUserRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    user = platform.users.update_user(actor, user_id, username=request.username, role=request.role)
    return UserResponse.from_domain(user)


@router.delete("/users/{user_id}", status_code=204, summary="Delete User")
def delete_user(
    user_id: str,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    """Returns 409 with `CannotDeleteSelf` when an admin targets its own account."""
    platform.users.delete_user(actor, user_id)
