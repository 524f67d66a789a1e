"""
Request dependencies.

Authentication happens upstream; the gateway forwards the signed-in user as
headers and the API turns them into an Actor for the services.
"""

from fastapi import Header, HTTPException, Request

from domain.user import Actor, UserRole
from services.platform import Platform


def get_platform(request: Request) -> Platform:
    return request.app.state.platform


def get_actor(
    x_user_id: str = Header(..., alias="X-User-Id"),
    x_username: str = Header(..., alias="X-Username"),
    x_user_role: str = Header(UserRole.USER.value, alias="X-User-Role"),
) -> Actor:
    try:
        role = UserRole(x_user_role)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown role: {x_user_role}")
    return Actor(user_id=x_user_id, username=x_username, role=role)
