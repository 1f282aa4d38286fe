"""
FastAPI dependencies for the calling actor and the application service.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from access_review.config import get_settings
from access_review.kernel.models.application import Actor, UserRole
from access_review.services.application_service import ApplicationService


@lru_cache
def get_application_service() -> ApplicationService:
    """Process-wide service instance; tests replace it via dependency_overrides."""
    return ApplicationService.from_settings(get_settings())


Service = Annotated[ApplicationService, Depends(get_application_service)]


async def get_current_actor(
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_user_role: Annotated[Optional[str], Header()] = None,
    x_user_name: Annotated[Optional[str], Header()] = None,
) -> Actor:
    """
    Actor identity as asserted by the upstream gateway.

    Token exchange happens before requests reach this service; it forwards
    the authenticated user in X-User-Id / X-User-Role / X-User-Name.
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        role = UserRole(x_user_role.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role: {x_user_role}",
        )
    return Actor(user_id=x_user_id, role=role, display_name=x_user_name)


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
