"""Auth routes. Both are public: they answer whether or not a user resolves."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from nexus.core.config import Settings, get_settings
from nexus.routes.dependencies import get_optional_principal, get_user_service
from nexus.schemas.auth import AuthPrincipal, LogoutResponse, User
from nexus.services.users import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=User | None)
async def get_me(
    principal: Annotated[AuthPrincipal | None, Depends(get_optional_principal)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> User | None:
    return service.current_user(principal)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> LogoutResponse:
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        secure=True,
        httponly=True,
        samesite="none",
    )
    return LogoutResponse(success=True)
