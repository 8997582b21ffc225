"""
HolidayEase Backend - Authentication Routes
Sign-in against the booking API and session status
"""

from fastapi import APIRouter, Body, Depends, HTTPException, status
from typing import Optional

from app.errors import AuthenticationError
from app.models import AuthStatus, Credential
from app.services import Services, get_services

router = APIRouter(prefix="/v1/auth", tags=["Authentication"])


def _status(services: Services) -> AuthStatus:
    manager = services.session_manager
    session = manager.session
    return AuthStatus(
        is_authenticated=manager.is_authenticated,
        expires_on=manager.token_expiry,
        user_info=session.user_info if session else None,
    )


@router.post(
    "/login",
    response_model=AuthStatus,
    summary="Sign in to the booking API",
    description="Authenticate with the given agency credential, or the configured default when no body is sent."
)
async def login(
    credential: Optional[Credential] = Body(None),
    services: Services = Depends(get_services),
):
    try:
        await services.session_manager.login(credential)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )
    return _status(services)


@router.post("/logout", response_model=AuthStatus, summary="Drop the current session")
async def logout(services: Services = Depends(get_services)):
    """Clear the token and revert to the default credential."""
    services.session_manager.logout()
    return _status(services)


@router.get("/status", response_model=AuthStatus, summary="Current session state")
async def auth_status(services: Services = Depends(get_services)):
    return _status(services)
