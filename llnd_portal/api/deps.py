from typing import AsyncIterator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.core.security import verify_token
from llnd_portal.schemas.user import CurrentUser

bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_token(token: str) -> CurrentUser:
    payload = verify_token(token)
    user_id = payload.get("sub") or payload.get("userId")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser(
        user_id=str(user_id),
        student_id=payload.get("studentId"),
        email=payload.get("email"),
        full_name=payload.get("fullName") or payload.get("name") or "",
        role=payload.get("role") or "Student",
        token=token,
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _user_from_token(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentUser]:
    """Guest endpoints accept a token but do not require one."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


async def get_portal_client(
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
) -> AsyncIterator[PortalApiClient]:
    client = PortalApiClient(token=current_user.token if current_user else None)
    try:
        yield client
    finally:
        await client.aclose()
