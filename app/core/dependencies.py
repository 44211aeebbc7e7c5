"""
Autentizační závislosti pro FastAPI.

Podporované způsoby přihlášení:
1. HttpOnly cookie 'access_token' (webový frontend)
2. Hlavička 'Authorization: Bearer <token>' (API klienti)

Role (USER / EMPLOYEE / ADMIN) omezují přístup k administraci.
"""
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from core.database import get_db
from core.security import decode_token
from core.redis_service import TokenBlacklistService
from core.cookie_auth import get_access_token_from_request
from models.user import User, UserRole
import uuid


class CustomHTTPBearer(HTTPBearer):
    """
    Bearer schéma, které při chybějícím tokenu neselže.
    Kontrolu dělá get_current_user, která čte i cookies.
    """
    async def __call__(self, request: Request) -> Optional[HTTPAuthorizationCredentials]:
        try:
            return await super().__call__(request)
        except HTTPException:
            return None


security = CustomHTTPBearer(auto_error=False)


def _unauthorized(message: str, error: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "success": False,
            "status_code": 401,
            "message": message,
            "error": error
        },
        headers={"WWW-Authenticate": "Bearer"}
    )


def _resolve_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = get_access_token_from_request(request)
    if not token and credentials:
        token = credentials.credentials
    return token


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Přihlášený uživatel z cookie nebo Bearer tokenu.

    Použití:
        @router.get("/me")
        async def get_me(current_user: User = Depends(get_current_user)):
            return current_user
    """
    token = _resolve_token(request, credentials)
    if not token:
        raise _unauthorized("Pro tuto akci se musíte přihlásit", "AUTHENTICATION_REQUIRED")

    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        raise _unauthorized("Neplatný nebo expirovaný token", "INVALID_TOKEN")

    # Token odvolaný při odhlášení
    token_jti = payload.get("jti")
    if token_jti and TokenBlacklistService.is_token_revoked(token_jti):
        raise _unauthorized("Token byl odvolán, přihlaste se prosím znovu", "TOKEN_REVOKED")

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _unauthorized("Neplatný token", "INVALID_TOKEN")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise _unauthorized("Uživatel nenalezen", "USER_NOT_FOUND")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "success": False,
                "status_code": 403,
                "message": "Účet je zablokovaný",
                "error": "USER_INACTIVE"
            }
        )

    return user


def require_roles(*roles: UserRole):
    """
    Závislost, která pustí dál jen uživatele s některou z rolí.

    Použití:
        @router.get("/admin/orders")
        async def list_orders(user: User = Depends(require_roles(UserRole.ADMIN, UserRole.EMPLOYEE))):
            ...
    """
    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "success": False,
                    "status_code": 403,
                    "message": "Přístup zamítnut. Nemáte dostatečná oprávnění.",
                    "error": "INSUFFICIENT_ROLE"
                }
            )
        return current_user

    return checker


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Ověřit, že přihlášený uživatel je administrátor.
    """
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "success": False,
                "status_code": 403,
                "message": "Přístup zamítnut. Pouze pro administrátory.",
                "error": "ADMIN_REQUIRED"
            }
        )
    return current_user


get_current_staff_user = require_roles(UserRole.ADMIN, UserRole.EMPLOYEE)


async def get_optional_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Přihlášený uživatel, nebo None u anonymního návštěvníka.

    Používá košík: návštěvník má košík podle X-Cart-Id, uživatel podle svého ID.
    """
    token = _resolve_token(request, credentials)
    if not token:
        return None

    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None

    token_jti = payload.get("jti")
    if token_jti and TokenBlacklistService.is_token_revoked(token_jti):
        return None

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        return None

    return db.query(User).filter(
        User.id == user_id,
        User.is_active == True
    ).first()
