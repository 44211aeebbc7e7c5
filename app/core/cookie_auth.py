"""
Přihlášení přes HttpOnly cookies.

- access_token a refresh_token jsou HttpOnly (JavaScript je nepřečte)
- csrf_token není HttpOnly, frontend ho posílá v hlavičce X-CSRF-Token
"""
from fastapi import Response, Request
from typing import Optional
from core.config import settings


ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
CSRF_TOKEN_COOKIE = "csrf_token"


def _is_production() -> bool:
    return settings.ENV != "development"


def get_cookie_settings(is_refresh: bool = False) -> dict:
    """
    Nastavení cookies podle prostředí.

    Args:
        is_refresh: True pro refresh token (delší platnost)
    """
    if is_refresh:
        max_age = settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    else:
        max_age = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    return {
        "httponly": True,
        "secure": _is_production(),
        "samesite": "lax",
        "max_age": max_age,
        "path": "/",
        "domain": settings.COOKIE_DOMAIN or None,
    }


def set_auth_cookies(
    response: Response,
    access_token: str,
    refresh_token: str,
    csrf_token: Optional[str] = None
) -> None:
    """Nastavit autentizační cookies do odpovědi."""
    access_settings = get_cookie_settings(is_refresh=False)
    response.set_cookie(key=ACCESS_TOKEN_COOKIE, value=access_token, **access_settings)

    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=refresh_token,
        **get_cookie_settings(is_refresh=True)
    )

    if csrf_token:
        response.set_cookie(
            key=CSRF_TOKEN_COOKIE,
            value=csrf_token,
            httponly=False,
            secure=_is_production(),
            samesite="lax",
            max_age=access_settings["max_age"],
            path="/",
            domain=settings.COOKIE_DOMAIN or None,
        )


def clear_auth_cookies(response: Response) -> None:
    """Smazat všechny autentizační cookies."""
    cookie_params = {"path": "/", "domain": settings.COOKIE_DOMAIN or None}

    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, **cookie_params)
    response.delete_cookie(key=REFRESH_TOKEN_COOKIE, **cookie_params)
    response.delete_cookie(key=CSRF_TOKEN_COOKIE, **cookie_params)


def get_access_token_from_request(request: Request) -> Optional[str]:
    """
    Access token z požadavku: nejdřív cookie, potom hlavička Authorization.
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):]

    return None


def get_refresh_token_from_request(request: Request) -> Optional[str]:
    """Refresh token pouze z cookie."""
    return request.cookies.get(REFRESH_TOKEN_COOKIE)
