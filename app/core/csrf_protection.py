"""
Ochrana proti CSRF (double submit cookie).

Týká se jen požadavků přihlášených přes cookie:
- při přihlášení se vygeneruje csrf_token a uloží do cookie (čitelné z JS)
- frontend ho posílá v hlavičce X-CSRF-Token
- middleware ověří, že se hodnoty shodují
"""
import secrets
import hmac
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Optional, Set
from core.cookie_auth import ACCESS_TOKEN_COOKIE, CSRF_TOKEN_COOKIE


CSRF_PROTECTED_METHODS: Set[str] = {"POST", "PUT", "PATCH", "DELETE"}

# Cesty bez CSRF kontroly (webhooky, přihlášení tokenem třetí strany)
CSRF_EXEMPT_PATHS: Set[str] = {
    "/payments/webhook/stripe",
    "/auth/google-login",
    "/auth/login",
    "/auth/register",
}

CSRF_HEADER_NAME = "X-CSRF-Token"


def generate_csrf_token() -> str:
    """Náhodný CSRF token (32 bajtů hex)."""
    return secrets.token_hex(32)


def validate_csrf_token(cookie_token: Optional[str], header_token: Optional[str]) -> bool:
    """Porovnat token z cookie a z hlavičky v konstantním čase."""
    if not cookie_token or not header_token:
        return False
    return hmac.compare_digest(cookie_token, header_token)


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Middleware pro CSRF kontrolu mutujících požadavků.

    Kontroluje se každý požadavek s cookie access_token, i když nese
    Bearer hlavičku: get_current_user dává cookie přednost. Požadavky
    jen s Bearer tokenem se nekontrolují.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method not in CSRF_PROTECTED_METHODS:
            return await call_next(request)

        path = request.url.path
        if any(path.startswith(exempt) for exempt in CSRF_EXEMPT_PATHS):
            return await call_next(request)

        if request.cookies.get(ACCESS_TOKEN_COOKIE):
            csrf_cookie = request.cookies.get(CSRF_TOKEN_COOKIE)
            csrf_header = request.headers.get(CSRF_HEADER_NAME)

            if not validate_csrf_token(csrf_cookie, csrf_header):
                return JSONResponse(
                    status_code=status.HTTP_403_FORBIDDEN,
                    content={
                        "success": False,
                        "status_code": 403,
                        "message": "Neplatný nebo chybějící CSRF token",
                        "error": "CSRF_VALIDATION_FAILED"
                    }
                )

        return await call_next(request)
