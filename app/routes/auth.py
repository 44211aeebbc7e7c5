"""
Endpointy přihlášení: registrace, login, Google, obnovení hesla.

Bezpečnost relací:
- HttpOnly cookies pro access_token a refresh_token
- CSRF ochrana pro požadavky přihlášené přes cookie
- Tokeny se vrací i v těle odpovědi (Bearer pro API klienty)
"""
import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
from typing import Optional
from core.database import get_db
from core.security import hash_password, verify_password, create_token_pair, decode_token
from core.email_service import email_service
from core.firebase_service import firebase_service
from core.config import settings
from core.dependencies import get_current_user
from core.redis_service import CartService, TokenBlacklistService
from core.cookie_auth import (
    set_auth_cookies,
    clear_auth_cookies,
    get_refresh_token_from_request,
    get_access_token_from_request
)
from core.csrf_protection import generate_csrf_token
from models.user import User, UserRole
from models.password_reset import PasswordResetToken
from schemas.auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    UserResponse,
    GoogleLoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _as_utc(value: datetime) -> datetime:
    # SQLite vrací časy bez zóny
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _serialize_user(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


def _merge_guest_cart(guest_cart_id: Optional[str], user: User) -> None:
    """Po přihlášení přesunout košík návštěvníka k uživateli."""
    if guest_cart_id:
        CartService.merge_carts(
            CartService.guest_cart_id(guest_cart_id),
            CartService.user_cart_id(user.id)
        )


def _issue_tokens(response: Response, user: User) -> dict:
    """Vydat tokeny, nastavit cookies a vrátit data pro tělo odpovědi."""
    tokens = create_token_pair(user)
    csrf_token = generate_csrf_token()
    set_auth_cookies(response, tokens["access_token"], tokens["refresh_token"], csrf_token)

    return {
        "access_token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": _serialize_user(user)
    }


def _inactive_user() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "success": False,
            "status_code": 403,
            "message": "Účet je zablokovaný. Kontaktujte prosím pekárnu.",
            "error": "USER_INACTIVE"
        }
    )


# ==================== REGISTRACE ====================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Registrace nového zákazníka.

    - Role je vždy USER
    - Uživatel je rovnou přihlášen (tokeny + cookies)
    - Případný košík návštěvníka se sloučí s účtem
    """
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Email je již registrován",
                "error": "EMAIL_ALREADY_EXISTS"
            }
        )

    new_user = User(
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        full_name=user_data.full_name.strip(),
        phone=user_data.phone,
        role=UserRole.USER,
        is_active=True,
        auth_provider="local"
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    _merge_guest_cart(user_data.guest_cart_id, new_user)

    return {
        "success": True,
        "status_code": 201,
        "message": "Registrace proběhla úspěšně",
        "data": _issue_tokens(response, new_user)
    }


# ==================== LOGIN ====================

@router.post("/login")
async def login(
    credentials: UserLogin,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Přihlášení emailem a heslem.

    Cookies (HttpOnly, SameSite=Lax):
    - access_token: JWT pro přístup
    - refresh_token: JWT pro obnovení (dlouhá platnost)
    - csrf_token: pro ochranu formulářů (není HttpOnly)
    """
    user = db.query(User).filter(User.email == credentials.email).first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Nesprávný email nebo heslo",
                "error": "INVALID_CREDENTIALS"
            }
        )

    if not user.is_active:
        raise _inactive_user()

    _merge_guest_cart(credentials.guest_cart_id, user)

    return {
        "success": True,
        "status_code": 200,
        "message": "Přihlášení proběhlo úspěšně",
        "data": _issue_tokens(response, user)
    }


# ==================== GOOGLE ====================

@router.post("/google-login")
async def google_login(
    request: GoogleLoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Přihlášení nebo registrace přes Google (Firebase).

    Token z frontendu se ověřuje na serveru přes firebase-admin,
    poté se vydají vlastní JWT tokeny aplikace.
    """
    firebase_user = firebase_service.verify_token(request.firebase_token)

    if not firebase_user or not firebase_user.get("email"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Z účtu Google se nepodařilo získat email",
                "error": "GOOGLE_USER_INFO_MISSING"
            }
        )

    email = firebase_user["email"]
    firebase_uid = firebase_user["uid"]
    full_name = firebase_user.get("name") or email.split("@")[0]

    user = db.query(User).filter(
        (User.email == email) | (User.firebase_uid == firebase_uid)
    ).first()

    is_new_user = False

    if not user:
        user = User(
            email=email,
            full_name=full_name,
            firebase_uid=firebase_uid,
            auth_provider="google",
            role=UserRole.USER,
            is_active=True,
            hashed_password=None
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        is_new_user = True
        logger.info("Nový uživatel přes Google: %s", email)

    elif not user.firebase_uid:
        # Existující účet s heslem se propojí s Googlem
        user.firebase_uid = firebase_uid
        db.commit()
        db.refresh(user)
        logger.info("Účet propojen s Googlem: %s", email)

    if not user.is_active:
        raise _inactive_user()

    _merge_guest_cart(request.guest_cart_id, user)

    data = _issue_tokens(response, user)
    data["is_new_user"] = is_new_user

    return {
        "success": True,
        "status_code": 200,
        "message": "Účet vytvořen přes Google" if is_new_user else "Přihlášení přes Google proběhlo úspěšně",
        "data": data
    }


# ==================== PROFIL ====================

@router.get("/me")
async def get_me(
    current_user: User = Depends(get_current_user)
):
    """
    Přihlášený uživatel (Bearer token nebo HttpOnly cookie).
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Uživatel načten",
        "data": _serialize_user(current_user)
    }


# ==================== REFRESH TOKEN ====================

@router.post("/refresh")
async def refresh_token_endpoint(
    request: Request,
    response: Response,
    body: Optional[RefreshTokenRequest] = None,
    db: Session = Depends(get_db)
):
    """
    Obnovit tokeny pomocí refresh tokenu.

    Refresh token se čte z HttpOnly cookie, případně z těla požadavku.
    """
    refresh_token = get_refresh_token_from_request(request)
    if not refresh_token and body:
        refresh_token = body.refresh_token

    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Chybí refresh token",
                "error": "REFRESH_TOKEN_REQUIRED"
            }
        )

    payload = decode_token(refresh_token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Refresh token je neplatný nebo expirovaný",
                "error": "INVALID_REFRESH_TOKEN"
            }
        )

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Neplatný typ tokenu",
                "error": "INVALID_TOKEN_TYPE"
            }
        )

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Neplatný token",
                "error": "INVALID_TOKEN"
            }
        )

    user = db.query(User).filter(User.id == user_id).first()

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Uživatel nenalezen nebo je zablokovaný",
                "error": "USER_NOT_FOUND"
            }
        )

    data = _issue_tokens(response, user)
    data.pop("user")

    return {
        "success": True,
        "status_code": 200,
        "message": "Tokeny obnoveny",
        "data": data
    }


# ==================== ODHLÁŠENÍ ====================

@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_current_user)
):
    """
    Odhlášení: access token jde do blacklistu v Redisu
    (do své přirozené expirace) a cookies se smažou.
    """
    token = get_access_token_from_request(request)

    if token:
        payload = decode_token(token)

        if payload and "jti" in payload and "exp" in payload:
            expires_in_seconds = int(payload["exp"] - datetime.now(timezone.utc).timestamp())
            if expires_in_seconds > 0:
                TokenBlacklistService.revoke_token(
                    token_jti=payload["jti"],
                    expires_in_seconds=expires_in_seconds
                )

    clear_auth_cookies(response)

    return {
        "success": True,
        "status_code": 200,
        "message": "Odhlášení proběhlo úspěšně"
    }


# ==================== ZAPOMENUTÉ HESLO ====================

@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    db: Session = Depends(get_db)
):
    """
    Poslat odkaz pro obnovení hesla.

    Odpověď je vždy stejná, aby nešlo zjistit, které emaily jsou registrované.
    """
    user = db.query(User).filter(User.email == request.email).first()

    if user and user.is_active and user.hashed_password:
        # Starší nepoužité odkazy přestanou platit
        db.query(PasswordResetToken).filter(
            PasswordResetToken.user_id == user.id,
            PasswordResetToken.is_used == False
        ).update({"is_used": True})

        reset_token = PasswordResetToken.generate_token()
        db.add(PasswordResetToken(
            user_id=user.id,
            token=reset_token,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.PASSWORD_RESET_EXPIRE_HOURS)
        ))
        db.commit()

        sent = await email_service.send_password_reset_email(
            to_email=user.email,
            full_name=user.full_name,
            reset_token=reset_token
        )
        if not sent:
            logger.warning("Email pro obnovení hesla se nepodařilo odeslat: %s", user.email)

    return {
        "success": True,
        "status_code": 200,
        "message": "Pokud účet s tímto emailem existuje, poslali jsme na něj odkaz pro obnovení hesla."
    }


@router.post("/reset-password")
async def reset_password(
    request: ResetPasswordRequest,
    db: Session = Depends(get_db)
):
    """
    Nastavit nové heslo pomocí tokenu z emailu.
    """
    token_record = db.query(PasswordResetToken).filter(
        PasswordResetToken.token == request.token,
        PasswordResetToken.is_used == False
    ).first()

    if not token_record:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Odkaz je neplatný nebo již byl použit",
                "error": "INVALID_TOKEN"
            }
        )

    if _as_utc(token_record.expires_at) < datetime.now(timezone.utc):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Platnost odkazu vypršela. Požádejte o nový.",
                "error": "TOKEN_EXPIRED"
            }
        )

    user = db.query(User).filter(User.id == token_record.user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "success": False,
                "status_code": 404,
                "message": "Uživatel nenalezen",
                "error": "USER_NOT_FOUND"
            }
        )

    user.hashed_password = hash_password(request.new_password)
    token_record.is_used = True
    token_record.used_at = datetime.now(timezone.utc)

    db.commit()

    return {
        "success": True,
        "status_code": 200,
        "message": "Heslo bylo změněno. Nyní se můžete přihlásit.",
        "data": {
            "email": user.email
        }
    }
