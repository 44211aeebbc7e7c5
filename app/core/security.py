"""
Bezpečnostní utility: hesla a JWT tokeny.
"""
import uuid
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from core.config import settings


# ==================== HASHOVÁNÍ HESEL ====================

def hash_password(password: str) -> str:
    """
    Zahashovat heslo pomocí bcrypt (60 znaků).
    """
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Ověřit heslo proti hashi. Účty přes Google heslo nemají.
    """
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


# ==================== JWT TOKENY ====================

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Vytvořit přístupový JWT token.

    Args:
        data: Payload tokenu (sub, email, role)
        expires_delta: Vlastní doba platnosti (volitelné)

    Returns:
        str: Zakódovaný JWT
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access",
        "jti": str(uuid.uuid4())  # jednoznačné ID tokenu kvůli odhlášení
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_refresh_token(data: Dict[str, Any]) -> str:
    """
    Vytvořit obnovovací JWT token (dlouhá platnost).
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    to_encode.update({
        "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        "iat": now,
        "type": "refresh",
        "jti": str(uuid.uuid4())
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_token_pair(user) -> Dict[str, str]:
    """Vytvořit access + refresh token pro uživatele."""
    access_token = create_access_token(
        data={
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value
        }
    )
    refresh_token = create_refresh_token(data={"sub": str(user.id)})
    return {"access_token": access_token, "refresh_token": refresh_token}


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Dekódovat a ověřit JWT token.

    Returns:
        Payload tokenu nebo None, pokud je neplatný či expirovaný
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
