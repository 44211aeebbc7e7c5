"""
Schémata pro přihlášení a registraci.
"""
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime
import uuid

from models.user import UserRole


def validate_password_strength(v: str) -> str:
    """Heslo musí obsahovat číslici, velké a malé písmeno"""
    if not any(char.isdigit() for char in v):
        raise ValueError('Heslo musí obsahovat alespoň jednu číslici')
    if not any(char.isupper() for char in v):
        raise ValueError('Heslo musí obsahovat alespoň jedno velké písmeno')
    if not any(char.islower() for char in v):
        raise ValueError('Heslo musí obsahovat alespoň jedno malé písmeno')
    return v


# ==================== AUTH ====================

class UserRegister(BaseModel):
    """Registrace nového zákazníka (role se nastavuje vždy na USER)"""
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=8, max_length=100, description="Heslo (min. 8 znaků)")
    full_name: str = Field(..., min_length=2, max_length=255, description="Jméno a příjmení")
    phone: Optional[str] = Field(None, max_length=30, description="Telefon")
    guest_cart_id: Optional[str] = Field(None, max_length=100, description="Košík návštěvníka ke sloučení")

    @validator('password')
    def validate_password(cls, v):
        return validate_password_strength(v)


class UserLogin(BaseModel):
    """Přihlášení emailem a heslem"""
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., description="Heslo")
    guest_cart_id: Optional[str] = Field(None, max_length=100, description="Košík návštěvníka ke sloučení")


class RefreshTokenRequest(BaseModel):
    refresh_token: Optional[str] = Field(None, description="Refresh token (pokud není v cookie)")


class ForgotPasswordRequest(BaseModel):
    """Žádost o obnovení hesla"""
    email: EmailStr = Field(..., description="Email účtu")


class ResetPasswordRequest(BaseModel):
    """Nastavení nového hesla z odkazu v emailu"""
    token: str = Field(..., min_length=10, description="Token z emailu")
    new_password: str = Field(..., min_length=8, max_length=100, description="Nové heslo")
    confirm_password: str = Field(..., description="Potvrzení hesla")

    @validator('new_password')
    def validate_password(cls, v):
        return validate_password_strength(v)

    @validator('confirm_password')
    def passwords_match(cls, v, values):
        if 'new_password' in values and v != values['new_password']:
            raise ValueError('Hesla se neshodují')
        return v


class GoogleLoginRequest(BaseModel):
    """Přihlášení přes Google (Firebase ID token)"""
    firebase_token: str = Field(..., description="Firebase ID token")
    guest_cart_id: Optional[str] = Field(None, max_length=100)


# ==================== USER ====================

class UserResponse(BaseModel):
    """Přihlášený uživatel"""
    id: uuid.UUID
    email: EmailStr
    full_name: Optional[str]
    phone: Optional[str]
    role: UserRole
    is_active: bool
    is_company: bool
    company_name: Optional[str]
    ico: Optional[str]
    dic: Optional[str]
    auth_provider: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
