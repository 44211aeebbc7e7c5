"""
Schémata profilu zákazníka a správy zákazníků.
"""
import re
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional

from models.user import UserRole
from schemas.auth import validate_password_strength


# ==================== PROFIL ====================

class UserUpdateProfile(BaseModel):
    """
    Úprava profilu. U firmy jsou povinné název a IČO,
    u soukromé osoby se firemní údaje mažou.
    """
    full_name: str = Field(..., min_length=2, max_length=255, description="Jméno a příjmení")
    email: EmailStr = Field(..., description="Email")
    phone: Optional[str] = Field(None, max_length=30, description="Telefon")
    is_company: bool = Field(False, description="Nakupuji na firmu")
    company_name: Optional[str] = Field(None, max_length=255, description="Název firmy")
    ico: Optional[str] = Field(None, description="IČO (8 číslic)")
    dic: Optional[str] = Field(None, max_length=20, description="DIČ")

    @validator('full_name')
    def validate_full_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError('Jméno musí mít alespoň 2 znaky')
        return v

    @validator('phone', 'company_name', 'ico', 'dic', pre=True)
    def empty_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @validator('ico')
    def validate_ico(cls, v):
        if v is not None:
            v = v.replace(' ', '')
            if not re.fullmatch(r'\d{8}', v):
                raise ValueError('IČO musí mít 8 číslic')
        return v

    @validator('dic')
    def validate_dic(cls, v):
        if v is not None:
            v = v.replace(' ', '').upper()
        return v


class UserChangePassword(BaseModel):
    """Změna hesla přihlášeného uživatele"""
    current_password: str = Field(..., min_length=1, description="Současné heslo")
    new_password: str = Field(..., min_length=8, max_length=100, description="Nové heslo")
    confirm_password: str = Field(..., description="Potvrzení nového hesla")

    @validator('new_password')
    def validate_new_password(cls, v, values):
        validate_password_strength(v)
        if 'current_password' in values and v == values['current_password']:
            raise ValueError('Nové heslo se musí lišit od současného')
        return v

    @validator('confirm_password')
    def passwords_match(cls, v, values):
        if 'new_password' in values and v != values['new_password']:
            raise ValueError('Hesla se neshodují')
        return v


# ==================== SPRÁVA ZÁKAZNÍKŮ (ADMIN) ====================

class UserRoleUpdate(BaseModel):
    """Změna role uživatele"""
    role: UserRole = Field(..., description="USER, EMPLOYEE nebo ADMIN")


class UserStatusUpdate(BaseModel):
    """Zablokování / odblokování účtu"""
    is_active: bool
