"""
Schémata doručovacích adres.
"""
import re
from pydantic import BaseModel, Field, validator
from typing import Optional

DEFAULT_COUNTRY = "Česká republika"
ZIP_PATTERN = re.compile(r"^\d{3}\s?\d{2}$")


def clean_zip_code(v: str) -> str:
    """PSČ ve tvaru 12345 nebo 123 45, ukládá se bez mezer"""
    v = v.strip()
    if not ZIP_PATTERN.match(v):
        raise ValueError('PSČ musí mít formát 123 45')
    return re.sub(r"\s+", "", v)


class AddressBase(BaseModel):
    street: str = Field(..., min_length=2, max_length=255, description="Ulice a číslo popisné")
    city: str = Field(..., min_length=2, max_length=120, description="Obec")
    zip_code: str = Field(..., description="PSČ")
    country: Optional[str] = Field(None, max_length=80, description="Stát")
    is_default: bool = Field(False, description="Výchozí adresa")

    @validator('street', 'city')
    def strip_text(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError('Hodnota musí mít alespoň 2 znaky')
        return v

    @validator('zip_code')
    def validate_zip_code(cls, v):
        return clean_zip_code(v)

    @validator('country', always=True)
    def default_country(cls, v):
        return (v or "").strip() or DEFAULT_COUNTRY


class AddressCreate(AddressBase):
    pass


class AddressUpdate(BaseModel):
    """Úprava adresy (všechna pole volitelná)"""
    street: Optional[str] = Field(None, min_length=2, max_length=255)
    city: Optional[str] = Field(None, min_length=2, max_length=120)
    zip_code: Optional[str] = None
    country: Optional[str] = Field(None, max_length=80)
    is_default: Optional[bool] = None

    @validator('zip_code')
    def validate_zip_code(cls, v):
        if v is not None:
            return clean_zip_code(v)
        return v
