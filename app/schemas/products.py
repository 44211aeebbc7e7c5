"""
Schémata produktů a kategorií.
"""
import re
from pydantic import BaseModel, Field, validator
from typing import Optional
from decimal import Decimal


SLUG_PATTERN = r'^[a-z0-9-]+$'

_CZECH_CHARS = str.maketrans(
    "áčďéěíňóřšťúůýžÁČĎÉĚÍŇÓŘŠŤÚŮÝŽ",
    "acdeeinorstuuyzACDEEINORSTUUYZ"
)


def slugify(value: str) -> str:
    """'Běžné pečivo' -> 'bezne-pecivo'"""
    value = value.translate(_CZECH_CHARS).lower()
    value = re.sub(r'[^a-z0-9]+', '-', value)
    return value.strip('-')


# ==================== KATEGORIE ====================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100, description="Název kategorie")
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=SLUG_PATTERN,
                                description="Slug do URL (vygeneruje se z názvu)")
    image_url: Optional[str] = Field(None, description="URL obrázku")


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=SLUG_PATTERN)
    image_url: Optional[str] = None


# ==================== PRODUKTY ====================

class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255, description="Název produktu")
    description: Optional[str] = Field(None, description="Popis")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Cena v Kč")
    category_id: int = Field(..., description="ID kategorie")
    is_available: bool = Field(True, description="Je v nabídce")
    image_url: Optional[str] = Field(None, description="URL obrázku")

    @validator('description', 'image_url', pre=True)
    def empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[int] = None
    is_available: Optional[bool] = None
    image_url: Optional[str] = None
