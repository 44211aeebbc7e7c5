"""
Schémata nastavení webu.
"""
from pydantic import BaseModel, EmailStr, Field, HttpUrl, TypeAdapter, ValidationError, validator
from typing import List, Optional

_url_adapter = TypeAdapter(HttpUrl)


class OpeningHoursEntry(BaseModel):
    day: str = Field(..., min_length=1, description="Např. 'Po – Pá'")
    hours: str = Field(..., min_length=1, description="Např. '7:00 – 15:30'")
    closed: bool = False


class AboutCard(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    icon: str = Field(..., min_length=1, description="Název ikony (Wheat, Leaf, Users, ...)")


class SiteSettingsUpdate(BaseModel):
    """
    Úprava nastavení. Vynechaná pole si ponechají současnou hodnotu.
    """
    # Kontakt
    phone: Optional[str] = Field(None, min_length=9, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, min_length=5, max_length=255)
    map_iframe_src: Optional[str] = None
    opening_hours: Optional[List[OpeningHoursEntry]] = None

    # Hero
    hero_title: Optional[str] = Field(None, min_length=1, max_length=255)
    hero_subtitle: Optional[str] = Field(None, min_length=1, max_length=255)
    hero_button_text: Optional[str] = Field(None, min_length=1, max_length=100)
    hero_button_link: Optional[str] = Field(None, min_length=1, max_length=255)
    hero_image_url: Optional[str] = None

    # O nás
    about_title: Optional[str] = Field(None, min_length=1, max_length=255)
    about_description: Optional[str] = Field(None, min_length=10)
    about_cards: Optional[List[AboutCard]] = None

    # Sociální sítě
    facebook_url: Optional[str] = Field(None, max_length=500)
    instagram_url: Optional[str] = Field(None, max_length=500)

    @validator('map_iframe_src')
    def validate_map_url(cls, v):
        """URL mapy, nebo prázdná hodnota"""
        if v is None or v.strip() == "":
            return None
        try:
            _url_adapter.validate_python(v)
        except ValidationError:
            raise ValueError("Neplatná URL adresa mapy")
        return v

    @validator('hero_image_url', 'facebook_url', 'instagram_url')
    def empty_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v
