"""
Schéma kontaktního formuláře.
"""
from pydantic import BaseModel, EmailStr, Field, validator


class ContactMessage(BaseModel):
    name: str = Field(..., min_length=2, max_length=255, description="Jméno")
    email: EmailStr = Field(..., description="Email pro odpověď")
    message: str = Field(..., min_length=1, max_length=5000, description="Zpráva")

    @validator('name', 'message')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Pole nesmí být prázdné')
        return v

    @validator('name')
    def single_line_name(cls, v):
        # Jméno jde do předmětu emailu
        if any(ord(char) < 32 or ord(char) == 127 for char in v):
            raise ValueError('Jméno nesmí obsahovat zalomení řádku ani řídicí znaky')
        return v
