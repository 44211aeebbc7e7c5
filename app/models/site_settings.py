from sqlalchemy import Column, Integer, String, Text, JSON, DateTime
from sqlalchemy.sql import func
from core.database import Base


class SiteSettings(Base):
    """
    Obsah webu upravovaný z administrace (kontakt, hero, o nás, sociální sítě).
    V tabulce existuje nejvýše JEDEN záznam.
    """
    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Kontakt
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    map_iframe_src = Column(Text, nullable=True)
    # [{"day": "Po – Pá", "hours": "7:00 – 15:30", "closed": false}, ...]
    opening_hours = Column(JSON, nullable=False, default=list)

    # Hero sekce
    hero_title = Column(String(255), nullable=False)
    hero_subtitle = Column(String(255), nullable=False)
    hero_button_text = Column(String(100), nullable=False)
    hero_button_link = Column(String(255), nullable=False)
    hero_image_url = Column(Text, nullable=True)

    # O nás
    about_title = Column(String(255), nullable=False)
    about_description = Column(Text, nullable=False)
    # [{"title": ..., "description": ..., "icon": "Wheat"}, ...]
    about_cards = Column(JSON, nullable=False, default=list)

    # Sociální sítě
    facebook_url = Column(String(500), nullable=True)
    instagram_url = Column(String(500), nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<SiteSettings(id={self.id}, hero_title={self.hero_title!r})>"
