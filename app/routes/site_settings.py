"""
Nastavení webu: veřejné čtení a úprava administrátorem.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.dependencies import get_current_admin_user
from core.site_settings_service import get_site_settings_data, get_or_create_settings, settings_to_dict
from models.user import User
from schemas.site_settings import SiteSettingsUpdate

router = APIRouter(prefix="/site-settings", tags=["site-settings"])

# Pole, která lze vymazat poslaním null
CLEARABLE_FIELDS = {"map_iframe_src", "hero_image_url", "facebook_url", "instagram_url"}

LIST_FIELDS = ("opening_hours", "about_cards")


@router.get("")
async def get_site_settings(db: Session = Depends(get_db)):
    """
    Obsah webu (kontakt, otevírací doba, hero, o nás, sociální sítě).
    Bez uloženého záznamu vrací výchozí hodnoty.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Nastavení načteno",
        "data": get_site_settings_data(db)
    }


@router.put("")
async def update_site_settings(
    settings_data: SiteSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Upravit nastavení webu (pouze admin).

    Vynechaná pole zůstávají beze změny. První uložení založí záznam
    z výchozích hodnot.
    """
    site_settings = get_or_create_settings(db)

    update_data = settings_data.model_dump(exclude_unset=True)
    # Seznamy se ukládají celé včetně výchozích hodnot položek
    for field in LIST_FIELDS:
        entries = getattr(settings_data, field)
        if field in update_data and entries is not None:
            update_data[field] = [entry.model_dump() for entry in entries]

    for field, value in update_data.items():
        if value is None and field not in CLEARABLE_FIELDS:
            continue
        setattr(site_settings, field, value)

    db.commit()
    db.refresh(site_settings)

    return {
        "success": True,
        "status_code": 200,
        "message": "Nastavení bylo uloženo",
        "data": settings_to_dict(site_settings)
    }
