"""
Nastavení webu (singleton) a jeho výchozí obsah.
"""
import copy
from typing import Any, Dict
from sqlalchemy.orm import Session
from models.site_settings import SiteSettings


DEFAULT_SITE_SETTINGS: Dict[str, Any] = {
    # Kontakt
    "phone": "+420 735 290 268",
    "email": "info@pekarnabanov.cz",
    "address": "Bánov 52, 687 54, Česká republika",
    "map_iframe_src": (
        "https://maps.google.com/maps?q=B%C3%A1nov%2052%2C%20687%2054%2C%20"
        "%C4%8Cesk%C3%A1%20republika&t=&z=15&ie=UTF8&iwloc=&output=embed"
    ),
    "opening_hours": [
        {"day": "Po – Pá", "hours": "7:00 – 15:30", "closed": False},
        {"day": "Sobota", "hours": "7:00 – 10:00", "closed": False},
        {"day": "Neděle", "hours": "Zavřeno", "closed": True},
    ],

    # Hero sekce
    "hero_title": "Pečeme s láskou",
    "hero_subtitle": "Chléb • Rohlíky • Tradice",
    "hero_button_text": "Naše nabídka",
    "hero_button_link": "/produkty",
    "hero_image_url": None,

    # O nás
    "about_title": "Vůně, která spojuje generace",
    "about_description": (
        "Naše pekařství z Bánova vzniklo z jedné jednoduché myšlenky – vrátit lidem chuť "
        "na opravdové, poctivé pečivo. Každé ráno začínáme dřív než slunce, v naší malé "
        "pekárně to voní moukou, kváskem a poctivou prací."
    ),
    "about_cards": [
        {
            "title": "Tradiční receptury",
            "description": "Vracíme se ke kořenům poctivého pekařského řemesla a používáme osvědčené postupy.",
            "icon": "Wheat",
        },
        {
            "title": "Čerstvé suroviny",
            "description": "Každý den vybíráme ty nejlepší lokální suroviny, protože na kvalitě záleží.",
            "icon": "Leaf",
        },
        {
            "title": "Rodinný přístup",
            "description": "Jsme rodinná pekárna a naši zákazníci jsou pro nás jako součást rodiny.",
            "icon": "Users",
        },
    ],

    # Sociální sítě
    "facebook_url": "#",
    "instagram_url": "#",
}

SETTINGS_FIELDS = list(DEFAULT_SITE_SETTINGS.keys())


def settings_to_dict(site_settings: SiteSettings) -> Dict[str, Any]:
    data = {field: getattr(site_settings, field) for field in SETTINGS_FIELDS}
    data["id"] = site_settings.id
    data["updated_at"] = site_settings.updated_at
    return data


def get_site_settings_data(db: Session) -> Dict[str, Any]:
    """
    Obsah nastavení pro web. Bez uloženého záznamu vrací výchozí hodnoty
    (nic se nezapisuje).
    """
    site_settings = db.query(SiteSettings).first()
    if not site_settings:
        data = copy.deepcopy(DEFAULT_SITE_SETTINGS)
        data["id"] = None
        data["updated_at"] = None
        return data
    return settings_to_dict(site_settings)


def get_or_create_settings(db: Session) -> SiteSettings:
    """
    Jediný záznam nastavení; při prvním použití se vytvoří z výchozích hodnot.
    """
    site_settings = db.query(SiteSettings).first()
    if not site_settings:
        site_settings = SiteSettings(**copy.deepcopy(DEFAULT_SITE_SETTINGS))
        db.add(site_settings)
        db.commit()
        db.refresh(site_settings)
    return site_settings
