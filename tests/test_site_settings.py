"""
Nastavení webu (kontakt, hero, o nás).
"""
from core.site_settings_service import DEFAULT_SITE_SETTINGS
from models.site_settings import SiteSettings


def test_defaults_without_record(client, db):
    response = client.get("/site-settings")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] is None
    assert data["hero_title"] == DEFAULT_SITE_SETTINGS["hero_title"]
    assert len(data["opening_hours"]) == 3
    assert db.query(SiteSettings).count() == 0


def test_partial_update_creates_single_record(client, db, admin_headers):
    response = client.put("/site-settings", json={
        "hero_title": "Čerstvě každé ráno",
        "opening_hours": [{"day": "Po – So", "hours": "6:00 – 12:00"}]
    }, headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["hero_title"] == "Čerstvě každé ráno"
    assert data["opening_hours"] == [{"day": "Po – So", "hours": "6:00 – 12:00", "closed": False}]
    assert data["phone"] == DEFAULT_SITE_SETTINGS["phone"]

    client.put("/site-settings", json={"phone": "+420 600 100 200"}, headers=admin_headers)
    assert db.query(SiteSettings).count() == 1

    public = client.get("/site-settings").json()["data"]
    assert public["phone"] == "+420 600 100 200"
    assert public["hero_title"] == "Čerstvě každé ráno"


def test_null_keeps_required_fields(client, admin_headers):
    response = client.put("/site-settings", json={"hero_title": None}, headers=admin_headers)

    assert response.json()["data"]["hero_title"] == DEFAULT_SITE_SETTINGS["hero_title"]


def test_clear_optional_fields(client, admin_headers):
    response = client.put("/site-settings", json={
        "map_iframe_src": "",
        "facebook_url": None,
        "instagram_url": "  "
    }, headers=admin_headers)

    data = response.json()["data"]
    assert data["map_iframe_src"] is None
    assert data["facebook_url"] is None
    assert data["instagram_url"] is None


def test_invalid_map_url(client, admin_headers):
    response = client.put("/site-settings", json={"map_iframe_src": "neni url"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Neplatná URL adresa mapy"


def test_about_cards_validated(client, admin_headers):
    response = client.put("/site-settings", json={
        "about_cards": [{"title": "Kvásek", "description": ""}]
    }, headers=admin_headers)

    assert response.status_code == 400


def test_update_requires_admin(client, employee_headers):
    response = client.put("/site-settings", json={"hero_title": "Nic"}, headers=employee_headers)

    assert response.status_code == 403


def test_stored_opening_hours_keep_closed_flag(client, db, admin_headers):
    client.put("/site-settings", json={
        "opening_hours": [
            {"day": "Po – Pá", "hours": "6:00 – 17:00"},
            {"day": "Ne", "hours": "zavřeno", "closed": True}
        ]
    }, headers=admin_headers)

    stored = db.query(SiteSettings).first()
    db.refresh(stored)
    assert stored.opening_hours == [
        {"day": "Po – Pá", "hours": "6:00 – 17:00", "closed": False},
        {"day": "Ne", "hours": "zavřeno", "closed": True}
    ]
