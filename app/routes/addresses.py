"""
Doručovací adresy zákazníka.
Limit: 10 adres na uživatele.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from core.database import get_db
from core.dependencies import get_current_user
from models.user import User
from models.addresses import Address
from schemas.addresses import AddressCreate, AddressUpdate

router = APIRouter(
    prefix="/addresses",
    tags=["addresses"]
)

MAX_ADDRESSES = 10


def format_address_response(address: Address) -> dict:
    """Adresa pro odpověď"""
    return {
        "id": address.id,
        "user_id": str(address.user_id),
        "street": address.street,
        "city": address.city,
        "zip_code": address.zip_code,
        "country": address.country,
        "is_default": address.is_default,
        "created_at": address.created_at.isoformat() if address.created_at else None
    }


def _get_own_address(db: Session, address_id: int, user: User) -> Address:
    """Adresa přihlášeného uživatele; cizí adresa se tváří jako neexistující."""
    address = db.query(Address).filter(
        Address.id == address_id,
        Address.user_id == user.id
    ).first()

    if not address:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "success": False,
                "status_code": 404,
                "message": "Adresa nenalezena",
                "error": "ADDRESS_NOT_FOUND"
            }
        )
    return address


def _clear_default(db: Session, user: User, except_id: int = None) -> None:
    query = db.query(Address).filter(
        Address.user_id == user.id,
        Address.is_default == True
    )
    if except_id is not None:
        query = query.filter(Address.id != except_id)
    query.update({"is_default": False})


# ==================== ENDPOINTY ====================

@router.get("")
async def get_addresses(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Všechny adresy přihlášeného uživatele, nejnovější první.
    """
    addresses = db.query(Address).filter(
        Address.user_id == current_user.id
    ).order_by(Address.id.desc()).all()

    addresses_data = [format_address_response(addr) for addr in addresses]

    return {
        "success": True,
        "status_code": 200,
        "message": "Adresy načteny",
        "data": {
            "addresses": addresses_data,
            "total": len(addresses_data),
            "max_addresses": MAX_ADDRESSES
        }
    }


@router.get("/{address_id}")
async def get_address(
    address_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    address = _get_own_address(db, address_id, current_user)

    return {
        "success": True,
        "status_code": 200,
        "message": "Adresa načtena",
        "data": format_address_response(address)
    }


@router.post("", status_code=201)
async def create_address(
    address_data: AddressCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Přidat doručovací adresu.

    - První adresa je automaticky výchozí
    - Nová výchozí adresa zruší příznak u ostatních
    """
    addresses_count = db.query(Address).filter(
        Address.user_id == current_user.id
    ).count()

    if addresses_count >= MAX_ADDRESSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": f"Můžete mít uloženo nejvýše {MAX_ADDRESSES} adres",
                "error": "MAX_ADDRESSES_REACHED"
            }
        )

    is_default = address_data.is_default or addresses_count == 0

    if is_default:
        _clear_default(db, current_user)

    new_address = Address(
        user_id=current_user.id,
        street=address_data.street,
        city=address_data.city,
        zip_code=address_data.zip_code,
        country=address_data.country,
        is_default=is_default
    )

    db.add(new_address)
    db.commit()
    db.refresh(new_address)

    return {
        "success": True,
        "status_code": 201,
        "message": "Adresa byla uložena",
        "data": format_address_response(new_address)
    }


@router.put("/{address_id}")
async def update_address(
    address_id: int,
    address_data: AddressUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Upravit adresu. Vyplněná pole se přepíšou, ostatní zůstanou.
    """
    address = _get_own_address(db, address_id, current_user)

    if address_data.is_default and not address.is_default:
        _clear_default(db, current_user, except_id=address_id)

    update_data = address_data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(address, field, value)

    db.commit()
    db.refresh(address)

    return {
        "success": True,
        "status_code": 200,
        "message": "Adresa byla upravena",
        "data": format_address_response(address)
    }


@router.delete("/{address_id}")
async def delete_address(
    address_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Smazat adresu. Pokud byla výchozí, výchozí se stane nejnovější zbývající.
    """
    address = _get_own_address(db, address_id, current_user)
    was_default = address.is_default

    db.delete(address)
    db.commit()

    if was_default:
        remaining_address = db.query(Address).filter(
            Address.user_id == current_user.id
        ).order_by(Address.id.desc()).first()

        if remaining_address:
            remaining_address.is_default = True
            db.commit()

    return {
        "success": True,
        "status_code": 200,
        "message": "Adresa byla smazána",
        "data": None
    }


@router.patch("/{address_id}/set-default")
async def set_default_address(
    address_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Nastavit adresu jako výchozí.
    """
    address = _get_own_address(db, address_id, current_user)

    if not address.is_default:
        _clear_default(db, current_user)
        address.is_default = True
        db.commit()
        db.refresh(address)

    return {
        "success": True,
        "status_code": 200,
        "message": "Výchozí adresa nastavena",
        "data": format_address_response(address)
    }
