import uuid
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func, desc, or_
from typing import Optional

from core.database import get_db
from core.dependencies import get_current_user, get_current_admin_user
from core.security import verify_password, hash_password
from models.user import User, UserRole
from models.order import Order
from schemas.users import (
    UserUpdateProfile,
    UserChangePassword,
    UserRoleUpdate,
    UserStatusUpdate
)

router = APIRouter(
    prefix="/users",
    tags=["users"]
)


def _profile_data(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "role": user.role.value,
        "is_active": user.is_active,
        "is_company": user.is_company,
        "company_name": user.company_name,
        "ico": user.ico,
        "dic": user.dic,
        "auth_provider": user.auth_provider,
        "created_at": user.created_at,
        "updated_at": user.updated_at
    }


def _address_data(address) -> dict:
    return {
        "id": address.id,
        "street": address.street,
        "city": address.city,
        "zip_code": address.zip_code,
        "country": address.country,
        "is_default": address.is_default
    }


def _customer_data(user: User, order_count: int) -> dict:
    data = _profile_data(user)
    data["order_count"] = order_count
    data["addresses"] = [
        _address_data(address)
        for address in sorted(user.addresses, key=lambda a: a.id, reverse=True)
    ]
    return data


def _get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "success": False,
                "status_code": 404,
                "message": "Uživatel nenalezen",
                "error": "USER_NOT_FOUND"
            }
        )
    return user


# ==================== PROFIL ====================

@router.get("/me/profile")
async def get_my_profile(
    current_user: User = Depends(get_current_user)
):
    """
    Profil přihlášeného uživatele včetně fakturačních údajů.
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Profil načten",
        "data": _profile_data(current_user)
    }


@router.put("/me/profile")
async def update_my_profile(
    profile_data: UserUpdateProfile,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Upravit profil.

    - U firmy jsou povinné název firmy a IČO
    - Soukromá osoba nemá žádné firemní údaje (smažou se)
    - Role se tudy měnit nedá
    """
    if profile_data.is_company and not (profile_data.company_name and profile_data.ico):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "U firemního účtu vyplňte název firmy a IČO",
                "error": "COMPANY_DATA_REQUIRED"
            }
        )

    if profile_data.email != current_user.email:
        email_taken = db.query(User).filter(
            User.email == profile_data.email,
            User.id != current_user.id
        ).first()
        if email_taken:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "success": False,
                    "status_code": 400,
                    "message": "Tento email už používá jiný účet",
                    "error": "EMAIL_ALREADY_EXISTS"
                }
            )

    current_user.full_name = profile_data.full_name
    current_user.email = profile_data.email
    current_user.phone = profile_data.phone
    current_user.is_company = profile_data.is_company

    if profile_data.is_company:
        current_user.company_name = profile_data.company_name
        current_user.ico = profile_data.ico
        current_user.dic = profile_data.dic
    else:
        current_user.company_name = None
        current_user.ico = None
        current_user.dic = None

    db.commit()
    db.refresh(current_user)

    return {
        "success": True,
        "status_code": 200,
        "message": "Profil byl uložen",
        "data": _profile_data(current_user)
    }


@router.put("/me/change-password")
async def change_password(
    password_data: UserChangePassword,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Změnit heslo. Účet založený přes Google heslo nemá.
    """
    if not current_user.hashed_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Účet přihlášený přes Google nemá nastavené heslo",
                "error": "NO_PASSWORD_SET"
            }
        )

    if not verify_password(password_data.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Současné heslo není správné",
                "error": "INVALID_PASSWORD"
            }
        )

    current_user.hashed_password = hash_password(password_data.new_password)
    db.commit()

    return {
        "success": True,
        "status_code": 200,
        "message": "Heslo bylo změněno"
    }


# ==================== SPRÁVA ZÁKAZNÍKŮ (ADMIN) ====================

@router.get("/admin/customers")
async def list_customers(
    query: Optional[str] = Query(None, description="Hledat ve jméně nebo emailu"),
    role: Optional[UserRole] = Query(None, description="Filtr podle role"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Seznam zákazníků (pouze admin), nejnovější první.

    Každý řádek obsahuje roli, firemní údaje, počet objednávek a adresy.
    """
    users_query = db.query(User)

    if query:
        pattern = f"%{query.strip().lower()}%"
        users_query = users_query.filter(
            or_(
                func.lower(User.full_name).like(pattern),
                func.lower(User.email).like(pattern)
            )
        )

    if role is not None:
        users_query = users_query.filter(User.role == role)

    total = users_query.count()

    offset = (page - 1) * limit
    users = users_query.options(selectinload(User.addresses)).order_by(
        desc(User.created_at), User.email
    ).offset(offset).limit(limit).all()

    order_counts = dict(
        db.query(Order.user_id, func.count(Order.id))
        .filter(Order.user_id.in_([user.id for user in users]))
        .group_by(Order.user_id)
        .all()
    ) if users else {}

    total_pages = (total + limit - 1) // limit

    return {
        "success": True,
        "status_code": 200,
        "message": "Zákazníci načteni",
        "data": {
            "customers": [_customer_data(user, order_counts.get(user.id, 0)) for user in users],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1
            }
        }
    }


@router.get("/admin/customers/{user_id}")
async def get_customer(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Detail zákazníka s posledními objednávkami (pouze admin).
    """
    user = _get_user_or_404(db, user_id)

    orders = db.query(Order).filter(Order.user_id == user.id).order_by(desc(Order.id)).all()

    data = _customer_data(user, len(orders))
    data["recent_orders"] = [
        {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status.value,
            "total_price": float(order.total_price),
            "created_at": order.created_at
        }
        for order in orders[:5]
    ]

    return {
        "success": True,
        "status_code": 200,
        "message": "Zákazník načten",
        "data": data
    }


@router.patch("/admin/customers/{user_id}/role")
async def update_customer_role(
    user_id: uuid.UUID,
    role_data: UserRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Změnit roli uživatele (USER / EMPLOYEE / ADMIN).
    Vlastní roli si administrátor změnit nemůže.
    """
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Nemůžete změnit svou vlastní roli",
                "error": "CANNOT_CHANGE_OWN_ROLE"
            }
        )

    user = _get_user_or_404(db, user_id)
    user.role = role_data.role
    db.commit()
    db.refresh(user)

    return {
        "success": True,
        "status_code": 200,
        "message": "Role byla změněna",
        "data": _profile_data(user)
    }


@router.patch("/admin/customers/{user_id}/status")
async def update_customer_status(
    user_id: uuid.UUID,
    status_data: UserStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Zablokovat nebo odblokovat účet (pouze admin, ne sám sebe).
    """
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Nemůžete zablokovat svůj vlastní účet",
                "error": "CANNOT_CHANGE_OWN_STATUS"
            }
        )

    user = _get_user_or_404(db, user_id)
    user.is_active = status_data.is_active
    db.commit()
    db.refresh(user)

    return {
        "success": True,
        "status_code": 200,
        "message": "Účet byl odblokován" if user.is_active else "Účet byl zablokován",
        "data": _profile_data(user)
    }
