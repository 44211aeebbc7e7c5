"""
Košík v Redisu pro přihlášené uživatele i návštěvníky.

Návštěvník posílá vlastní identifikátor košíku v hlavičce X-Cart-Id,
přihlášený uživatel má košík podle svého ID.
"""
import secrets
from decimal import Decimal
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from core.database import get_db
from core.dependencies import get_current_user, get_optional_current_user
from core.redis_service import CartService
from models.user import User
from models.products import Product
from schemas.carts import CartItemAdd, CartItemUpdate, CartMergeRequest

router = APIRouter(
    prefix="/cart",
    tags=["cart"]
)


def get_cart_id(
    x_cart_id: Optional[str] = Header(None, max_length=100),
    current_user: Optional[User] = Depends(get_optional_current_user)
) -> str:
    """
    Identifikátor košíku: přihlášený uživatel má přednost před X-Cart-Id.
    """
    if current_user:
        return CartService.user_cart_id(current_user.id)

    if x_cart_id and x_cart_id.strip():
        return CartService.guest_cart_id(x_cart_id.strip())

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "success": False,
            "status_code": 400,
            "message": "Chybí identifikátor košíku (přihlaste se nebo pošlete hlavičku X-Cart-Id)",
            "error": "CART_ID_REQUIRED"
        }
    )


def get_products_data(product_ids: List[int], db: Session) -> Dict[int, Product]:
    """Produkty z databáze podle ID."""
    if not product_ids:
        return {}

    products = db.query(Product).filter(Product.id.in_(product_ids)).all()
    return {product.id: product for product in products}


def format_cart_response(cart_id: str, db: Session) -> dict:
    """
    Košík z Redisu doplněný o aktuální údaje produktů.

    Smazané produkty se vynechají; produkty mimo nabídku zůstanou
    s is_available=False a nepočítají se do součtu.
    """
    cart_data = CartService.get_cart(cart_id)

    product_ids = [int(pid) for pid in cart_data.keys()]
    products = get_products_data(product_ids, db)

    items = []
    total_items = 0
    total_amount = Decimal("0.00")

    for product_id_str, cart_item in cart_data.items():
        product = products.get(int(product_id_str))
        if not product:
            continue

        quantity = cart_item["quantity"]
        subtotal = Decimal(str(product.price)) * quantity

        items.append({
            "product_id": product.id,
            "name": product.name,
            "price": float(product.price),
            "image_url": product.image_url,
            "is_available": product.is_available,
            "quantity": quantity,
            "subtotal": float(subtotal),
            "added_at": cart_item.get("added_at")
        })

        if product.is_available:
            total_items += quantity
            total_amount += subtotal

    return {
        "cart_id": cart_id,
        "items": items,
        "total_items": total_items,
        "total_amount": float(total_amount)
    }


def _cart_response(message: str, cart_id: str, db: Session) -> dict:
    return {
        "success": True,
        "status_code": 200,
        "message": message,
        "data": format_cart_response(cart_id, db)
    }


# ==================== ENDPOINTY ====================

@router.post("/guest", status_code=status.HTTP_201_CREATED)
async def create_guest_cart():
    """
    Vydat identifikátor košíku pro návštěvníka (posílá se v X-Cart-Id).
    """
    return {
        "success": True,
        "status_code": 201,
        "message": "Košík vytvořen",
        "data": {
            "cart_id": secrets.token_urlsafe(16)
        }
    }


@router.get("")
async def get_cart(
    cart_id: str = Depends(get_cart_id),
    db: Session = Depends(get_db)
):
    """
    Obsah košíku s cenami a mezisoučty.
    """
    return _cart_response("Košík načten", cart_id, db)


@router.get("/count")
async def get_cart_count(
    cart_id: str = Depends(get_cart_id)
):
    """
    Počet kusů v košíku (pro ikonu v hlavičce webu).
    """
    return {
        "success": True,
        "status_code": 200,
        "message": "Počet položek načten",
        "data": {
            "count": CartService.get_cart_count(cart_id)
        }
    }


@router.post("/items")
async def add_to_cart(
    item: CartItemAdd,
    cart_id: str = Depends(get_cart_id),
    db: Session = Depends(get_db)
):
    """
    Přidat produkt do košíku.

    Stejný produkt se sčítá, nejvýše 99 kusů.
    """
    product = db.query(Product).filter(Product.id == item.product_id).first()

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "success": False,
                "status_code": 404,
                "message": "Produkt nenalezen",
                "error": "PRODUCT_NOT_FOUND"
            }
        )

    if not product.is_available:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": f"Produkt {product.name} momentálně není v nabídce",
                "error": "PRODUCT_NOT_AVAILABLE"
            }
        )

    CartService.add_item(cart_id, item.product_id, item.quantity)

    return _cart_response("Produkt přidán do košíku", cart_id, db)


@router.put("/items/{product_id}")
async def update_cart_item(
    product_id: int,
    item: CartItemUpdate,
    cart_id: str = Depends(get_cart_id),
    db: Session = Depends(get_db)
):
    """
    Nastavit počet kusů položky (1-99).
    """
    cart = CartService.get_cart(cart_id)

    if str(product_id) not in cart:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "success": False,
                "status_code": 404,
                "message": "Produkt v košíku není",
                "error": "CART_ITEM_NOT_FOUND"
            }
        )

    CartService.update_item_quantity(cart_id, product_id, item.quantity)

    return _cart_response("Košík upraven", cart_id, db)


@router.delete("/items/{product_id}")
async def remove_from_cart(
    product_id: int,
    cart_id: str = Depends(get_cart_id),
    db: Session = Depends(get_db)
):
    """
    Odebrat produkt z košíku.
    """
    CartService.remove_item(cart_id, product_id)

    return _cart_response("Produkt odebrán z košíku", cart_id, db)


@router.delete("")
async def clear_cart(
    cart_id: str = Depends(get_cart_id)
):
    """
    Vyprázdnit košík.
    """
    CartService.clear_cart(cart_id)

    return {
        "success": True,
        "status_code": 200,
        "message": "Košík vyprázdněn",
        "data": None
    }


@router.post("/merge")
async def merge_guest_cart(
    merge_data: CartMergeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Sloučit košík návštěvníka do košíku přihlášeného uživatele.

    Množství stejných produktů se sčítají (max 99), košík návštěvníka zanikne.
    """
    user_cart_id = CartService.user_cart_id(current_user.id)
    CartService.merge_carts(CartService.guest_cart_id(merge_data.guest_cart_id), user_cart_id)

    return _cart_response("Košíky sloučeny", user_cart_id, db)
