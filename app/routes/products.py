from fastapi import APIRouter, Depends, Query, HTTPException, status
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_
from typing import Optional
from core.database import get_db
from models.products import Product, Category
from models.order import OrderItem
from core.dependencies import get_current_admin_user
from models.user import User
from schemas.products import ProductCreate, ProductUpdate, CategoryCreate, CategoryUpdate, slugify
from core.storage import storage_service

router = APIRouter(
    prefix="/products",
    tags=["products"]
)


def format_category(category: Category, product_count: Optional[int] = None) -> dict:
    data = {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "image_url": category.image_url
    }
    if product_count is not None:
        data["product_count"] = product_count
    return data


def format_product(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": float(product.price),
        "is_available": product.is_available,
        "image_url": product.image_url,
        "category_id": product.category_id,
        "category": format_category(product.category) if product.category else None,
        "created_at": product.created_at.isoformat() if product.created_at else None,
        "updated_at": product.updated_at.isoformat() if product.updated_at else None
    }


def _pagination(page: int, limit: int, total: int) -> dict:
    total_pages = (total + limit - 1) // limit
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }


def _not_found(message: str, error: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "success": False,
            "status_code": 404,
            "message": message,
            "error": error
        }
    )


def _category_exists_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "success": False,
            "status_code": 400,
            "message": "Kategorie s tímto názvem nebo slugem už existuje",
            "error": "CATEGORY_ALREADY_EXISTS"
        }
    )


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise _not_found("Kategorie nenalezena", "CATEGORY_NOT_FOUND")
    return category


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).options(joinedload(Product.category)).filter(
        Product.id == product_id
    ).first()
    if not product:
        raise _not_found("Produkt nenalezen", "PRODUCT_NOT_FOUND")
    return product


# ==================== KATEGORIE ====================

@router.get("/categories")
async def list_categories(
    db: Session = Depends(get_db)
):
    """
    Všechny kategorie podle názvu s počtem dostupných produktů.
    """
    counts = dict(
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.is_available == True)
        .group_by(Product.category_id)
        .all()
    )

    categories = db.query(Category).order_by(Category.name).all()

    return {
        "success": True,
        "status_code": 200,
        "message": "Kategorie načteny",
        "data": {
            "categories": [format_category(c, counts.get(c.id, 0)) for c in categories]
        }
    }


@router.get("/categories/{slug}")
async def get_category(
    slug: str,
    db: Session = Depends(get_db)
):
    """
    Kategorie podle slugu s jejími dostupnými produkty (podle názvu).
    """
    category = db.query(Category).filter(Category.slug == slug).first()
    if not category:
        raise _not_found("Kategorie nenalezena", "CATEGORY_NOT_FOUND")

    products = db.query(Product).filter(
        Product.category_id == category.id,
        Product.is_available == True
    ).order_by(Product.name).all()

    data = format_category(category, len(products))
    data["products"] = [format_product(p) for p in products]

    return {
        "success": True,
        "status_code": 200,
        "message": "Kategorie načtena",
        "data": data
    }


@router.post("/categories", status_code=201)
async def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Vytvořit kategorii (pouze admin). Bez slugu se vygeneruje z názvu.
    """
    name = category_data.name.strip()
    slug = category_data.slug or slugify(name)

    existing = db.query(Category).filter(
        or_(Category.name == name, Category.slug == slug)
    ).first()
    if existing:
        raise _category_exists_error()

    category = Category(name=name, slug=slug, image_url=category_data.image_url)
    db.add(category)
    db.commit()
    db.refresh(category)

    return {
        "success": True,
        "status_code": 201,
        "message": "Kategorie vytvořena",
        "data": format_category(category)
    }


@router.put("/categories/{category_id}")
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Upravit kategorii (pouze admin).
    """
    category = _get_category_or_404(db, category_id)

    name = category_data.name.strip() if category_data.name else None

    if name or category_data.slug:
        conflicts = []
        if name and name != category.name:
            conflicts.append(Category.name == name)
        if category_data.slug and category_data.slug != category.slug:
            conflicts.append(Category.slug == category_data.slug)
        if conflicts and db.query(Category).filter(
            Category.id != category.id, or_(*conflicts)
        ).first():
            raise _category_exists_error()

    if name:
        category.name = name
    if category_data.slug:
        category.slug = category_data.slug

    if category_data.image_url is not None:
        # Stará nahraná fotka se smaže jen při výměně za jinou
        if category_data.image_url != category.image_url and category.image_url:
            storage_service.delete_file(category.image_url)
        category.image_url = category_data.image_url or None

    db.commit()
    db.refresh(category)

    return {
        "success": True,
        "status_code": 200,
        "message": "Kategorie upravena",
        "data": format_category(category)
    }


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Smazat kategorii (pouze admin). Kategorii s produkty smazat nelze.
    """
    category = _get_category_or_404(db, category_id)

    products_count = db.query(Product).filter(Product.category_id == category.id).count()
    if products_count > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": f"Kategorie obsahuje {products_count} produktů. Nejdřív je přesuňte nebo smažte.",
                "error": "CATEGORY_HAS_PRODUCTS"
            }
        )

    image_url = category.image_url
    db.delete(category)
    db.commit()

    if image_url:
        storage_service.delete_file(image_url)

    return {
        "success": True,
        "status_code": 200,
        "message": "Kategorie smazána",
        "data": None
    }


# ==================== PRODUKTY (ADMIN) ====================

@router.get("/admin/all")
async def list_all_products_admin(
    page: int = Query(1, ge=1, description="Číslo stránky"),
    limit: int = Query(20, ge=1, le=100, description="Produktů na stránku"),
    search: Optional[str] = Query(None, description="Hledat v názvu"),
    category_id: Optional[int] = Query(None, description="Filtr podle kategorie"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Všechny produkty včetně vyřazených z nabídky (pouze admin).
    """
    query = db.query(Product).options(joinedload(Product.category))

    if search:
        query = query.filter(func.lower(Product.name).like(f"%{search.strip().lower()}%"))

    if category_id:
        query = query.filter(Product.category_id == category_id)

    total = query.count()

    offset = (page - 1) * limit
    products = query.order_by(Product.name).offset(offset).limit(limit).all()

    return {
        "success": True,
        "status_code": 200,
        "message": "Produkty načteny",
        "data": {
            "products": [format_product(p) for p in products],
            "pagination": _pagination(page, limit, total)
        }
    }


# ==================== PRODUKTY (VEŘEJNÉ) ====================

@router.get("")
async def list_products(
    page: int = Query(1, ge=1, description="Číslo stránky"),
    limit: int = Query(20, ge=1, le=100, description="Produktů na stránku"),
    category: Optional[str] = Query(None, description="Slug kategorie"),
    search: Optional[str] = Query(None, description="Hledat v názvu"),
    db: Session = Depends(get_db)
):
    """
    Dostupné produkty podle názvu, s kategorií.

    - **category**: slug kategorie
    - **search**: část názvu (bez ohledu na velikost písmen)
    """
    query = db.query(Product).options(joinedload(Product.category)).filter(
        Product.is_available == True
    )

    if category:
        query = query.join(Category).filter(Category.slug == category)

    if search:
        query = query.filter(func.lower(Product.name).like(f"%{search.strip().lower()}%"))

    total = query.count()

    offset = (page - 1) * limit
    products = query.order_by(Product.name).offset(offset).limit(limit).all()

    return {
        "success": True,
        "status_code": 200,
        "message": "Produkty načteny",
        "data": {
            "products": [format_product(p) for p in products],
            "pagination": _pagination(page, limit, total)
        }
    }


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """
    Detail produktu. Produkt mimo nabídku se veřejnosti nezobrazí.
    """
    product = db.query(Product).options(joinedload(Product.category)).filter(
        Product.id == product_id,
        Product.is_available == True
    ).first()

    if not product:
        raise _not_found("Produkt nenalezen", "PRODUCT_NOT_FOUND")

    return {
        "success": True,
        "status_code": 200,
        "message": "Produkt načten",
        "data": format_product(product)
    }


@router.post("", status_code=201)
async def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Vytvořit produkt (pouze admin).
    """
    _get_category_or_404(db, product_data.category_id)

    new_product = Product(
        name=product_data.name.strip(),
        description=product_data.description,
        price=product_data.price,
        category_id=product_data.category_id,
        is_available=product_data.is_available,
        image_url=product_data.image_url
    )

    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    return {
        "success": True,
        "status_code": 201,
        "message": "Produkt vytvořen",
        "data": format_product(new_product)
    }


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Upravit produkt (pouze admin). Mění se jen zaslaná pole.
    """
    product = _get_product_or_404(db, product_id)

    if product_data.category_id is not None and product_data.category_id != product.category_id:
        _get_category_or_404(db, product_data.category_id)
        product.category_id = product_data.category_id

    if product_data.name is not None:
        product.name = product_data.name.strip()

    if product_data.description is not None:
        product.description = product_data.description or None

    if product_data.price is not None:
        product.price = product_data.price

    if product_data.is_available is not None:
        product.is_available = product_data.is_available

    if product_data.image_url is not None:
        if product_data.image_url != product.image_url and product.image_url:
            storage_service.delete_file(product.image_url)
        product.image_url = product_data.image_url or None

    db.commit()
    db.refresh(product)

    return {
        "success": True,
        "status_code": 200,
        "message": "Produkt upraven",
        "data": format_product(product)
    }


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Smazat produkt (pouze admin).

    Produkt, který je v nějaké objednávce, smazat nelze; místo toho
    ho označte jako nedostupný.
    """
    product = _get_product_or_404(db, product_id)

    has_orders = db.query(OrderItem.id).filter(OrderItem.product_id == product.id).first()
    if has_orders:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "status_code": 400,
                "message": "Produkt je součástí objednávek. Místo smazání ho označte jako nedostupný.",
                "error": "PRODUCT_HAS_ORDERS"
            }
        )

    image_url = product.image_url
    db.delete(product)
    db.commit()

    if image_url:
        storage_service.delete_file(image_url)

    return {
        "success": True,
        "status_code": 200,
        "message": "Produkt smazán",
        "data": None
    }
