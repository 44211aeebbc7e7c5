"""
Nahrávání obrázků produktů a kategorií (pouze admin).

Obrázky se převádí na WebP a servírují z /static.
"""
from fastapi import APIRouter, Depends, File, UploadFile, status
from core.dependencies import get_current_admin_user
from core.storage import storage_service
from models.user import User

router = APIRouter(
    prefix="/uploads",
    tags=["uploads"]
)


async def _upload(file: UploadFile, folder: str) -> dict:
    url = await storage_service.save_image(file, folder)
    return {
        "success": True,
        "status_code": 201,
        "message": "Obrázek nahrán",
        "data": {
            "url": url,
            "original_filename": file.filename
        }
    }


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def upload_product_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Nahrát fotku produktu (jpg, jpeg, png, webp, max 5 MB).
    """
    return await _upload(file, "products")


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def upload_category_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Nahrát obrázek kategorie.
    """
    return await _upload(file, "categories")
