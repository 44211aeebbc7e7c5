"""
Ukládání obrázků produktů a kategorií.
Obrázky se zmenší a převedou do WebP (Pillow).
"""
import io
import uuid
from pathlib import Path
from fastapi import UploadFile, HTTPException
from PIL import Image, UnidentifiedImageError
from core.config import settings


def _bad_request(message: str, error: str) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "success": False,
            "status_code": 400,
            "message": message,
            "error": error
        }
    )


class StorageService:
    """Ukládání souborů do UPLOAD_DIR (servírováno přes /static)."""

    FOLDERS = ("products", "categories")

    def __init__(self, upload_dir: str = None):
        self.base_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_size = (1920, 1920)
        self.quality = settings.WEBP_QUALITY
        self.allowed_extensions = {'.jpg', '.jpeg', '.png', '.webp'}
        self.max_file_size = settings.MAX_UPLOAD_SIZE

    def _validate_image(self, file: UploadFile) -> None:
        """Kontrola přípony a content type"""
        ext = Path(file.filename or "").suffix.lower()
        if ext not in self.allowed_extensions:
            raise _bad_request(
                f"Nepovolený formát. Použijte: {', '.join(sorted(self.allowed_extensions))}",
                "INVALID_FILE_FORMAT"
            )

        if not (file.content_type or "").startswith('image/'):
            raise _bad_request("Soubor musí být obrázek", "INVALID_CONTENT_TYPE")

    def optimize_image(self, contents: bytes) -> bytes:
        """Převést obrázek na RGB WebP a zmenšit na max. 1920 px"""
        if len(contents) > self.max_file_size:
            raise _bad_request(
                f"Soubor je příliš velký. Maximum: {self.max_file_size // (1024 * 1024)} MB",
                "FILE_TOO_LARGE"
            )

        try:
            image = Image.open(io.BytesIO(contents))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise _bad_request(f"Obrázek se nepodařilo zpracovat: {e}", "IMAGE_PROCESSING_ERROR")

        # WebP bez průhlednosti: průhledné části na bílé pozadí
        if image.mode in ('RGBA', 'LA', 'P'):
            if image.mode == 'P':
                image = image.convert('RGBA')
            background = Image.new('RGB', image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[-1])
            image = background
        elif image.mode != 'RGB':
            image = image.convert('RGB')

        if image.size[0] > self.max_size[0] or image.size[1] > self.max_size[1]:
            image.thumbnail(self.max_size, Image.Resampling.LANCZOS)

        output = io.BytesIO()
        image.save(output, format='WEBP', quality=self.quality, method=6)
        return output.getvalue()

    async def save_image(self, file: UploadFile, folder: str) -> str:
        """
        Uložit optimalizovaný obrázek.

        Returns:
            Veřejná cesta, např. /static/products/<uuid>.webp
        """
        if folder not in self.FOLDERS:
            raise ValueError(f"Neznámá složka: {folder}")

        self._validate_image(file)
        optimized_data = self.optimize_image(await file.read())

        target_dir = self.base_dir / folder
        target_dir.mkdir(parents=True, exist_ok=True)

        filename = f"{uuid.uuid4()}.webp"
        (target_dir / filename).write_bytes(optimized_data)

        return f"/static/{folder}/{filename}"

    def delete_file(self, public_path: str) -> bool:
        """
        Smazat obrázek podle veřejné cesty (/static/products/x.webp).
        Cizí cesty (externí URL) se ignorují.
        """
        if not public_path or not public_path.startswith("/static/"):
            return False

        relative = public_path[len("/static/"):]
        folder, _, filename = relative.partition("/")
        if folder not in self.FOLDERS or not filename or "/" in filename:
            return False

        path = self.base_dir / folder / filename
        if path.exists():
            path.unlink()
            return True
        return False


storage_service = StorageService()
