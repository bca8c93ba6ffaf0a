# backend/services/cloudinary_service.py
"""
שירות Cloudinary לניהול תמונות מוצרים
ה-URL שחוזר נשמר כמו שהוא על המוצר; מחיקה היא best effort בלבד
"""

import logging
import os
import re
import time
from typing import Dict, Optional

import cloudinary
import cloudinary.uploader

from config.settings import Settings, get_settings
from services.errors import InvalidInputError, ImageStorageUnavailable

logger = logging.getLogger(__name__)

PRODUCTS_FOLDER = "grocery-app-products"
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB


class CloudinaryService:
    """שירות לניהול תמונות ב-Cloudinary"""

    def __init__(self, settings: Settings):
        if not settings.has_cloudinary:
            raise ImageStorageUnavailable(
                "חסרים משתני סביבה של Cloudinary: CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET"
            )
        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    def validate_image_file(self, file_content: bytes, filename: str) -> None:
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidInputError("ניתן להעלות קבצי תמונה בלבד (jpg, jpeg, png, webp)")
        if len(file_content) > MAX_IMAGE_BYTES:
            raise InvalidInputError("גודל הקובץ חורג מ-5MB")
        if not _is_valid_image_header(file_content):
            raise InvalidInputError("קובץ אינו תמונה תקינה")

    def upload_product_image(self, file_content: bytes, filename: str) -> Dict[str, str]:
        self.validate_image_file(file_content, filename)
        public_id = _generate_public_id(filename)
        result = cloudinary.uploader.upload(
            file_content,
            public_id=public_id,
            folder=PRODUCTS_FOLDER,
            resource_type="image",
        )
        return {"public_id": result["public_id"], "url": result["secure_url"]}

    def delete_by_url(self, url: Optional[str]) -> bool:
        public_id = public_id_from_url(url)
        if not public_id:
            return False
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type="image")
            return result.get("result") == "ok"
        except Exception as e:
            logger.error(f"Error deleting Cloudinary image {public_id}: {e}")
            return False


def _generate_public_id(filename: str) -> str:
    base = os.path.splitext(os.path.basename(filename or "image"))[0]
    base = re.sub(r"\s+", "_", base)
    return f"product_{base}_{int(time.time() * 1000)}"


def public_id_from_url(url: Optional[str]) -> Optional[str]:
    """http://res.cloudinary.com/<cloud>/image/upload/v123/folder/name.jpg -> folder/name"""
    if not url or "/upload/" not in url:
        return None
    tail = url.split("/upload/", 1)[1]
    parts = tail.split("/")
    if parts and re.fullmatch(r"v\d+", parts[0]):
        parts = parts[1:]
    if not parts:
        return None
    return re.sub(r"\.\w+$", "", "/".join(parts))


def _is_valid_image_header(file_content: bytes) -> bool:
    if len(file_content) < 12:
        return False
    if file_content.startswith(b"\xff\xd8\xff"):                # JPEG
        return True
    if file_content.startswith(b"\x89PNG\r\n\x1a\n"):           # PNG
        return True
    if file_content[:4] == b"RIFF" and file_content[8:12] == b"WEBP":
        return True
    return False


_service: Optional[CloudinaryService] = None


def get_image_storage() -> Optional[CloudinaryService]:
    """None כשאין הגדרות Cloudinary - מוצרים בלי תמונה עדיין עובדים"""
    global _service
    if _service is None:
        settings = get_settings()
        if not settings.has_cloudinary:
            return None
        _service = CloudinaryService(settings)
    return _service
