# backend/routers/products_router.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.session import get_db
from models.product_model import Product
from routers.dependencies import require_admin
from schemas.products import ProductOut, ProductDeleted
from services.auth_service import AdminAccount
from services.catalog_service import CatalogStore, validate_product_fields
from services.cloudinary_service import get_image_storage
from services.errors import ImageStorageUnavailable, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


def _form_data(**fields) -> dict:
    # רק שדות שהגיעו בבקשה (None = לא נשלח)
    return {k: v for k, v in fields.items() if v is not None}


async def _upload_image(image: Optional[UploadFile]) -> Optional[str]:
    if image is None or not image.filename:
        return None
    storage = get_image_storage()
    if storage is None:
        raise ImageStorageUnavailable("שירות התמונות אינו זמין")
    content = await image.read()
    return storage.upload_product_image(content, image.filename)["url"]


def _delete_image(url: Optional[str]) -> None:
    storage = get_image_storage()
    if storage is not None and url:
        storage.delete_by_url(url)


def _get_or_404(db: Session, product_id: int) -> Product:
    p = CatalogStore(db).find_product(product_id)
    if not p:
        raise NotFoundError("מוצר לא נמצא")
    return p


# ---------- ציבורי ----------

@router.get("", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return [ProductOut.from_product(p) for p in CatalogStore(db).list_products()]


@router.get("/specials", response_model=List[ProductOut])
def list_special_offers(db: Session = Depends(get_db)):
    return [ProductOut.from_product(p) for p in CatalogStore(db).list_products(specials_only=True)]


@router.get("/manufacturers", response_model=List[str])
def list_manufacturers(_: AdminAccount = Depends(require_admin), db: Session = Depends(get_db)):
    return CatalogStore(db).distinct_manufacturers()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductOut.from_product(_get_or_404(db, product_id))


# ---------- מנהל בלבד ----------

@router.post("", response_model=ProductOut, status_code=201)
async def create_product(
    name: Optional[str] = Form(None),
    pricePerUnit: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    isSpecialOffer: Optional[str] = Form(None),
    manufacturer: Optional[str] = Form(None),
    servingOptions: Optional[str] = Form(None),
    defaultPacketCount: Optional[str] = Form(None),
    productImage: Optional[UploadFile] = File(None),
    _: AdminAccount = Depends(require_admin),
    db: Session = Depends(get_db),
):
    fields = validate_product_fields(_form_data(
        name=name, pricePerUnit=pricePerUnit, description=description,
        isSpecialOffer=isSpecialOffer, manufacturer=manufacturer,
        servingOptions=servingOptions, defaultPacketCount=defaultPacketCount,
    ))
    photo_url = await _upload_image(productImage)

    p = Product(photo=photo_url, **fields)
    try:
        db.add(p)
        db.commit()
        db.refresh(p)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating product")
        _delete_image(photo_url)
        raise HTTPException(status_code=500, detail="שגיאה ביצירת המוצר")
    return ProductOut.from_product(p)


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    pricePerUnit: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    isSpecialOffer: Optional[str] = Form(None),
    manufacturer: Optional[str] = Form(None),
    servingOptions: Optional[str] = Form(None),
    defaultPacketCount: Optional[str] = Form(None),
    productImage: Optional[UploadFile] = File(None),
    _: AdminAccount = Depends(require_admin),
    db: Session = Depends(get_db),
):
    p = _get_or_404(db, product_id)
    fields = validate_product_fields(_form_data(
        name=name, pricePerUnit=pricePerUnit, description=description,
        isSpecialOffer=isSpecialOffer, manufacturer=manufacturer,
        servingOptions=servingOptions, defaultPacketCount=defaultPacketCount,
    ), partial=True)

    old_photo = p.photo
    new_photo = await _upload_image(productImage)

    for key, value in fields.items():
        setattr(p, key, value)
    if new_photo:
        p.photo = new_photo

    try:
        db.commit()
        db.refresh(p)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Error updating product {product_id}")
        _delete_image(new_photo)
        raise HTTPException(status_code=500, detail="שגיאה בעדכון המוצר")

    if new_photo and old_photo:
        _delete_image(old_photo)
    return ProductOut.from_product(p)


@router.delete("/{product_id}", response_model=ProductDeleted)
def delete_product(
    product_id: int,
    _: AdminAccount = Depends(require_admin),
    db: Session = Depends(get_db),
):
    p = _get_or_404(db, product_id)
    photo = p.photo

    # מחיקה רכה - שורות בהזמנות קיימות שומרות צילום משלהן
    p.is_active = False
    p.photo = None
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Error deleting product {product_id}")
        raise HTTPException(status_code=500, detail="שגיאה במחיקת המוצר")

    _delete_image(photo)
    return ProductDeleted(message="המוצר נמחק בהצלחה")
