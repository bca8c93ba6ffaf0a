from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from models.product_model import Product


class ProductOut(BaseModel):
    id: int
    name: str
    pricePerUnit: float
    photo: Optional[str] = None
    description: str = ""
    isSpecialOffer: bool = False
    manufacturer: Optional[str] = None
    servingOptions: List[str] = []
    defaultPacketCount: int = 0
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_product(cls, p: Product) -> "ProductOut":
        return cls(
            id=p.id,
            name=p.name,
            pricePerUnit=float(p.price_per_unit),
            photo=p.photo,
            description=p.description or "",
            isSpecialOffer=bool(p.is_special_offer),
            manufacturer=p.manufacturer,
            servingOptions=list(p.serving_options or []),
            defaultPacketCount=p.default_packet_count or 0,
            createdAt=p.created_at,
            updatedAt=p.updated_at,
        )


class ProductDeleted(BaseModel):
    message: str
