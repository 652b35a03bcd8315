# File: storefront/pricing.py
"""
Product catalogue and discount pricing.

Products without an explicit ``discount`` get an id-based fallback:
10% plus 2% per id step, capped at ``MAX_FALLBACK_DISCOUNT``.
Prices are whole rupees.
"""
import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.core.config import settings

BASE_DISCOUNT = 0.10
DISCOUNT_STEP = 0.02

class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price: int = Field(..., ge=0)
    discount: Optional[float] = Field(None, ge=0, le=100, description="Percent off")

class PriceDisplay(BaseModel):
    original: int
    discounted: int
    percent_off: int

class PricedProduct(BaseModel):
    id: int
    name: str
    price: PriceDisplay

PRODUCTS: List[Product] = [
    Product(id=1, name="Crystal Bracelet", price=3999),
    Product(id=2, name="Gemstone Necklace", price=6499),
    Product(id=3, name="Elegant Ring", price=4999),
    Product(id=4, name="Crystal Earrings", price=2999),
    Product(id=5, name="Healing Pendant", price=3499),
    Product(id=6, name="Crystal Choker", price=5999),
    Product(id=7, name="Royal Emerald Ring", price=7999),
    Product(id=8, name="Diamond Stud Earrings", price=9999),
    Product(id=9, name="Pearl Necklace", price=5499),
]

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def fallback_discount(product_id: int, max_discount: Optional[float] = None) -> float:
    cap = settings.MAX_FALLBACK_DISCOUNT if max_discount is None else max_discount
    return min(BASE_DISCOUNT + DISCOUNT_STEP * product_id, cap)

def discounted_price(product: Product, fallback_id: int, max_discount: Optional[float] = None) -> int:
    if product.discount is not None:
        effective = product.discount / 100
    else:
        effective = fallback_discount(fallback_id, max_discount)
    return max(_round_half_up(product.price * (1 - effective)), 0)

def format_price_display(original: int, discounted: int) -> PriceDisplay:
    # A free product shows 0% off rather than dividing by zero
    if original == 0:
        percent_off = 0
    else:
        percent_off = _round_half_up((original - discounted) / original * 100)
    return PriceDisplay(original=original, discounted=discounted, percent_off=percent_off)

def get_product_by_id(product_id: int) -> Optional[Product]:
    return next((p for p in PRODUCTS if p.id == product_id), None)

def discounted_price_by_id(product_id: int) -> int:
    product = get_product_by_id(product_id)
    if product is None:
        return 0
    return discounted_price(product, product_id)

def catalogue_with_prices() -> List[PricedProduct]:
    return [
        PricedProduct(
            id=p.id,
            name=p.name,
            price=format_price_display(p.price, discounted_price(p, p.id)),
        )
        for p in PRODUCTS
    ]
