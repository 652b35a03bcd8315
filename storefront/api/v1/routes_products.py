from typing import List
from fastapi import APIRouter, HTTPException
from storefront.pricing import PricedProduct, catalogue_with_prices, discounted_price, format_price_display, get_product_by_id

router = APIRouter()

@router.get("/products", response_model=List[PricedProduct])
def list_products():
    return catalogue_with_prices()

@router.get("/products/{product_id}", response_model=PricedProduct)
def get_product(product_id: int):
    product = get_product_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    price = format_price_display(product.price, discounted_price(product, product.id))
    return PricedProduct(id=product.id, name=product.name, price=price)
