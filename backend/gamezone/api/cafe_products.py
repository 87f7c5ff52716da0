"""
Cafe product API
"""
from fastapi import APIRouter, Depends
from typing import List, Optional

from gamezone.api.deps import get_gateway
from gamezone.gateway import SqlAlchemyGateway
from gamezone.schemas.cafe_product import (
    CafeProductCreate, CafeProductUpdate, CafeProductResponse, StockAdjust
)
from gamezone.services.catalog import ProductCatalog

router = APIRouter(prefix="/api/cafe-products", tags=["Cafe products"])


@router.get("", response_model=List[CafeProductResponse])
def get_products(
    category: Optional[str] = None,
    active: Optional[bool] = None,
    search: Optional[str] = None,
    gateway: SqlAlchemyGateway = Depends(get_gateway)
):
    """List cafe products"""
    products = ProductCatalog(gateway).list(category, active)
    if search:
        products = [p for p in products if search.lower() in p["name"].lower()]
    return products


@router.get("/{product_id}", response_model=CafeProductResponse)
def get_product(product_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Cafe product detail"""
    return ProductCatalog(gateway).get(product_id)


@router.post("", response_model=CafeProductResponse)
def create_product(product: CafeProductCreate, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Create a cafe product"""
    return ProductCatalog(gateway).create(product.model_dump())


@router.put("/{product_id}", response_model=CafeProductResponse)
def update_product(product_id: int, product_update: CafeProductUpdate,
                   gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Update a cafe product"""
    return ProductCatalog(gateway).update(product_id, product_update.model_dump(exclude_unset=True))


@router.delete("/{product_id}")
def delete_product(product_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Delete a product that was never sold"""
    ProductCatalog(gateway).delete(product_id)
    return {"message": "Cafe product deleted"}


@router.put("/{product_id}/stock", response_model=CafeProductResponse)
def adjust_stock(product_id: int, stock_adjust: StockAdjust, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Adjust stock"""
    return ProductCatalog(gateway).adjust_stock(product_id, stock_adjust.adjustment)
