from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List

from app.core.config import settings
from app.database.database import get_db
from app.modules.auth.utils import get_current_user
from app.modules.products.service import ProductService
from app.modules.products.schemas import (
    ProductCreate, ProductUpdate, ProductOut, ProductList, StockMove
)

product_router = APIRouter(
    prefix="/produits",
    tags=["Products"],
    dependencies=[Depends(get_current_user)]
)


@product_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).create_product(product)


@product_router.get("/", response_model=ProductList)
def list_products(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    return ProductService(db).get_products(limit, offset)


@product_router.get("/rupture", response_model=List[ProductOut])
def list_out_of_stock(db: Session = Depends(get_db)):
    """Products with stock at or below zero."""
    return ProductService(db).get_out_of_stock()


@product_router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductService(db).get_product_by_id(product_id)


@product_router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, update: ProductUpdate, db: Session = Depends(get_db)):
    return ProductService(db).update_product(product_id, update)


@product_router.put("/{product_id}/retirer", response_model=ProductOut)
def remove_stock(product_id: int, move: StockMove, db: Session = Depends(get_db)):
    return ProductService(db).remove_stock(product_id, move.quantity)


@product_router.put("/{product_id}/ajouter", response_model=ProductOut)
def add_stock(product_id: int, move: StockMove, db: Session = Depends(get_db)):
    return ProductService(db).add_stock(product_id, move.quantity)


@product_router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    return ProductService(db).delete_product(product_id)
