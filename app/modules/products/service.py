"""
Product catalogue and stock counts.

Stock is moved explicitly (add/remove endpoints); order creation does not
touch it.
"""
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Dict, Any, List

from app.core.config import settings
from app.common.exceptions import NotFoundError, ConflictError, internal_error
from app.modules.products.models import Product
from app.modules.products.schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:

    def __init__(self, db: Session):
        self.db = db

    def create_product(self, product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump())
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def get_products(self, limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0) -> Dict[str, Any]:
        query = self.db.query(Product).order_by(Product.name)
        total = query.count()
        products = query.offset(offset).limit(limit).all()

        return {
            "products": products,
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def get_out_of_stock(self) -> List[Product]:
        """Products whose stock is zero or negative."""
        return self.db.query(Product).filter(Product.stock <= 0).order_by(Product.name).all()

    def get_product_by_id(self, product_id: int) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def update_product(self, product_id: int, update_data: ProductUpdate) -> Product:
        product = self.get_product_by_id(product_id)

        for field, value in update_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(product, field, value)

        self.db.commit()
        self.db.refresh(product)
        return product

    def add_stock(self, product_id: int, quantity: int) -> Product:
        product = self.get_product_by_id(product_id)
        product.stock += quantity
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Stock +{quantity} for product {product_id} -> {product.stock}")
        return product

    def remove_stock(self, product_id: int, quantity: int) -> Product:
        # Stock may go negative; the out-of-stock listing reports it
        product = self.get_product_by_id(product_id)
        product.stock -= quantity
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Stock -{quantity} for product {product_id} -> {product.stock}")
        return product

    def delete_product(self, product_id: int) -> Dict[str, str]:
        product = self.get_product_by_id(product_id)
        try:
            self.db.delete(product)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Product is referenced by orders")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Could not delete product {product_id}: {e}")
            raise internal_error("deleting product", e)
        return {"message": "Product deleted"}
