from sqlalchemy import select
from sqlalchemy.orm import Session
from inventory_api.core import get_logger
from inventory_api.domain.errors import ProductNotFound
from inventory_api.domain.models import Product
from .schemas import ProductCreate, ProductUpdate

logger = get_logger(__name__)

class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def list(self):
        return self.db.execute(select(Product).order_by(Product.id)).scalars().all()

    def get(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def create(self, data: ProductCreate) -> Product:
        obj = Product(**data.model_dump())
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        logger.info(f"Product '{obj.name}' (ID: {obj.id}) created")
        return obj

    def update(self, product_id: int, data: ProductUpdate) -> Product:
        product = self.get(product_id)
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(product, key, value)
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Product {product_id} updated")
        return product

    def delete(self, product_id: int) -> Product:
        product = self.get(product_id)
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Product {product_id} deleted")
        return product

    def list_low_stock(self):
        """Products whose stock is below their own threshold, lowest stock first."""
        stmt = (
            select(Product)
            .where(Product.stock_quantity < Product.low_stock_threshold)
            .order_by(Product.stock_quantity.asc(), Product.id.asc())
        )
        return self.db.execute(stmt).scalars().all()
