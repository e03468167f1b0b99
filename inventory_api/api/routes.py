from typing import Annotated
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from inventory_api.infrastructure.db import get_db
from inventory_api.infrastructure.ledger_store import SqlLedgerStore
from inventory_api.application.service import ProductService
from inventory_api.application.stock import StockAdjuster
from inventory_api.domain.models import StockDirection
from inventory_api.application.schemas import (
    ProductCreate,
    ProductUpdate,
    ProductRead,
    ProductEnvelope,
    ProductListEnvelope,
    StockChange,
)

router = APIRouter(prefix="/api/products", tags=["products"])

ProductId = Annotated[int, Path(gt=0, description="Product identifier")]

def get_adjuster(db: Session = Depends(get_db)) -> StockAdjuster:
    return StockAdjuster(SqlLedgerStore(db))

def _one(product, message=None) -> ProductEnvelope:
    return ProductEnvelope(message=message, data=ProductRead.model_validate(product))

def _many(products) -> ProductListEnvelope:
    data = [ProductRead.model_validate(p) for p in products]
    return ProductListEnvelope(count=len(data), data=data)

@router.post("/create", response_model=ProductEnvelope, response_model_exclude_none=True, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return _one(ProductService(db).create(payload), "Product created successfully")

@router.get("/read-all-products", response_model=ProductListEnvelope, response_model_exclude_none=True)
def list_products(db: Session = Depends(get_db)):
    return _many(ProductService(db).list())

@router.get("/read-one-product/{product_id}", response_model=ProductEnvelope, response_model_exclude_none=True)
def get_product(product_id: ProductId, db: Session = Depends(get_db)):
    return _one(ProductService(db).get(product_id))

@router.put("/update/{product_id}", response_model=ProductEnvelope, response_model_exclude_none=True)
def update_product(payload: ProductUpdate, product_id: ProductId, db: Session = Depends(get_db)):
    return _one(ProductService(db).update(product_id, payload), "Product updated successfully")

@router.delete("/delete/{product_id}", response_model=ProductEnvelope, response_model_exclude_none=True)
def delete_product(product_id: ProductId, db: Session = Depends(get_db)):
    return _one(ProductService(db).delete(product_id), "Product deleted successfully")

@router.put("/increase/{product_id}", response_model=ProductEnvelope, response_model_exclude_none=True)
def increase_stock(payload: StockChange, product_id: ProductId, adjuster: StockAdjuster = Depends(get_adjuster)):
    result = adjuster.apply(product_id, payload.quantity, StockDirection.INCREASE)
    return _one(result.product, result.message)

@router.put("/decrease/{product_id}", response_model=ProductEnvelope, response_model_exclude_none=True)
def decrease_stock(payload: StockChange, product_id: ProductId, adjuster: StockAdjuster = Depends(get_adjuster)):
    result = adjuster.apply(product_id, payload.quantity, StockDirection.DECREASE)
    return _one(result.product, result.message)

@router.get("/low-stock-threshold", response_model=ProductListEnvelope, response_model_exclude_none=True)
def list_low_stock(db: Session = Depends(get_db)):
    return _many(ProductService(db).list_low_stock())
