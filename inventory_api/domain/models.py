from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, CheckConstraint, func
from enum import Enum
import datetime

DEFAULT_LOW_STOCK_THRESHOLD = 10
# Upper bound of the counter columns (PostgreSQL INTEGER)
MAX_STOCK_QUANTITY = 2**31 - 1

class Base(DeclarativeBase):
    pass

class StockDirection(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"

class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_quantity_non_negative"),
        CheckConstraint(f"stock_quantity <= {MAX_STOCK_QUANTITY}", name="ck_products_stock_quantity_max"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_products_low_stock_threshold_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(20))
    description: Mapped[str] = mapped_column(String(50))
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, index=True)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, default=DEFAULT_LOW_STOCK_THRESHOLD)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity < self.low_stock_threshold

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock_quantity})>"
