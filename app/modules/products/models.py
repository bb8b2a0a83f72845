from app.database.database import Base
from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from app.common.mixins import TimestampMixin


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    price = Column(Numeric(15, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock <= 0
