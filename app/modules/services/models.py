from app.database.database import Base
from sqlalchemy import Column, Integer, String, Numeric
from app.common.mixins import TimestampMixin


class Service(Base, TimestampMixin):
    """Billable service (labour, repair, etc.) sold alongside products."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    price = Column(Numeric(15, 2), nullable=False)
