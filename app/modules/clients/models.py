from app.database.database import Base
from sqlalchemy import Column, Integer, String
from app.common.mixins import TimestampMixin


class Client(Base, TimestampMixin):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    address = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
