from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database import Base

class Product(Base):
    __tablename__ = 'products'
    __table_args__ = (CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # NOCASE makes both the UNIQUE constraint and equality lookups case-insensitive
    name = Column(String(collation='NOCASE'), nullable=False, unique=True)
    unit = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    brand = Column(String, nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False)
    image = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    logs = relationship("InventoryLog", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)


class InventoryLog(Base):
    __tablename__ = 'inventory_logs'

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True)
    old_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    changed_by = Column(String, nullable=False)
    timestamp = Column(DateTime, server_default=func.now())

    product = relationship("Product", back_populates="logs")
