from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

# SQLite INTEGER is a signed 64-bit value
MAX_STOCK = 2**63 - 1

class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    category: str = Field(min_length=1)
    brand: Optional[str] = None
    stock: int = Field(ge=0, le=MAX_STOCK)
    status: Optional[str] = None
    image: Optional[str] = None

    @field_validator('name', 'unit', 'category', mode='before')
    @classmethod
    def strip_required(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator('stock', mode='before')
    @classmethod
    def reject_bool_stock(cls, value):
        if isinstance(value, bool):
            raise ValueError('stock must be an integer, not a boolean')
        return value

    @field_validator('brand', 'status', 'image', mode='before')
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

class ProductCreate(ProductBase):
    pass

class ProductUpdate(ProductBase):
    changed_by: str = Field('admin', alias='changedBy')

    @field_validator('changed_by', mode='before')
    @classmethod
    def default_changed_by(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return 'admin'
        return value.strip() if isinstance(value, str) else value

    class Config:
        populate_by_name = True

class Product(ProductBase):
    id: int
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class InventoryLog(BaseModel):
    id: int
    product_id: int
    old_stock: int
    new_stock: int
    changed_by: str
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True

class ImportDuplicate(BaseModel):
    name: str
    existing_id: int = Field(alias='existingId')

    class Config:
        populate_by_name = True

class ImportResult(BaseModel):
    added: int = 0
    skipped: int = 0
    duplicates: List[ImportDuplicate] = []
