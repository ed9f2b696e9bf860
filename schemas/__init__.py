from .inventory import (
    Product, ProductCreate, ProductUpdate,
    InventoryLog, ImportDuplicate, ImportResult
)
from .validation import ValidationResult, validate_payload, format_errors
