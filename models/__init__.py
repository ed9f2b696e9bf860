from .inventory import Product, InventoryLog
