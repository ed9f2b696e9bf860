from .inventory import (
    create_product, get_product, get_products, search_products, update_product,
    get_product_history, import_products, export_products,
    DuplicateProductError, InvalidSortError
)
