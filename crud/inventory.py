import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
from models.inventory import Product, InventoryLog
from schemas.inventory import ProductCreate, ProductUpdate, ImportDuplicate, ImportResult

logger = logging.getLogger(__name__)

IN_STOCK = 'In Stock'
OUT_OF_STOCK = 'Out of Stock'

SORTABLE_COLUMNS = ('id', 'name', 'unit', 'category', 'brand', 'stock', 'status', 'created_at', 'updated_at')
SORT_ORDERS = ('ASC', 'DESC')

DEFAULT_UNIT = 'pcs'
DEFAULT_CATEGORY = 'Uncategorized'


class DuplicateProductError(ValueError):
    def __init__(self, name: str, existing_id: int):
        super().__init__(f"Product '{name}' already exists (id {existing_id})")
        self.name = name
        self.existing_id = existing_id


class InvalidSortError(ValueError):
    pass


def derive_status(stock: int) -> str:
    return IN_STOCK if stock > 0 else OUT_OF_STOCK


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()


def find_product_by_name(db: Session, name: str, exclude_id: Optional[int] = None) -> Optional[Product]:
    query = db.query(Product).filter(Product.name.collate('NOCASE') == name)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first()


def get_products(db: Session,
    page: int = 1,
    limit: int = 100,
    sort: str = 'id',
    order: str = 'DESC',
    category: Optional[str] = None,
    q: Optional[str] = None) -> List[Product]:
    if sort not in SORTABLE_COLUMNS:
        raise InvalidSortError(f"Cannot sort by '{sort}'; expected one of {', '.join(SORTABLE_COLUMNS)}")
    direction = (order or '').upper()
    if direction not in SORT_ORDERS:
        raise InvalidSortError(f"Invalid sort order '{order}'; expected ASC or DESC")

    query = db.query(Product)

    if category:
        query = query.filter(Product.category == category)
    if q:
        # instr() is case-sensitive, unlike LIKE on SQLite
        query = query.filter(func.instr(Product.name, q) > 0)

    column = getattr(Product, sort)
    if direction == 'ASC':
        query = query.order_by(column.asc(), Product.id.asc())
    else:
        query = query.order_by(column.desc(), Product.id.desc())

    return query.offset((page - 1) * limit).limit(limit).all()


def search_products(db: Session, name: str, limit: int = 100) -> List[Product]:
    return db.query(Product).filter(Product.name.ilike(f'%{name}%')).order_by(Product.id).limit(limit).all()


def _insert_product(db: Session, data: dict) -> Product:
    db_product = Product(**data)
    db.add(db_product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_product_by_name(db, data['name'])
        if existing is None:
            raise
        raise DuplicateProductError(data['name'], existing.id)
    db.refresh(db_product)
    return db_product


def create_product(db: Session, product: ProductCreate) -> Product:
    existing = find_product_by_name(db, product.name)
    if existing:
        raise DuplicateProductError(product.name, existing.id)

    data = product.model_dump()
    if data['status'] is None:
        data['status'] = derive_status(data['stock'])

    db_product = _insert_product(db, data)
    logger.info("Created product %s (%r)", db_product.id, db_product.name)
    return db_product


def update_product(db: Session, product_id: int, product_update: ProductUpdate) -> Optional[Product]:
    db_product = get_product(db, product_id)
    if db_product is None:
        return None

    existing = find_product_by_name(db, product_update.name, exclude_id=product_id)
    if existing:
        raise DuplicateProductError(product_update.name, existing.id)

    old_stock = db_product.stock
    update_data = product_update.model_dump(exclude={'changed_by'})
    if update_data['status'] is None:
        update_data['status'] = derive_status(update_data['stock'])

    for key, value in update_data.items():
        setattr(db_product, key, value)
    db_product.updated_at = func.now()

    if product_update.stock != old_stock:
        db.add(InventoryLog(
            product_id=product_id,
            old_stock=old_stock,
            new_stock=product_update.stock,
            changed_by=product_update.changed_by,
        ))
        logger.info("Stock of product %s changed %s -> %s by %s",
                    product_id, old_stock, product_update.stock, product_update.changed_by)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_product_by_name(db, product_update.name, exclude_id=product_id)
        if existing is None:
            raise
        raise DuplicateProductError(product_update.name, existing.id)
    db.refresh(db_product)
    return db_product


def get_product_history(db: Session, product_id: int) -> List[InventoryLog]:
    return db.query(InventoryLog).filter(
        InventoryLog.product_id == product_id
    ).order_by(InventoryLog.timestamp.desc(), InventoryLog.id.desc()).all()


def import_products(db: Session, records: Iterable[dict]) -> ImportResult:
    """Insert CSV records one at a time, skipping blank and already-known names.

    Each added row is committed on its own, so a later duplicate in the same
    file is reported against the row added earlier.
    """
    result = ImportResult()

    for record in records:
        name = (record.get('name') or '').strip()
        if not name:
            result.skipped += 1
            continue

        existing = find_product_by_name(db, name)
        if existing:
            result.duplicates.append(ImportDuplicate(name=name, existing_id=existing.id))
            result.skipped += 1
            continue

        stock = record.get('stock') or 0
        try:
            _insert_product(db, {
                'name': name,
                'unit': record.get('unit') or DEFAULT_UNIT,
                'category': record.get('category') or DEFAULT_CATEGORY,
                'brand': record.get('brand') or None,
                'stock': stock,
                'status': record.get('status') or derive_status(stock),
                'image': record.get('image') or None,
            })
        except DuplicateProductError as exc:
            result.duplicates.append(ImportDuplicate(name=name, existing_id=exc.existing_id))
            result.skipped += 1
            continue
        result.added += 1

    logger.info("Import finished: added=%d skipped=%d duplicates=%d",
                result.added, result.skipped, len(result.duplicates))
    return result


def export_products(db: Session) -> List[tuple]:
    return db.query(
        Product.name,
        Product.unit,
        Product.category,
        Product.brand,
        Product.stock,
        Product.status,
        Product.image,
    ).order_by(Product.id).all()
