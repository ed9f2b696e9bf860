import io
from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.inventory import Product, ProductCreate, ProductUpdate, InventoryLog, ImportResult
from schemas.validation import validate_payload
from crud import inventory
from utils.csv_io import CsvFormatError, read_product_csv, write_product_csv

router = APIRouter()

@router.get("", response_model=List[Product])
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=1000),
    sort: str = 'id',
    order: str = 'DESC',
    category: Optional[str] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db)):
    try:
        return inventory.get_products(db, page=page, limit=limit, sort=sort, order=order, category=category, q=q)
    except inventory.InvalidSortError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/search", response_model=List[Product])
def search_products(name: str = '', db: Session = Depends(get_db)):
    return inventory.search_products(db, name)

@router.get("/export")
def export_products(db: Session = Depends(get_db)):
    content = write_product_csv(inventory.export_products(db))
    return StreamingResponse(
        io.BytesIO(content.encode('utf-8')),
        media_type='text/csv',
        headers={'Content-Disposition': 'attachment; filename="products_export.csv"'}
    )

@router.post("/import", response_model=ImportResult)
def import_products(file: Optional[UploadFile] = File(None), db: Session = Depends(get_db)):
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='CSV file required (field "file")')
    try:
        records = read_product_csv(file.file.read())
    except CsvFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return inventory.import_products(db, records)

@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(payload: dict = Body(...), db: Session = Depends(get_db)):
    result = validate_payload(ProductCreate, payload)
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.errors)
    try:
        return inventory.create_product(db, result.value)
    except inventory.DuplicateProductError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product already exists")

@router.get("/{product_id}", response_model=Product)
def get_product(product_id: int, db: Session = Depends(get_db)):
    db_product = inventory.get_product(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return db_product

@router.put("/{product_id}", response_model=Product)
def update_product(product_id: int, payload: dict = Body(...), db: Session = Depends(get_db)):
    result = validate_payload(ProductUpdate, payload)
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.errors)
    try:
        db_product = inventory.update_product(db, product_id, result.value)
    except inventory.DuplicateProductError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product name must be unique")
    if db_product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return db_product

@router.get("/{product_id}/history", response_model=List[InventoryLog])
def get_product_history(product_id: int, db: Session = Depends(get_db)):
    return inventory.get_product_history(db, product_id)
