# app/api/products.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.db.engine import FOREIGN_KEY_VIOLATION, classify_db_error, get_engine
from app.db.schema import product
from app.errors import ConflictError
from app.models.bills import StatusOut
from app.models.products import ProductIn, ProductOut
from app.models.types import IdPath

router = APIRouter(prefix="/products", tags=["products"])


def _select_products():
    return select(
        product.c.id,
        product.c.name,
        product.c.description,
        product.c.price,
        product.c.quantity,
    )


@router.get("/", response_model=List[ProductOut])
def list_products(engine: Engine = Depends(get_engine)) -> List[ProductOut]:
    with engine.connect() as conn:
        rows = conn.execute(_select_products().order_by(product.c.id)).mappings().all()

    return [ProductOut(**row) for row in rows]


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: IdPath, engine: Engine = Depends(get_engine)) -> ProductOut:
    with engine.connect() as conn:
        stmt = _select_products().where(product.c.id == product_id)
        row = conn.execute(stmt).mappings().first()

    if row is None:
        raise HTTPException(status_code=404, detail="Product not found")

    return ProductOut(**row)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(body: ProductIn, engine: Engine = Depends(get_engine)) -> ProductOut:
    with engine.begin() as conn:
        result = conn.execute(insert(product).values(**body.model_dump()))
        product_id = result.inserted_primary_key[0]

    return ProductOut(id=product_id, **body.model_dump())


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: IdPath,
    body: ProductIn,
    engine: Engine = Depends(get_engine),
) -> ProductOut:
    with engine.begin() as conn:
        result = conn.execute(
            update(product)
            .where(product.c.id == product_id)
            .values(**body.model_dump())
        )
        updated = result.rowcount

    if updated == 0:
        raise HTTPException(status_code=404, detail="Product not found")

    return ProductOut(id=product_id, **body.model_dump())


@router.delete("/{product_id}", response_model=StatusOut)
def delete_product(product_id: IdPath, engine: Engine = Depends(get_engine)) -> StatusOut:
    try:
        with engine.begin() as conn:
            result = conn.execute(delete(product).where(product.c.id == product_id))
            deleted = result.rowcount
    except IntegrityError as exc:
        if classify_db_error(exc) == FOREIGN_KEY_VIOLATION:
            raise ConflictError("Product is still part of a bill") from exc
        raise

    if deleted == 0:
        raise HTTPException(status_code=404, detail="Product not found")

    return StatusOut()
