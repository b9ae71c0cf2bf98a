# app/api/bills.py

import time
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from app.config import get_settings
from app.db.engine import get_engine
from app.models.bills import (
    BillIn,
    BillOut,
    BillProduct,
    BillVerboseOut,
    StatusOut,
)
from app.models.products import ProductOut
from app.models.types import IdPath
from app.services.bills import BillWriter

router = APIRouter(prefix="/bills", tags=["bills"])


def get_bill_writer(engine: Engine = Depends(get_engine)) -> BillWriter:
    return BillWriter(engine, isolation_level=get_settings().bill_isolation_level)


def request_deadline() -> float:
    """Monotonic time after which an in-flight bill operation gives up."""
    return time.monotonic() + get_settings().request_timeout


@router.get("/", response_model=List[BillOut])
def list_bills(
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> List[BillOut]:
    return writer.list_bills(deadline=deadline)


@router.get("/{bill_id}", response_model=BillVerboseOut)
def get_bill(
    bill_id: IdPath,
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> BillVerboseOut:
    """
    Bill with its customer and line items.
    """
    return writer.read_bill_detail(bill_id, deadline=deadline)


@router.post("/", response_model=BillOut, status_code=201)
def create_bill(
    body: BillIn,
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> BillOut:
    return writer.create_bill(body.customer, body.products, deadline=deadline)


@router.patch("/{bill_id}", response_model=StatusOut)
def update_bill(
    bill_id: IdPath,
    body: BillIn,
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> StatusOut:
    """
    Replace the bill's customer and its whole set of line items.
    """
    writer.replace_bill_contents(bill_id, body.customer, body.products, deadline=deadline)
    return StatusOut()


@router.delete("/{bill_id}", response_model=StatusOut)
def delete_bill(
    bill_id: IdPath,
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> StatusOut:
    writer.delete_bill(bill_id, deadline=deadline)
    return StatusOut()


@router.get("/{bill_id}/products", response_model=List[ProductOut])
def list_bill_products(
    bill_id: IdPath,
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> List[ProductOut]:
    return writer.list_bill_products(bill_id, deadline=deadline)


@router.post("/{bill_id}/products", response_model=StatusOut, status_code=201)
def add_product_to_bill(
    bill_id: IdPath,
    body: BillProduct,
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> StatusOut:
    writer.add_line_item(bill_id, body.product, body.quantity, deadline=deadline)
    return StatusOut()


@router.delete("/{bill_id}/products/{product_id}", response_model=StatusOut)
def remove_product_from_bill(
    bill_id: IdPath,
    product_id: IdPath,
    writer: BillWriter = Depends(get_bill_writer),
    deadline: float = Depends(request_deadline),
) -> StatusOut:
    writer.remove_line_item(bill_id, product_id, deadline=deadline)
    return StatusOut()
