# app/api/customers.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.db.engine import FOREIGN_KEY_VIOLATION, classify_db_error, get_engine
from app.db.schema import customer
from app.errors import ConflictError
from app.models.bills import StatusOut
from app.models.customers import CustomerIn, CustomerOut
from app.models.types import IdPath

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/", response_model=List[CustomerOut])
def list_customers(engine: Engine = Depends(get_engine)) -> List[CustomerOut]:
    """
    Return all customers ordered by id.
    """
    with engine.connect() as conn:
        stmt = (
            select(customer.c.id, customer.c.first_name, customer.c.last_name)
            .order_by(customer.c.id)
        )
        rows = conn.execute(stmt).mappings().all()

    return [
        CustomerOut(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
        )
        for row in rows
    ]


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: IdPath, engine: Engine = Depends(get_engine)) -> CustomerOut:
    """
    Return a single customer by ID.
    """
    with engine.connect() as conn:
        stmt = (
            select(customer.c.id, customer.c.first_name, customer.c.last_name)
            .where(customer.c.id == customer_id)
        )
        row = conn.execute(stmt).mappings().first()

    if row is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    return CustomerOut(
        id=row["id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
    )


@router.post("/", response_model=CustomerOut, status_code=201)
def create_customer(body: CustomerIn, engine: Engine = Depends(get_engine)) -> CustomerOut:
    with engine.begin() as conn:
        result = conn.execute(insert(customer).values(**body.model_dump()))
        customer_id = result.inserted_primary_key[0]

    return CustomerOut(id=customer_id, **body.model_dump())


@router.patch("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: IdPath,
    body: CustomerIn,
    engine: Engine = Depends(get_engine),
) -> CustomerOut:
    with engine.begin() as conn:
        result = conn.execute(
            update(customer)
            .where(customer.c.id == customer_id)
            .values(**body.model_dump())
        )
        updated = result.rowcount

    if updated == 0:
        raise HTTPException(status_code=404, detail="Customer not found")

    return CustomerOut(id=customer_id, **body.model_dump())


@router.delete("/{customer_id}", response_model=StatusOut)
def delete_customer(customer_id: IdPath, engine: Engine = Depends(get_engine)) -> StatusOut:
    """
    Delete a customer. Customers who still own bills cannot be deleted.
    """
    try:
        with engine.begin() as conn:
            result = conn.execute(delete(customer).where(customer.c.id == customer_id))
            deleted = result.rowcount
    except IntegrityError as exc:
        if classify_db_error(exc) == FOREIGN_KEY_VIOLATION:
            raise ConflictError("Customer still has bills") from exc
        raise

    if deleted == 0:
        raise HTTPException(status_code=404, detail="Customer not found")

    return StatusOut()
