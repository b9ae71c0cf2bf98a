# app/models/bills.py

from datetime import datetime
from typing import List

from pydantic import BaseModel, field_validator

from app.models.customers import CustomerOut
from app.models.types import DbId, Quantity


class BillProduct(BaseModel):
    product: DbId
    quantity: Quantity


class BillIn(BaseModel):
    customer: DbId
    products: List[BillProduct]

    @field_validator("products")
    @classmethod
    def unique_products(cls, value: List[BillProduct]) -> List[BillProduct]:
        ids = [item.product for item in value]
        if len(ids) != len(set(ids)):
            raise ValueError("each product may appear only once per bill")
        return value


class BillOut(BaseModel):
    id: int
    number: str
    created_at: datetime
    customer: int


class BillVerboseOut(BaseModel):
    id: int
    number: str
    created_at: datetime
    customer: CustomerOut
    products: List[BillProduct]


class StatusOut(BaseModel):
    status: str = "ok"
