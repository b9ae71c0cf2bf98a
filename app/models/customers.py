# app/models/customers.py

from pydantic import BaseModel, Field


class CustomerIn(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)


class CustomerOut(CustomerIn):
    id: int
