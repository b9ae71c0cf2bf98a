# app/models/products.py

from pydantic import BaseModel, Field

from app.models.types import MAX_DB_INT


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: int = Field(..., gt=0, le=MAX_DB_INT, description="Price in the smallest currency unit")
    quantity: int = Field(..., gt=0, le=MAX_DB_INT)


class ProductOut(ProductIn):
    id: int
