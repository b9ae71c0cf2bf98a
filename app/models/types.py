# app/models/types.py

from fastapi import Path
from pydantic import Field
from typing import Annotated

# Largest value the INTEGER columns accept
MAX_DB_INT = 2**31 - 1

DbId = Annotated[int, Field(gt=0, le=MAX_DB_INT)]
Quantity = Annotated[int, Field(gt=0, le=MAX_DB_INT)]
IdPath = Annotated[int, Path(gt=0, le=MAX_DB_INT)]
