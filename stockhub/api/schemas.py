# stockhub/api/schemas.py

"""Request/response models for the lookup API."""

from pydantic import BaseModel


class AvailabilityOut(BaseModel):
    name: str
    quantity: int
    priceNet: float
    priceGross: float
    vat: float
    source: str


class ProductOut(BaseModel):
    identifier: str
    availableOn: list[AvailabilityOut] = []


class ProductsOut(BaseModel):
    products: list[ProductOut]
    total: int


class EanBatchIn(BaseModel):
    eans: list[str]
