from typing import Any, Dict
from pydantic import BaseModel


class CartSaveResponse(BaseModel):
    success: bool
    message: str
    cart: Dict[str, Any]


class CartDeleteResponse(BaseModel):
    success: bool
    message: str


class CheckoutSummary(BaseModel):
    totalItems: int
    subtotal: float
    shipping: float
    tax: float
    total: float
