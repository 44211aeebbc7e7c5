"""
Schémata košíku.
"""
from pydantic import BaseModel, Field


class CartItemAdd(BaseModel):
    product_id: int = Field(..., description="ID produktu")
    quantity: int = Field(1, ge=1, le=99, description="Počet kusů (1-99)")


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1, le=99, description="Nový počet kusů (1-99)")


class CartMergeRequest(BaseModel):
    guest_cart_id: str = Field(..., min_length=1, max_length=100, description="Košík návštěvníka")
