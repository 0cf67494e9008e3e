# A cart is a thin, session-scoped document: only references to catalog products
# and quantities are stored. Everything a customer sees (product data, prices,
# totals, shipping methods) is derived again on every read, so the stored totals
# are a cache and never an input.
#
# note that items are NOT reserved; stock is only validated when the cart is mutated
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from enums.cart_error_kind import CartErrorKind
from models.product import ProductViewDTO, VariantDTO
from models.shipping_zone import ShippingMethodDTO


def generate_id() -> str:
    return uuid4().hex


class CartTotalsDTO(BaseModel):
    subtotal: float = 0.0
    discount: float = 0.0   # Baked in by the coupon system, passed through
    shipping: float = 0.0
    tax: float = 0.0        # Computed elsewhere, passed through
    grand: float = 0.0
    weight: float = 0.0


class ShippingSelectionDTO(BaseModel):
    zone_id: str
    # Derived on read only; the stored document keeps just the zone
    methods: dict[str, ShippingMethodDTO] = Field(default_factory=dict)
    active_method: str | None = None


class LineItemDTO(BaseModel):
    item_id: str = Field(default_factory=generate_id)
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(gt=0)
    custom: Any = None  # Personalization payload, passed through untouched


class CartDTO(BaseModel):
    cart_id: str = Field(default_factory=generate_id)
    items: list[LineItemDTO] = Field(default_factory=list)
    coupons: list[str] = Field(default_factory=list)
    shipping: ShippingSelectionDTO | None = None
    totals: CartTotalsDTO = Field(default_factory=CartTotalsDTO)


class LineItemViewDTO(LineItemDTO):
    product: ProductViewDTO | None = None  # None = product vanished from catalog
    variant: VariantDTO | None = None
    unit_price: float = 0.0
    line_total: float = 0.0


class CartViewDTO(CartDTO):
    items: list[LineItemViewDTO] = Field(default_factory=list)


class CartItemCandidateDTO(BaseModel):
    """Input of add_item."""
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(default=1, gt=0)
    custom: Any = None


class CartItemPatchDTO(BaseModel):
    """Input of update_item. A quantity of 0 removes the item."""
    item_id: str
    quantity: int = Field(ge=0)
    product_id: str | None = None
    variant_id: str | None = None
    custom: Any = None


class CartOperationResultDTO(BaseModel):
    """Tagged outcome of a cart mutation: either a cart or an error kind with context."""
    success: bool
    cart: CartViewDTO | None = None
    error: CartErrorKind | None = None
    details: dict = Field(default_factory=dict)
