from pydantic import BaseModel, Field

from enums.shipping_zone_type import ShippingZoneType


class ShippingMethodDTO(BaseModel):
    """
    A shipping method from a zone's price or weight rate table.

    min/max bound the compared cart total (subtotal for price rates,
    weight for weight rates). None means unbounded on that side.
    """
    name: str
    min: float | None = None
    max: float | None = None
    rate: float = 0.0
    active: bool = False  # View-only: marks the selected method in a recalculated cart


class ShippingZoneDTO(BaseModel):
    id: str
    name: str = ""
    type: ShippingZoneType = ShippingZoneType.COUNTRIES
    countries: list[str] = []
    price_rates: list[ShippingMethodDTO] = Field(default_factory=list)
    weight_rates: list[ShippingMethodDTO] = Field(default_factory=list)
