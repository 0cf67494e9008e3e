"""
Shipping Resolution Service

Resolves the session's shipping country into a shipping zone and computes the
shipping methods a cart is eligible for.

Flow per session:
    no country -> country known -> zone resolved -> methods computed -> method selected

Zones come from the JSON configuration (see utils/shipping_zones_loader.py).
Each zone has a price-based and a weight-based rate table; both are evaluated,
so a cart may be offered methods from either table at the same time.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.shipping_zone_type import ShippingZoneType
from exceptions.shipping import ShippingMethodUnavailableException
from models.cart import ShippingSelectionDTO
from models.customer import DefaultAddressDTO
from models.shipping_zone import ShippingMethodDTO, ShippingZoneDTO
from repositories.session import SessionContext
from services.catalog import CatalogService
from utils.shipping_zones_loader import get_shipping_zones
from utils.slug import slugify

logger = logging.getLogger(__name__)

# Separator of the composite "country|region" address field
COUNTRY_REGION_SEPARATOR = "|"


def split_country_region(value: str | None) -> tuple[str | None, str | None]:
    """
    Split the composite "country|region" value of a stored address.

    Example:
        >>> split_country_region("US|CA")
        ('US', 'CA')
        >>> split_country_region("FR")
        ('FR', None)
    """
    if not value:
        return None, None
    country, _, region = value.partition(COUNTRY_REGION_SEPARATOR)
    return country or None, region or None


def is_method_eligible(method: ShippingMethodDTO, total: float) -> bool:
    if method.min is not None and total < method.min:
        return False
    if method.max is not None and total > method.max:
        return False
    return True


class ShippingService:
    """Service for shipping zone and method resolution."""

    @staticmethod
    async def resolve_default_address(
        ctx: SessionContext,
        session: AsyncSession | Session,
        key: str | None = None
    ) -> DefaultAddressDTO | None:
        """
        Seed the session's shipping country from the customer's saved addresses.

        Picks the address with the given key, otherwise the one flagged default.
        The picked address is stored as the session's default-address fact and its
        country becomes the shipping country.

        Args:
            ctx: Session context (customer_key None = anonymous, nothing to resolve)
            session: Database session
            key: Explicit address key chosen by the caller

        Returns:
            DefaultAddressDTO or None if no address could be picked
        """
        if ctx.customer_key is None:
            return None

        addresses = await CatalogService.find_customer_addresses(ctx.customer_key, session)
        if not addresses:
            return None

        address = None
        if key is not None:
            address = next((a for a in addresses if a.key == key), None)
        if address is None:
            address = next((a for a in addresses if a.is_default), None)
        if address is None:
            logger.debug(f"[Shipping] No default address for session {ctx.session_id}")
            return None

        country, region = split_country_region(address.country)
        if country is None:
            return None

        split_address = address.model_copy(update={'country': country, 'region': region})
        default_address = DefaultAddressDTO(key=address.key, address=split_address)

        await ctx.set_default_address(default_address)
        await ctx.set_shipping_country(country)
        logger.info(f"[Shipping] Session {ctx.session_id}: shipping country {country} from address '{address.key}'")
        return default_address

    @staticmethod
    def resolve_zone(
        country: str | None,
        zones: list[ShippingZoneDTO] | None = None
    ) -> ShippingSelectionDTO | None:
        """
        Find the shipping zone serving a country.

        The first zone listing the country wins. Without a match the catch-all
        zone is used, if one is configured.

        Args:
            country: Shipping country code
            zones: Zones to search (default: configured zones)

        Returns:
            ShippingSelectionDTO holding the zone id, or None if the country is not shippable
        """
        if not country:
            return None
        if zones is None:
            zones = get_shipping_zones()

        for zone in zones:
            if zone.type == ShippingZoneType.COUNTRIES and country in zone.countries:
                return ShippingSelectionDTO(zone_id=zone.id)

        rest_zone = next((zone for zone in zones if zone.type == ShippingZoneType.REST), None)
        if rest_zone is not None:
            return ShippingSelectionDTO(zone_id=rest_zone.id)

        logger.info(f"[Shipping] No shipping zone for country {country}")
        return None

    @staticmethod
    def find_zone(zone_id: str, zones: list[ShippingZoneDTO] | None = None) -> ShippingZoneDTO | None:
        if zones is None:
            zones = get_shipping_zones()
        return next((zone for zone in zones if zone.id == zone_id), None)

    @staticmethod
    def compute_methods(zone: ShippingZoneDTO, subtotal: float, weight: float) -> dict[str, ShippingMethodDTO]:
        """
        Collect the methods of a zone the cart is eligible for.

        Price rates are compared against the subtotal, weight rates against the
        cart weight. Methods are keyed by the slug of their name; a later method
        with the same slug replaces an earlier one, weight rates included.

        Args:
            zone: Resolved shipping zone
            subtotal: Cart subtotal
            weight: Cart weight

        Returns:
            dict: {method_slug: ShippingMethodDTO} in table order

        Example:
            >>> zone = ShippingZoneDTO(id="0", price_rates=[ShippingMethodDTO(name="Free", min=50)])
            >>> ShippingService.compute_methods(zone, subtotal=60.0, weight=1.0)
            {'free': ShippingMethodDTO(name='Free', min=50.0, max=None, rate=0.0, active=False)}
        """
        methods: dict[str, ShippingMethodDTO] = {}
        for rate_table, total in ((zone.price_rates, subtotal), (zone.weight_rates, weight)):
            for method in rate_table:
                if is_method_eligible(method, total):
                    methods[slugify(method.name)] = method.model_copy()
        return methods

    @staticmethod
    async def select_method(methods: dict[str, ShippingMethodDTO], ctx: SessionContext) -> str | None:
        """
        Pick the active method: the stored choice while it stays eligible,
        otherwise the first eligible method, which is stored as the new choice.
        """
        if not methods:
            return None

        stored_key = await ctx.get_shipping_method()
        if stored_key in methods:
            return stored_key

        method_key = next(iter(methods))
        await ctx.set_shipping_method(method_key)
        if stored_key is not None:
            logger.info(f"[Shipping] Method '{stored_key}' no longer eligible, switched to '{method_key}'")
        return method_key

    @staticmethod
    async def refresh_selection(
        selection: ShippingSelectionDTO,
        subtotal: float,
        weight: float,
        ctx: SessionContext
    ) -> ShippingSelectionDTO | None:
        """
        Recompute methods and the active method of a zone selection.

        Returns:
            Selection with methods filled in, or None if the zone is no longer configured
        """
        zone = ShippingService.find_zone(selection.zone_id)
        if zone is None:
            logger.warning(f"[Shipping] Zone {selection.zone_id} is not configured anymore")
            return None

        methods = ShippingService.compute_methods(zone, subtotal, weight)
        active_method = await ShippingService.select_method(methods, ctx)
        if active_method is not None:
            methods[active_method].active = True

        return ShippingSelectionDTO(zone_id=zone.id, methods=methods, active_method=active_method)

    @staticmethod
    async def choose_method(
        selection: ShippingSelectionDTO | None,
        method_key: str,
        ctx: SessionContext
    ) -> None:
        """
        Store an explicit method choice of the customer.

        Args:
            selection: Current recalculated selection
            method_key: Slug of the chosen method

        Raises:
            ShippingMethodUnavailableException: If the method is not eligible for the cart
        """
        if selection is None or method_key not in selection.methods:
            raise ShippingMethodUnavailableException(method_key, selection.zone_id if selection else None)
        await ctx.set_shipping_method(method_key)
        logger.info(f"[Shipping] Session {ctx.session_id}: method '{method_key}' chosen")
