"""
Cart Recalculation Service

Builds the customer-facing cart from the stored cart document. Nothing derived
is trusted: product data, prices, weights and shipping are taken from the live
catalog and shipping configuration on every read.

Steps:
1. Resolve each line's product (vanished products stay visible but count for nothing)
2. Enrich products for display and pick the unit price (variant price wins)
3. Accumulate subtotal and weight
4. Resolve shipping: default address -> country -> zone -> eligible methods
5. grand = subtotal + discount + shipping + tax
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from models.cart import CartDTO, CartTotalsDTO, CartViewDTO, LineItemViewDTO
from repositories.session import SessionContext
from services.catalog import CatalogService
from services.enrichment import EnrichmentService
from services.shipping import ShippingService

logger = logging.getLogger(__name__)


class RecalculationService:

    @staticmethod
    async def recalculate(
        cart: CartDTO,
        ctx: SessionContext,
        session: AsyncSession | Session,
        with_shipping: bool = True
    ) -> CartViewDTO:
        """
        Recompute the full cart view.

        The stored document is not modified. The only writes are the session
        facts owned by ShippingService (default address, shipping country and
        the selected method).

        Args:
            cart: Stored cart document
            ctx: Session context
            session: Database session
            with_shipping: Resolve shipping (only the primary cart carries a shipping selection)

        Returns:
            CartViewDTO: Enriched items with recomputed totals
        """
        field_kinds = await CatalogService.get_product_fields(session)

        subtotal = 0.0
        weight = 0.0
        items: list[LineItemViewDTO] = []

        for item in cart.items:
            item_view = LineItemViewDTO(**item.model_dump())
            items.append(item_view)

            product = await CatalogService.find_product(item.product_id, session)
            if product is None:
                logger.debug(f"[Recalc] Product {item.product_id} of item {item.item_id} not found, skipping")
                continue

            item_view.product = await EnrichmentService.enrich_product(product, field_kinds, session)

            if item.variant_id:
                variant = CatalogService.find_variant(product, item.variant_id)
                item_view.variant = variant
                unit_price = variant.price if variant is not None and variant.price is not None else 0.0
            else:
                unit_price = product.price if product.price is not None else 0.0

            item_view.unit_price = round(unit_price, 2)
            item_view.line_total = round(unit_price * item.quantity, 2)

            subtotal += unit_price * item.quantity
            weight += (product.weight or 0.0) * item.quantity

        totals = CartTotalsDTO(
            subtotal=round(subtotal, 2),
            discount=round(cart.totals.discount, 2),
            tax=round(cart.totals.tax, 2),
            weight=round(weight, 3)
        )

        shipping = None
        if with_shipping:
            shipping = await RecalculationService._resolve_shipping(cart, items, totals, ctx, session)
            if shipping is not None and shipping.active_method is not None:
                totals.shipping = round(shipping.methods[shipping.active_method].rate, 2)

        totals.grand = totals.subtotal + totals.discount + totals.shipping + totals.tax

        logger.debug(
            f"[Recalc] Cart {cart.cart_id}: {len(items)} items, subtotal={totals.subtotal}, "
            f"shipping={totals.shipping}, grand={totals.grand}"
        )

        return CartViewDTO(
            cart_id=cart.cart_id,
            items=items,
            coupons=list(cart.coupons),
            shipping=shipping,
            totals=totals
        )

    @staticmethod
    async def _resolve_shipping(
        cart: CartDTO,
        items: list[LineItemViewDTO],
        totals: CartTotalsDTO,
        ctx: SessionContext,
        session: AsyncSession | Session
    ):
        selection = cart.shipping

        # Default address is resolved once per session
        if await ctx.get_default_address() is None:
            default_address = await ShippingService.resolve_default_address(ctx, session)
            if default_address is not None:
                selection = ShippingService.resolve_zone(default_address.address.country)

        if selection is None:
            country = await ctx.get_shipping_country()
            if country:
                selection = ShippingService.resolve_zone(country)

        # An empty cart carries no shipping selection
        if selection is None or not items:
            return None

        return await ShippingService.refresh_selection(selection, totals.subtotal, totals.weight, ctx)
