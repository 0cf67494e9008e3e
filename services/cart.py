"""
Cart Service

Public operations of the cart engine. Each operation:
- runs under the per-session lock (cart document and session facts form one critical section)
- mutates the stored document through LineItemService / ShippingService
- returns the recalculated cart

Mutations return a CartOperationResultDTO: domain errors raised by the services
are turned into a failed result carrying the error kind and its details.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from exceptions.base import CartEngineException
from models.cart import (
    CartDTO,
    CartViewDTO,
    CartItemCandidateDTO,
    CartItemPatchDTO,
    CartOperationResultDTO,
    ShippingSelectionDTO
)
from repositories.session import SessionContext
from services.line_item import LineItemService
from services.recalculation import RecalculationService
from services.shipping import ShippingService

logger = logging.getLogger(__name__)


class CartService:

    @staticmethod
    async def _recalculate(
        ctx: SessionContext,
        instance: str,
        cart: CartDTO,
        session: AsyncSession | Session
    ) -> CartViewDTO:
        return await RecalculationService.recalculate(
            cart, ctx, session,
            with_shipping=instance == config.PRIMARY_CART_INSTANCE
        )

    @staticmethod
    def _failure(e: CartEngineException) -> CartOperationResultDTO:
        logger.info(f"[Cart] Rejected: {e!r}")
        return CartOperationResultDTO(success=False, error=e.kind, details=e.details)

    @staticmethod
    async def get_cart(
        ctx: SessionContext,
        instance: str,
        session: AsyncSession | Session,
        recalculated: bool = True
    ) -> CartViewDTO | CartDTO:
        """
        Read a cart instance, creating it on first access.

        Args:
            recalculated: False returns the raw stored document

        Returns:
            CartViewDTO, or CartDTO when recalculated is False
        """
        async with ctx.lock():
            cart = await LineItemService.get_or_create(ctx, instance)
            if not recalculated:
                return cart
            return await CartService._recalculate(ctx, instance, cart, session)

    @staticmethod
    async def add_item(
        ctx: SessionContext,
        instance: str,
        candidate: CartItemCandidateDTO,
        session: AsyncSession | Session
    ) -> CartOperationResultDTO:
        """
        Add a product to a cart instance.

        Returns:
            CartOperationResultDTO: success with the recalculated cart, or the error kind
            (PRODUCT_NOT_FOUND, VARIANT_REQUIRED, VARIANT_NOT_FOUND, INSUFFICIENT_STOCK)
        """
        async with ctx.lock():
            try:
                cart = await LineItemService.add(ctx, instance, candidate, session)
            except CartEngineException as e:
                return CartService._failure(e)
            view = await CartService._recalculate(ctx, instance, cart, session)
            return CartOperationResultDTO(success=True, cart=view)

    @staticmethod
    async def update_item(
        ctx: SessionContext,
        instance: str,
        patch: CartItemPatchDTO,
        session: AsyncSession | Session
    ) -> CartOperationResultDTO:
        """Change the quantity of an item; quantity 0 removes it."""
        async with ctx.lock():
            try:
                cart = await LineItemService.update(ctx, instance, patch, session)
            except CartEngineException as e:
                return CartService._failure(e)
            view = await CartService._recalculate(ctx, instance, cart, session)
            return CartOperationResultDTO(success=True, cart=view)

    @staticmethod
    async def clear_cart(ctx: SessionContext, instance: str) -> None:
        async with ctx.lock():
            await LineItemService.clear(ctx, instance)

    @staticmethod
    async def set_shipping_country(
        ctx: SessionContext,
        country: str,
        session: AsyncSession | Session
    ) -> ShippingSelectionDTO | None:
        """
        Change the shipping country of the session.

        The previously selected method is forgotten since eligibility depends
        on the zone. The resolved zone is stored on the primary cart.

        Returns:
            Recalculated shipping selection, or None if the country is not shippable.
            On an empty cart only the zone is returned, without methods.
        """
        async with ctx.lock():
            # Settle the once-per-session address lookup first so it cannot override this choice
            if await ctx.get_default_address() is None:
                await ShippingService.resolve_default_address(ctx, session)

            await ctx.set_shipping_country(country)
            await ctx.forget_shipping_method()

            instance = config.PRIMARY_CART_INSTANCE
            cart = await LineItemService.get_or_create(ctx, instance)
            cart.shipping = ShippingService.resolve_zone(country)
            await ctx.save_cart_document(instance, cart)
            logger.info(
                f"[Cart] Session {ctx.session_id}: shipping country {country} -> "
                f"zone {cart.shipping.zone_id if cart.shipping else None}"
            )

            view = await CartService._recalculate(ctx, instance, cart, session)
            # An empty cart has no methods, but the zone is known
            return view.shipping or cart.shipping

    @staticmethod
    async def set_default_address(
        ctx: SessionContext,
        address_key: str,
        session: AsyncSession | Session
    ) -> ShippingSelectionDTO | None:
        """
        Use one of the customer's saved addresses as shipping address.

        Falls back to the address flagged default if the key is unknown. Does
        nothing but forget the method for anonymous sessions.
        """
        async with ctx.lock():
            default_address = await ShippingService.resolve_default_address(ctx, session, key=address_key)
            await ctx.forget_shipping_method()

            instance = config.PRIMARY_CART_INSTANCE
            cart = await LineItemService.get_or_create(ctx, instance)
            if default_address is not None:
                cart.shipping = ShippingService.resolve_zone(default_address.address.country)
                await ctx.save_cart_document(instance, cart)

            view = await CartService._recalculate(ctx, instance, cart, session)
            return view.shipping or cart.shipping

    @staticmethod
    async def choose_shipping_method(
        ctx: SessionContext,
        method_key: str,
        session: AsyncSession | Session
    ) -> CartOperationResultDTO:
        """
        Select one of the currently eligible shipping methods.

        Returns:
            CartOperationResultDTO: success with the recalculated cart, or SHIPPING_METHOD_UNAVAILABLE
        """
        async with ctx.lock():
            instance = config.PRIMARY_CART_INSTANCE
            cart = await LineItemService.get_or_create(ctx, instance)
            view = await CartService._recalculate(ctx, instance, cart, session)
            try:
                await ShippingService.choose_method(view.shipping, method_key, ctx)
            except CartEngineException as e:
                return CartService._failure(e)
            view = await CartService._recalculate(ctx, instance, cart, session)
            return CartOperationResultDTO(success=True, cart=view)
