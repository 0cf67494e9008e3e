import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from exceptions.cart import ProductNotFoundException, VariantRequiredException, VariantNotFoundException
from models.cart import CartDTO, CartItemCandidateDTO, CartItemPatchDTO, LineItemDTO
from repositories.session import SessionContext
from services.catalog import CatalogService
from services.inventory import InventoryService

logger = logging.getLogger(__name__)


class LineItemService:
    """
    Mutations of the stored cart document.

    Every check runs before the document is touched, so a rejected mutation
    leaves the stored cart unchanged. Callers hold the session lock.
    """

    @staticmethod
    async def get_or_create(ctx: SessionContext, instance: str) -> CartDTO:
        cart = await ctx.get_cart_document(instance)
        if cart is None:
            cart = CartDTO()
            await ctx.save_cart_document(instance, cart)
            logger.info(f"[LineItem] Created cart instance '{instance}' ({cart.cart_id}) for session {ctx.session_id}")
        return cart

    @staticmethod
    async def add(
        ctx: SessionContext,
        instance: str,
        candidate: CartItemCandidateDTO,
        session: AsyncSession | Session
    ) -> CartDTO:
        """
        Add a product to the cart.

        An item with the same product and variant gets the quantities merged
        instead of a second line.

        Raises:
            ProductNotFoundException: Product not in catalog
            VariantRequiredException: Complex product without variant
            VariantNotFoundException: Variant not among the product's variants, or given for a simple product
            InsufficientStockException: Not enough stock for the total quantity
        """
        cart = await LineItemService.get_or_create(ctx, instance)

        existing_item = next(
            (item for item in cart.items
             if item.product_id == candidate.product_id and item.variant_id == candidate.variant_id),
            None
        )
        if existing_item is not None:
            patch = CartItemPatchDTO(
                item_id=existing_item.item_id,
                quantity=existing_item.quantity + candidate.quantity,
                product_id=existing_item.product_id,
                variant_id=existing_item.variant_id,
                custom=existing_item.custom
            )
            return await LineItemService.update(ctx, instance, patch, session)

        product = await CatalogService.find_product(candidate.product_id, session)
        if product is None:
            raise ProductNotFoundException(candidate.product_id)

        if product.is_complex:
            if not candidate.variant_id:
                raise VariantRequiredException(product.id)
            if CatalogService.find_variant(product, candidate.variant_id) is None:
                raise VariantNotFoundException(product.id, candidate.variant_id)
        elif candidate.variant_id:
            # Simple products have no variants to point at
            raise VariantNotFoundException(product.id, candidate.variant_id)

        InventoryService.validate(product, candidate.variant_id, candidate.quantity, already_in_cart=0)

        cart.items.append(LineItemDTO(
            product_id=candidate.product_id,
            variant_id=candidate.variant_id,
            quantity=candidate.quantity,
            custom=candidate.custom
        ))
        await ctx.save_cart_document(instance, cart)
        logger.info(
            f"[LineItem] Added product {candidate.product_id} (variant={candidate.variant_id}) "
            f"x{candidate.quantity} to '{instance}'"
        )
        return cart

    @staticmethod
    async def update(
        ctx: SessionContext,
        instance: str,
        patch: CartItemPatchDTO,
        session: AsyncSession | Session
    ) -> CartDTO:
        """
        Set the quantity of an item. Quantity 0 removes the item.

        An unknown item_id is ignored and the cart is returned unchanged.

        Raises:
            ProductNotFoundException: Product of the item vanished from the catalog
            InsufficientStockException: Not enough stock for the new quantity
        """
        cart = await LineItemService.get_or_create(ctx, instance)

        index = next((i for i, item in enumerate(cart.items) if item.item_id == patch.item_id), None)
        if index is None:
            logger.debug(f"[LineItem] Item {patch.item_id} not in '{instance}', nothing to update")
            return cart

        item = cart.items[index]

        if patch.quantity == 0:
            del cart.items[index]
            if not cart.items:
                cart.shipping = None
                if instance == config.PRIMARY_CART_INSTANCE:
                    await ctx.forget_shipping_method()
            await ctx.save_cart_document(instance, cart)
            logger.info(f"[LineItem] Removed item {item.item_id} from '{instance}'")
            return cart

        product = await CatalogService.find_product(item.product_id, session)
        if product is None:
            raise ProductNotFoundException(item.product_id)

        # Validates the new absolute quantity: delta on top of what is already held
        previous_quantity = item.quantity
        InventoryService.validate(
            product,
            item.variant_id,
            patch.quantity - previous_quantity,
            already_in_cart=previous_quantity
        )

        cart.items[index] = item.model_copy(update={'quantity': patch.quantity})
        await ctx.save_cart_document(instance, cart)
        logger.info(f"[LineItem] Item {item.item_id} in '{instance}': quantity {previous_quantity} -> {patch.quantity}")
        return cart

    @staticmethod
    async def clear(ctx: SessionContext, instance: str) -> None:
        await ctx.delete_cart_document(instance)
        if instance == config.PRIMARY_CART_INSTANCE:
            await ctx.forget_shipping_method()
        logger.info(f"[LineItem] Cleared cart instance '{instance}' for session {ctx.session_id}")
