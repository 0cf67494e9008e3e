import logging

from enums.product_class import ProductClass
from exceptions.cart import InsufficientStockException, VariantNotFoundException
from models.product import ProductDTO

logger = logging.getLogger(__name__)


class InventoryService:
    """Stock validation for cart mutations."""

    @staticmethod
    def validate(
        product: ProductDTO,
        variant_id: str | None,
        requested_quantity: int,
        already_in_cart: int = 0
    ) -> None:
        """
        Check that the cart may hold requested_quantity + already_in_cart units.

        The check is always about the total quantity the cart will hold after the
        mutation, so callers pass what is already committed for this exact
        (product, variant) pair.

        Args:
            product: Product being added or updated
            variant_id: Selected variant (complex products)
            requested_quantity: Units being added on top of already_in_cart
            already_in_cart: Units of this product/variant already in the cart

        Raises:
            VariantNotFoundException: Complex product without the given variant
            InsufficientStockException: Not enough tracked inventory
        """
        if not product.track_inventory:
            return

        total = requested_quantity + already_in_cart

        if product.product_class == ProductClass.SIMPLE:
            available = product.inventory or 0
            if available < total:
                logger.info(
                    f"[Inventory] Rejected product {product.id}: requested {total}, available {available}"
                )
                raise InsufficientStockException(product.id, total, available)
            return

        variant = next((v for v in product.variants if v.id == variant_id), None)
        if variant is None:
            raise VariantNotFoundException(product.id, variant_id)

        # A variant without inventory count is treated as out of stock
        if variant.inventory is None or variant.inventory < total:
            logger.info(
                f"[Inventory] Rejected variant {variant_id} of product {product.id}: "
                f"requested {total}, available {variant.inventory}"
            )
            raise InsufficientStockException(product.id, total, variant.inventory, variant_id=variant_id)
