"""
Unit Tests: CartService

Tests for services/cart.py covering:
- get_cart() - lazy creation, raw and recalculated reads
- add_item() / update_item() - tagged results for accepted and rejected mutations
- clear_cart()
- set_shipping_country() / set_default_address() / choose_shipping_method()
"""

import asyncio
from unittest.mock import patch

import pytest
import pytest_asyncio

from enums.cart_error_kind import CartErrorKind
from models.cart import CartDTO, CartViewDTO, CartItemCandidateDTO, CartItemPatchDTO
from services.cart import CartService


@pytest_asyncio.fixture
async def product(catalog):
    return await catalog.product("p-1", price=10.0, weight=1.0, track_inventory=True, inventory=5)


class TestGetCart:

    @pytest.mark.asyncio
    async def test_new_cart_is_empty(self, ctx, test_session):
        view = await CartService.get_cart(ctx, "cart", test_session)

        assert isinstance(view, CartViewDTO)
        assert view.items == []
        assert view.totals.grand == 0

    @pytest.mark.asyncio
    async def test_cart_id_stable_across_reads(self, ctx, test_session):
        first = await CartService.get_cart(ctx, "cart", test_session)
        second = await CartService.get_cart(ctx, "cart", test_session)

        assert first.cart_id == second.cart_id

    @pytest.mark.asyncio
    async def test_raw_document(self, ctx, test_session, product):
        """recalculated=False returns the stored document without enrichment."""
        await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1", quantity=2), test_session)

        raw = await CartService.get_cart(ctx, "cart", test_session, recalculated=False)

        assert type(raw) is CartDTO
        assert raw.items[0].quantity == 2


class TestAddItem:

    @pytest.mark.asyncio
    async def test_success_returns_recalculated_cart(self, ctx, test_session, product):
        result = await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1", quantity=2), test_session)

        assert result.success is True
        assert result.error is None
        assert result.cart.totals.subtotal == 20.0
        assert result.cart.items[0].product.title == "Product p-1"

    @pytest.mark.asyncio
    async def test_unknown_product_is_tagged(self, ctx, test_session):
        result = await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="nope"), test_session)

        assert result.success is False
        assert result.cart is None
        assert result.error == CartErrorKind.PRODUCT_NOT_FOUND
        assert result.details == {'product_id': 'nope'}

    @pytest.mark.asyncio
    async def test_variant_on_simple_product_is_tagged(self, ctx, test_session, product):
        """A made-up variant id cannot turn a priced product into a free line."""
        result = await CartService.add_item(
            ctx, "cart", CartItemCandidateDTO(product_id="p-1", variant_id="bogus", quantity=2), test_session
        )

        assert result.success is False
        assert result.error == CartErrorKind.VARIANT_NOT_FOUND

        view = await CartService.get_cart(ctx, "cart", test_session)
        assert view.items == []
        assert view.totals.grand == 0

    @pytest.mark.asyncio
    async def test_stock_limit_on_merge(self, ctx, test_session, product):
        """With 5 in stock and 5 in cart, adding one more is rejected."""
        await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1", quantity=5), test_session)

        result = await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1", quantity=1), test_session)

        assert result.success is False
        assert result.error == CartErrorKind.INSUFFICIENT_STOCK
        assert result.details['requested'] == 6
        assert result.details['available'] == 5

        raw = await CartService.get_cart(ctx, "cart", test_session, recalculated=False)
        assert raw.items[0].quantity == 5

    @pytest.mark.asyncio
    async def test_concurrent_adds_are_not_lost(self, ctx, test_session, catalog):
        """Adds of the same session are serialized."""
        await catalog.product("p-free", price=1.0)

        await asyncio.gather(*[
            CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-free"), test_session)
            for _ in range(5)
        ])

        raw = await CartService.get_cart(ctx, "cart", test_session, recalculated=False)
        assert len(raw.items) == 1
        assert raw.items[0].quantity == 5


class TestUpdateItem:

    @pytest.mark.asyncio
    async def test_update_quantity(self, ctx, test_session, product):
        added = await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)
        item_id = added.cart.items[0].item_id

        result = await CartService.update_item(ctx, "cart", CartItemPatchDTO(item_id=item_id, quantity=4), test_session)

        assert result.success is True
        assert result.cart.totals.subtotal == 40.0

    @pytest.mark.asyncio
    async def test_update_over_stock_is_tagged(self, ctx, test_session, product):
        added = await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)
        item_id = added.cart.items[0].item_id

        result = await CartService.update_item(ctx, "cart", CartItemPatchDTO(item_id=item_id, quantity=6), test_session)

        assert result.success is False
        assert result.error == CartErrorKind.INSUFFICIENT_STOCK

    @pytest.mark.asyncio
    async def test_removing_last_item_clears_shipping(self, ctx, test_session, product, configured_zones):
        """Removing the only item leaves no selection and no chosen method."""
        added = await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)
        await CartService.set_shipping_country(ctx, "US", test_session)
        assert await ctx.get_shipping_method() == "standard"

        result = await CartService.update_item(
            ctx, "cart", CartItemPatchDTO(item_id=added.cart.items[0].item_id, quantity=0), test_session
        )

        assert result.success is True
        assert result.cart.items == []
        assert result.cart.shipping is None
        assert await ctx.get_shipping_method() is None


class TestClearCart:

    @pytest.mark.asyncio
    async def test_clear_starts_a_new_cart(self, ctx, test_session, product):
        added = await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)

        await CartService.clear_cart(ctx, "cart")
        view = await CartService.get_cart(ctx, "cart", test_session)

        assert view.items == []
        assert view.cart_id != added.cart.cart_id


class TestShippingOperations:

    @pytest.mark.asyncio
    async def test_set_shipping_country(self, ctx, test_session, product, configured_zones):
        """Setting a country resolves the zone and selects the first eligible method."""
        await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1", quantity=2), test_session)

        selection = await CartService.set_shipping_country(ctx, "US", test_session)

        assert selection.zone_id == "0"
        assert list(selection.methods) == ["standard", "express"]
        assert selection.active_method == "standard"
        raw = await CartService.get_cart(ctx, "cart", test_session, recalculated=False)
        assert raw.shipping.zone_id == "0"

        view = await CartService.get_cart(ctx, "cart", test_session)
        assert view.totals.shipping == 5.0
        assert view.totals.grand == 25.0

    @pytest.mark.asyncio
    async def test_set_shipping_country_on_empty_cart(self, ctx, test_session, configured_zones):
        """An empty cart gets the zone back without methods; an unshippable country gets None."""
        selection = await CartService.set_shipping_country(ctx, "US", test_session)

        assert selection.zone_id == "0"
        assert selection.methods == {}
        assert selection.active_method is None
        assert await ctx.get_shipping_method() is None

        view = await CartService.get_cart(ctx, "cart", test_session)
        assert view.shipping is None
        assert view.totals.shipping == 0

    @pytest.mark.asyncio
    async def test_unshippable_country_on_empty_cart(self, ctx, test_session, us_and_rest_zones):
        us_only = [zone for zone in us_and_rest_zones if zone.id == "0"]

        with patch('services.shipping.get_shipping_zones', return_value=us_only):
            selection = await CartService.set_shipping_country(ctx, "FR", test_session)

        assert selection is None

    @pytest.mark.asyncio
    async def test_changing_country_forgets_method(self, ctx, test_session, product, configured_zones):
        """A new country resets the chosen method since eligibility depends on the zone."""
        await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)
        await CartService.set_shipping_country(ctx, "US", test_session)
        await CartService.choose_shipping_method(ctx, "express", test_session)

        selection = await CartService.set_shipping_country(ctx, "US", test_session)

        assert selection.active_method == "standard"

    @pytest.mark.asyncio
    async def test_catch_all_country(self, ctx, test_session, product, configured_zones):
        await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)

        selection = await CartService.set_shipping_country(ctx, "FR", test_session)

        assert selection.zone_id == "1"
        assert selection.active_method == "international"

    @pytest.mark.asyncio
    async def test_choose_method(self, ctx, test_session, product, configured_zones):
        await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)
        await CartService.set_shipping_country(ctx, "US", test_session)

        result = await CartService.choose_shipping_method(ctx, "express", test_session)

        assert result.success is True
        assert result.cart.shipping.active_method == "express"
        assert result.cart.shipping.methods["express"].active is True
        assert result.cart.totals.shipping == 15.0

    @pytest.mark.asyncio
    async def test_choose_unavailable_method_is_tagged(self, ctx, test_session, product, configured_zones):
        await CartService.add_item(ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)
        await CartService.set_shipping_country(ctx, "US", test_session)

        result = await CartService.choose_shipping_method(ctx, "international", test_session)

        assert result.success is False
        assert result.error == CartErrorKind.SHIPPING_METHOD_UNAVAILABLE
        assert await ctx.get_shipping_method() == "standard"

    @pytest.mark.asyncio
    async def test_wishlist_has_no_shipping(self, ctx, test_session, product, configured_zones):
        """Only the primary cart carries a shipping selection."""
        await CartService.set_shipping_country(ctx, "US", test_session)

        result = await CartService.add_item(ctx, "wishlist", CartItemCandidateDTO(product_id="p-1"), test_session)

        assert result.cart.shipping is None
        assert result.cart.totals.shipping == 0

    @pytest.mark.asyncio
    async def test_set_default_address(self, customer_ctx, test_session, catalog, product, configured_zones):
        """An explicit address key re-seeds the country and the zone."""
        await catalog.customer([
            {"key": "home", "country": "US|NY", "is_default": True},
            {"key": "holiday", "country": "ES|IB"},
        ])
        await CartService.add_item(customer_ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)
        view = await CartService.get_cart(customer_ctx, "cart", test_session)
        assert view.shipping.zone_id == "0"

        selection = await CartService.set_default_address(customer_ctx, "holiday", test_session)

        assert selection.zone_id == "1"
        assert await customer_ctx.get_shipping_country() == "ES"
        assert (await customer_ctx.get_default_address()).address.region == "IB"

    @pytest.mark.asyncio
    async def test_explicit_country_beats_default_address(self, customer_ctx, test_session, catalog, product,
                                                          configured_zones):
        """A country chosen before the first read is not overridden by the saved address."""
        await catalog.customer([{"key": "home", "country": "US", "is_default": True}])
        await CartService.add_item(customer_ctx, "cart", CartItemCandidateDTO(product_id="p-1"), test_session)

        await CartService.set_shipping_country(customer_ctx, "FR", test_session)
        view = await CartService.get_cart(customer_ctx, "cart", test_session)

        assert view.shipping.zone_id == "1"
        assert await customer_ctx.get_shipping_country() == "FR"
