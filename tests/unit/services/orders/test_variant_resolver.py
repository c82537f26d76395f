"""Tests for SKU → variant resolution."""

import pytest

from order_import.services.orders.resolvers import VariantResolver
from order_import.utils.error_handler import ErrorCode, VariantNotFoundException


@pytest.fixture
def resolver(reference_repo):
    return VariantResolver(reference_repo=reference_repo)


class TestResolve:
    @pytest.mark.asyncio
    async def test_variant_id_payload_is_returned_as_copy(self, resolver):
        payload = {"variant_id": 2, "quantity": 1}

        resolved = await resolver.resolve(payload)

        assert resolved == payload
        assert resolved is not payload

    @pytest.mark.asyncio
    async def test_sku_is_replaced_by_variant_id(self, resolver):
        payload = {"sku": "MUG", "quantity": 3}

        resolved = await resolver.resolve(payload)

        assert resolved == {"variant_id": 3, "quantity": 3}
        assert payload == {"sku": "MUG", "quantity": 3}

    @pytest.mark.asyncio
    async def test_deleted_variant_is_not_resolved(self, resolver):
        with pytest.raises(VariantNotFoundException) as exc_info:
            await resolver.resolve({"sku": "RETIRED"})

        assert exc_info.value.criteria == {"sku": "RETIRED"}

    @pytest.mark.asyncio
    async def test_sku_match_is_exact(self, resolver):
        with pytest.raises(VariantNotFoundException):
            await resolver.resolve({"sku": "mug"})

    @pytest.mark.asyncio
    async def test_missing_reference(self, resolver):
        with pytest.raises(VariantNotFoundException) as exc_info:
            await resolver.resolve({"quantity": 1})

        assert exc_info.value.error_code == ErrorCode.VARIANT_NOT_FOUND


class TestGetVariant:
    @pytest.mark.asyncio
    async def test_loads_variant(self, resolver):
        variant = await resolver.get_variant("1")

        assert variant.sku == "SHIRT-S"

    @pytest.mark.asyncio
    async def test_unknown_id(self, resolver):
        with pytest.raises(VariantNotFoundException) as exc_info:
            await resolver.get_variant(999)

        assert exc_info.value.criteria == {"id": 999}

    @pytest.mark.asyncio
    async def test_non_numeric_id(self, resolver):
        with pytest.raises(VariantNotFoundException):
            await resolver.get_variant("abc")
