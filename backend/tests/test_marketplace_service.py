"""
Vibe Backend — Marketplace Service Unit Tests
==============================================

What we test:
    ✅ Anonymous callers cannot mutate; non-sellers get 403
    ✅ Default browse shows available listings only
    ✅ Filters: category, price range, condition, free-text search incl. tags
    ✅ Sorting by field and direction; unknown field rejected
    ✅ Partial update, mark-sold, seller listing, categories
"""

import pytest
from sqlalchemy.exc import IntegrityError

from vibe.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from vibe.models import Product
from vibe.schemas.product import ProductCreateRequest, ProductUpdateRequest
from vibe.services.marketplace_service import MarketplaceService


def _listing(**overrides) -> ProductCreateRequest:
    data = {
        "title": "Road bike",
        "description": "Aluminium frame, 54cm",
        "price": 250.0,
        "category": "sports",
        "condition": "good",
    }
    data.update(overrides)
    return ProductCreateRequest(**data)


class TestMutations:
    def setup_method(self):
        self.service = MarketplaceService()

    @pytest.mark.asyncio
    async def test_create_defaults(self, db_session, make_user):
        seller = await make_user()
        product = await self.service.create_product(db_session, seller, _listing())

        assert product.status == "available"
        assert product.currency == "EUR"
        assert product.images == [] and product.tags == []
        assert product.seller.id == seller.id

    @pytest.mark.asyncio
    async def test_anonymous_create_rejected(self, db_session):
        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.create_product(db_session, None, _listing())
        assert exc_info.value.message == "Authentication required"

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, db_session, make_user):
        seller = await make_user()
        product = await self.service.create_product(
            db_session, seller, _listing(location="Lyon", tags=["bike"])
        )

        updated = await self.service.update_product(
            db_session,
            seller,
            product.id,
            ProductUpdateRequest.model_validate({"price": 199.0, "status": "reserved"}),
        )

        assert updated.price == 199.0
        assert updated.status == "reserved"
        assert updated.title == "Road bike"
        assert updated.location == "Lyon"
        assert updated.tags == ["bike"]

    @pytest.mark.asyncio
    async def test_update_null_required_field_rejected(self, db_session, make_user):
        seller = await make_user()
        product = await self.service.create_product(db_session, seller, _listing())
        with pytest.raises(ValidationError):
            await self.service.update_product(
                db_session, seller, product.id, ProductUpdateRequest.model_validate({"title": None})
            )

    @pytest.mark.asyncio
    async def test_non_seller_forbidden(self, db_session, make_user):
        seller = await make_user()
        buyer = await make_user()
        product = await self.service.create_product(db_session, seller, _listing())

        with pytest.raises(PermissionDeniedError):
            await self.service.update_product(
                db_session, buyer, product.id, ProductUpdateRequest(price=1.0)
            )
        with pytest.raises(PermissionDeniedError):
            await self.service.mark_sold(db_session, buyer, product.id)
        with pytest.raises(PermissionDeniedError):
            await self.service.delete_product(db_session, buyer, product.id)
        with pytest.raises(AuthenticationError):
            await self.service.delete_product(db_session, None, product.id)

    @pytest.mark.asyncio
    async def test_mark_sold_hides_from_default_browse(self, db_session, make_user):
        seller = await make_user()
        product = await self.service.create_product(db_session, seller, _listing())

        sold = await self.service.mark_sold(db_session, seller, product.id)

        assert sold.status == "sold"
        assert (await self.service.list_products(db_session)).products == []
        sold_list = await self.service.list_products(db_session, status="sold")
        assert [p.id for p in sold_list.products] == [product.id]

    @pytest.mark.asyncio
    async def test_delete(self, db_session, make_user):
        seller = await make_user()
        product = await self.service.create_product(db_session, seller, _listing())
        await self.service.delete_product(db_session, seller, product.id)
        with pytest.raises(NotFoundError):
            await self.service.get_product(db_session, product.id)


class TestBrowse:
    def setup_method(self):
        self.service = MarketplaceService()

    async def _seed(self, make_user, db_session):
        seller = await make_user()
        bike = await self.service.create_product(
            db_session, seller, _listing(title="Road bike", price=250.0, tags=["cycling"])
        )
        lamp = await self.service.create_product(
            db_session,
            seller,
            _listing(
                title="Desk lamp",
                description="Warm light",
                price=15.0,
                category="home",
                condition="like-new",
                tags=["Vintage"],
            ),
        )
        sofa = await self.service.create_product(
            db_session,
            seller,
            _listing(title="Sofa", description="Three seats", price=120.0, category="home", condition="fair"),
        )
        return bike, lamp, sofa

    @pytest.mark.asyncio
    async def test_default_newest_first(self, db_session, make_user):
        bike, lamp, sofa = await self._seed(make_user, db_session)
        result = await self.service.list_products(db_session)
        assert [p.id for p in result.products] == [sofa.id, lamp.id, bike.id]
        assert result.pagination.total == 3

    @pytest.mark.asyncio
    async def test_category_and_condition(self, db_session, make_user):
        _, lamp, sofa = await self._seed(make_user, db_session)
        home = await self.service.list_products(db_session, category="home")
        assert {p.id for p in home.products} == {lamp.id, sofa.id}
        fair = await self.service.list_products(db_session, category="home", condition="fair")
        assert [p.id for p in fair.products] == [sofa.id]

    @pytest.mark.asyncio
    async def test_price_range_is_inclusive(self, db_session, make_user):
        _, lamp, sofa = await self._seed(make_user, db_session)
        result = await self.service.list_products(db_session, min_price=15.0, max_price=120.0)
        assert {p.id for p in result.products} == {lamp.id, sofa.id}

    @pytest.mark.asyncio
    async def test_inverted_price_range_rejected(self, db_session):
        with pytest.raises(ValidationError):
            await self.service.list_products(db_session, min_price=100.0, max_price=10.0)

    @pytest.mark.asyncio
    async def test_search_title_description_and_tags(self, db_session, make_user):
        bike, lamp, sofa = await self._seed(make_user, db_session)
        assert [p.id for p in (await self.service.list_products(db_session, search="BIKE")).products] == [bike.id]
        assert [p.id for p in (await self.service.list_products(db_session, search="seats")).products] == [sofa.id]
        assert [p.id for p in (await self.service.list_products(db_session, search="vintage")).products] == [lamp.id]
        assert (await self.service.list_products(db_session, search="piano")).pagination.total == 0

    @pytest.mark.asyncio
    async def test_sort_by_price(self, db_session, make_user):
        bike, lamp, sofa = await self._seed(make_user, db_session)
        asc = await self.service.list_products(db_session, sort_by="price", sort_order="asc")
        desc = await self.service.list_products(db_session, sort_by="price", sort_order="desc")
        assert [p.id for p in asc.products] == [lamp.id, sofa.id, bike.id]
        assert [p.id for p in desc.products] == [bike.id, sofa.id, lamp.id]

    @pytest.mark.asyncio
    async def test_missing_sort_key_sorts_last(self, db_session, make_user):
        seller = await make_user()
        await self.service.create_product(db_session, seller, _listing(title="No place"))
        await self.service.create_product(db_session, seller, _listing(title="B", location="Berlin"))
        await self.service.create_product(db_session, seller, _listing(title="A", location="Amsterdam"))

        asc = await self.service.list_products(db_session, sort_by="location", sort_order="asc")
        desc = await self.service.list_products(db_session, sort_by="location", sort_order="desc")

        assert [p.location for p in asc.products] == ["Amsterdam", "Berlin", None]
        assert [p.location for p in desc.products] == ["Berlin", "Amsterdam", None]

    @pytest.mark.asyncio
    async def test_unknown_sort_field_rejected(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.list_products(db_session, sort_by="sellerId")
        assert exc_info.value.field == "sortBy"

    @pytest.mark.asyncio
    async def test_pagination_after_search(self, db_session, make_user):
        seller = await make_user()
        for i in range(5):
            await self.service.create_product(db_session, seller, _listing(title=f"Chair {i}"))
        await self.service.create_product(db_session, seller, _listing(title="Table"))

        page = await self.service.list_products(db_session, search="chair", page=2, limit=2)

        assert [p.title for p in page.products] == ["Chair 2", "Chair 1"]
        assert page.pagination.total == 5
        assert page.pagination.total_pages == 3


class TestSellerAndCategories:
    def setup_method(self):
        self.service = MarketplaceService()

    @pytest.mark.asyncio
    async def test_seller_products_include_sold(self, db_session, make_user):
        seller = await make_user()
        other = await make_user()
        first = await self.service.create_product(db_session, seller, _listing(title="A"))
        second = await self.service.create_product(db_session, seller, _listing(title="B"))
        await self.service.create_product(db_session, other, _listing(title="C"))
        await self.service.mark_sold(db_session, seller, first.id)

        result = await self.service.list_seller_products(db_session, seller.id)

        assert [p.id for p in result] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_categories_distinct_sorted(self, db_session, make_user):
        seller = await make_user()
        for category in ["home", "sports", "home", "books"]:
            await self.service.create_product(db_session, seller, _listing(category=category))

        assert await self.service.list_categories(db_session) == ["books", "home", "sports"]

    @pytest.mark.asyncio
    async def test_no_categories_yet(self, db_session):
        assert await self.service.list_categories(db_session) == []


class TestColumnConstraints:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("field, value", [("condition", "broken"), ("status", "gone")])
    async def test_unknown_enum_values_rejected_by_database(self, db_session, make_user, field, value):
        seller = await make_user()
        fields = {
            "title": "Lamp",
            "description": "Desk lamp",
            "price": 10.0,
            "category": "home",
            "condition": "good",
            "seller_id": seller.id,
        }
        fields[field] = value
        db_session.add(Product(**fields))

        with pytest.raises(IntegrityError):
            await db_session.flush()
