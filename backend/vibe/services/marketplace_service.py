"""
Vibe Backend — Marketplace Service
===================================

What:  Product listings: public browsing plus seller-only mutations.
Who:   Called by the /api/marketplace route handlers.

Listing pipeline (GET /api/marketplace):
    1. SQL:    status (default 'available'), category, condition, price range
    2. SQL:    ORDER BY <sortBy> <sortOrder>, missing values last
    3. Python: free-text search over title, description and tags
    4. Python: slice the requested page

    Search runs in Python because tags are a JSON list; matching them in SQL
    would differ between SQLite and PostgreSQL.

Mutations need an authenticated caller (401 otherwise) who is the seller
(403 otherwise).
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.exceptions import AuthenticationError, NotFoundError, PermissionDeniedError, ValidationError
from vibe.models import Product, User
from vibe.models.common import utcnow
from vibe.schemas.common import PaginationInfo
from vibe.schemas.product import (
    ProductCreateRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
)

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "price": Product.price,
    "title": Product.title,
    "category": Product.category,
    "condition": Product.condition,
    "status": Product.status,
    "location": Product.location,
}

_REQUIRED_PRODUCT_FIELDS = {
    "title", "description", "price", "condition", "images", "status", "tags",
}


def _matches_search(product: Product, term: str) -> bool:
    return (
        term in product.title.lower()
        or term in product.description.lower()
        or any(term in tag.lower() for tag in (product.tags or []))
    )


class MarketplaceService:
    def _require_user(self, user: Optional[User]) -> User:
        if user is None:
            raise AuthenticationError("Authentication required")
        return user

    def _require_seller(self, product: Product, user: User) -> None:
        if product.seller_id != user.id:
            logger.warning("User %s tried to modify product %s", user.id, product.id)
            raise PermissionDeniedError("You can only modify your own products")

    async def _get_product_or_404(self, db: AsyncSession, product_id: str) -> Product:
        product = await db.get(Product, product_id)
        if product is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return product

    async def list_products(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 20,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        condition: Optional[str] = None,
        status: str = "available",
        search: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> ProductListResponse:
        """
        Filter, sort and paginate listings.

        Raises:
            ValidationError: unknown sort field, or min price above max price
        """
        column = SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(
                f"Cannot sort by '{sort_by}'",
                field="sortBy",
                context={"allowed": sorted(SORT_COLUMNS)},
            )
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationError("minPrice cannot be greater than maxPrice", field="minPrice")

        stmt = select(Product).where(Product.status == status)
        if category:
            stmt = stmt.where(Product.category == category)
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        if condition:
            stmt = stmt.where(Product.condition == condition)

        ordering = column.asc() if sort_order == "asc" else column.desc()
        stmt = stmt.order_by(ordering.nulls_last(), Product.created_at.desc())

        products: List[Product] = list((await db.execute(stmt)).scalars().all())

        if search:
            term = search.lower()
            products = [p for p in products if _matches_search(p, term)]

        start = (page - 1) * limit
        return ProductListResponse(
            products=[ProductResponse.model_validate(p) for p in products[start:start + limit]],
            pagination=PaginationInfo.build(page=page, limit=limit, total=len(products)),
        )

    async def get_product(self, db: AsyncSession, product_id: str) -> ProductResponse:
        return ProductResponse.model_validate(await self._get_product_or_404(db, product_id))

    async def create_product(
        self, db: AsyncSession, user: Optional[User], data: ProductCreateRequest
    ) -> ProductResponse:
        seller = self._require_user(user)
        product = Product(
            title=data.title,
            description=data.description,
            price=data.price,
            currency=data.currency,
            category=data.category,
            condition=data.condition,
            images=list(data.images),
            location=data.location,
            tags=list(data.tags),
            status="available",
            seller=seller,
            seller_id=seller.id,
        )
        db.add(product)
        await db.flush()
        logger.info("Product %s listed by %s", product.id, seller.id)
        return ProductResponse.model_validate(product)

    async def update_product(
        self,
        db: AsyncSession,
        user: Optional[User],
        product_id: str,
        data: ProductUpdateRequest,
    ) -> ProductResponse:
        """Merge the keys present in the body; null clears location only."""
        seller = self._require_user(user)
        product = await self._get_product_or_404(db, product_id)
        self._require_seller(product, seller)

        for field in data.model_fields_set:
            value = getattr(data, field)
            if value is None and field in _REQUIRED_PRODUCT_FIELDS:
                raise ValidationError(f"{field} cannot be null", field=field)
            if isinstance(value, list):
                value = list(value)
            setattr(product, field, value)
        product.updated_at = utcnow()
        await db.flush()
        logger.info("Product %s updated: %s", product.id, sorted(data.model_fields_set))
        return ProductResponse.model_validate(product)

    async def delete_product(self, db: AsyncSession, user: Optional[User], product_id: str) -> None:
        seller = self._require_user(user)
        product = await self._get_product_or_404(db, product_id)
        self._require_seller(product, seller)
        await db.delete(product)
        await db.flush()
        logger.info("Product %s deleted by %s", product_id, seller.id)

    async def mark_sold(
        self, db: AsyncSession, user: Optional[User], product_id: str
    ) -> ProductResponse:
        seller = self._require_user(user)
        product = await self._get_product_or_404(db, product_id)
        self._require_seller(product, seller)
        product.status = "sold"
        product.updated_at = utcnow()
        await db.flush()
        logger.info("Product %s marked sold", product.id)
        return ProductResponse.model_validate(product)

    async def list_seller_products(self, db: AsyncSession, seller_id: str) -> List[ProductResponse]:
        """All listings of one seller regardless of status, newest first."""
        result = await db.execute(
            select(Product)
            .where(Product.seller_id == seller_id)
            .order_by(Product.created_at.desc())
        )
        return [ProductResponse.model_validate(p) for p in result.scalars().all()]

    async def list_categories(self, db: AsyncSession) -> List[str]:
        result = await db.execute(
            select(Product.category).distinct().order_by(Product.category)
        )
        return list(result.scalars().all())


marketplace_service = MarketplaceService()
