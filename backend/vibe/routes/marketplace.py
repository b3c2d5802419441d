"""
Vibe Backend — Marketplace Route Handlers
==========================================

What:  /api/marketplace: public listing browse, seller-only mutations.
Auth:  Optional. Reads work anonymously; create/update/delete/mark-sold
       answer 401 without a valid token and 403 for non-sellers.

Query parameters keep the camelCase names clients already send
(minPrice, maxPrice, sortBy, sortOrder).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.database import get_db_session
from vibe.dependencies import get_optional_user
from vibe.models import User
from vibe.schemas.common import ErrorResponse, MessageResponse
from vibe.schemas.product import (
    CategoriesResponse,
    ProductCondition,
    ProductCreateRequest,
    ProductEnvelope,
    ProductListResponse,
    ProductMutationResponse,
    ProductSortField,
    ProductStatus,
    ProductUpdateRequest,
    SellerProductsResponse,
    SortOrder,
)
from vibe.services.marketplace_service import marketplace_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/marketplace", tags=["Marketplace"])

_MUTATION_ERRORS = {
    401: {"description": "Authentication required", "model": ErrorResponse},
    403: {"description": "Not the seller", "model": ErrorResponse},
    404: {"description": "Product not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ProductListResponse,
    summary="Browse listings",
    description=(
        "Filters are combined with AND. `search` matches title, description or any tag, "
        "case-insensitively. Listings without a value for the sort field come last."
    ),
)
@router.get("/", response_model=ProductListResponse, include_in_schema=False)
async def list_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    category: Optional[str] = Query(default=None),
    min_price: Optional[float] = Query(default=None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(default=None, ge=0, alias="maxPrice"),
    condition: Optional[ProductCondition] = Query(default=None),
    status: ProductStatus = Query(default="available"),
    search: Optional[str] = Query(default=None),
    sort_by: ProductSortField = Query(default="createdAt", alias="sortBy"),
    sort_order: SortOrder = Query(default="desc", alias="sortOrder"),
    db: AsyncSession = Depends(get_db_session),
) -> ProductListResponse:
    return await marketplace_service.list_products(
        db,
        page=page,
        limit=limit,
        category=category,
        min_price=min_price,
        max_price=max_price,
        condition=condition,
        status=status,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/categories", response_model=CategoriesResponse, summary="Distinct categories")
async def list_categories(db: AsyncSession = Depends(get_db_session)) -> CategoriesResponse:
    return CategoriesResponse(categories=await marketplace_service.list_categories(db))


@router.get(
    "/seller/{seller_id}",
    response_model=SellerProductsResponse,
    summary="All listings of a seller",
)
async def list_seller_products(
    seller_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SellerProductsResponse:
    products = await marketplace_service.list_seller_products(db, seller_id)
    return SellerProductsResponse(products=products, count=len(products))


@router.get(
    "/{product_id}",
    response_model=ProductEnvelope,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get a listing",
)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    return ProductEnvelope(product=await marketplace_service.get_product(db, product_id))


@router.post(
    "",
    status_code=201,
    response_model=ProductMutationResponse,
    responses={401: _MUTATION_ERRORS[401]},
    summary="Create a listing",
)
@router.post("/", status_code=201, response_model=ProductMutationResponse, include_in_schema=False)
async def create_product(
    body: ProductCreateRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProductMutationResponse:
    product = await marketplace_service.create_product(db, current_user, body)
    return ProductMutationResponse(product=product, message="Product created successfully")


@router.put(
    "/{product_id}",
    response_model=ProductMutationResponse,
    responses=_MUTATION_ERRORS,
    summary="Edit a listing",
)
async def update_product(
    product_id: str,
    body: ProductUpdateRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProductMutationResponse:
    product = await marketplace_service.update_product(db, current_user, product_id, body)
    return ProductMutationResponse(product=product, message="Product updated successfully")


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses=_MUTATION_ERRORS,
    summary="Delete a listing",
)
async def delete_product(
    product_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await marketplace_service.delete_product(db, current_user, product_id)
    return MessageResponse(message="Product deleted successfully")


@router.post(
    "/{product_id}/mark-sold",
    response_model=ProductMutationResponse,
    responses=_MUTATION_ERRORS,
    summary="Mark a listing as sold",
)
async def mark_sold(
    product_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProductMutationResponse:
    product = await marketplace_service.mark_sold(db, current_user, product_id)
    return ProductMutationResponse(product=product, message="Product marked as sold")
