"""
Vibe Backend — Marketplace Schemas
===================================

What:  Request/response contracts for /api/marketplace.

Enumerations:
    condition: new | like-new | good | fair | poor
    status:    available | sold | reserved  (listing status)
    sortBy:    createdAt | updatedAt | price | title | category | condition
               | status | location
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from vibe.schemas.common import CamelModel, PaginationInfo
from vibe.schemas.user import UserResponse

ProductCondition = Literal["new", "like-new", "good", "fair", "poor"]
ProductStatus = Literal["available", "sold", "reserved"]
ProductSortField = Literal[
    "createdAt", "updatedAt", "price", "title", "category", "condition", "status", "location"
]
SortOrder = Literal["asc", "desc"]


class ProductCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    price: float = Field(ge=0)
    currency: str = Field(default="EUR", min_length=1, max_length=10)
    category: str = Field(min_length=1, max_length=100)
    condition: ProductCondition
    images: List[str] = Field(default_factory=list)
    location: Optional[str] = Field(default=None, max_length=255)
    tags: List[str] = Field(default_factory=list)


class ProductUpdateRequest(CamelModel):
    """Seller-side partial update; only the keys sent are merged."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    price: Optional[float] = Field(default=None, ge=0)
    condition: Optional[ProductCondition] = None
    images: Optional[List[str]] = None
    location: Optional[str] = Field(default=None, max_length=255)
    status: Optional[ProductStatus] = None
    tags: Optional[List[str]] = None


class ProductResponse(CamelModel):
    id: str
    title: str
    description: str
    price: float
    currency: str
    category: str
    condition: ProductCondition
    images: List[str]
    seller: UserResponse
    location: Optional[str] = None
    status: ProductStatus
    tags: List[str]
    created_at: datetime
    updated_at: datetime


class ProductEnvelope(CamelModel):
    success: bool = True
    product: ProductResponse


class ProductMutationResponse(CamelModel):
    success: bool = True
    product: ProductResponse
    message: str


class ProductListResponse(CamelModel):
    success: bool = True
    products: List[ProductResponse]
    pagination: PaginationInfo


class SellerProductsResponse(CamelModel):
    success: bool = True
    products: List[ProductResponse]
    count: int


class CategoriesResponse(CamelModel):
    success: bool = True
    categories: List[str]
