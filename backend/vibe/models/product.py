"""
Vibe Backend — Marketplace Product Model
=========================================

What:  ORM model for the `products` table (marketplace listings).

Lifecycle (listing status):
    available ──▶ reserved ──▶ sold
        ▲             │
        └─────────────┘
    Any transition is allowed through PUT by the seller; POST
    /{id}/mark-sold jumps straight to `sold`. Nothing enforces an order.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, CheckConstraint, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vibe.database import Base
from vibe.models.common import UTCDateTime, new_id, one_of, utcnow
from vibe.models.user import User

PRODUCT_CONDITIONS = ("new", "like-new", "good", "fair", "poor")
PRODUCT_STATUSES = ("available", "sold", "reserved")


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="EUR")
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    condition: Mapped[str] = mapped_column(String(20), nullable=False)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    seller_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="available")
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )

    seller: Mapped[User] = relationship(lazy="selectin")

    # The public listing always filters on status first
    __table_args__ = (
        Index("idx_products_status_created_at", "status", "created_at"),
        CheckConstraint(one_of("condition", PRODUCT_CONDITIONS), name="ck_products_condition"),
        CheckConstraint(one_of("status", PRODUCT_STATUSES), name="ck_products_status"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, title='{self.title}', status='{self.status}')>"
