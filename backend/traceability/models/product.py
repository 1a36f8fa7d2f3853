"""
Traceability API — Product SQLAlchemy Model
============================================

What:  ORM model representing the `products` table.
Why:   Every journey starts from a Product row; the track query LEFT JOINs
       the three log tables onto it.
How:   Inherits from Base; created by `Database.create_tables` at startup.

Identifier naming:
    Table and column names are the lower-cased forms PostgreSQL gives to
    unquoted identifiers (ProductID → productid), so the models line up with
    a database created from plain DDL.
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from traceability.database import Base


class Product(Base):
    """
    A traced item.

    Lifecycle:
        Created once by POST /api/product/init; never updated or deleted.
    """

    __tablename__ = "products"

    # Format: PID-<epoch-millis>-<0..999>, generated by TraceService
    product_id: Mapped[str] = mapped_column(
        "productid",
        String(64),
        primary_key=True,
    )

    # Both nullable: init performs no presence check
    product_type: Mapped[Optional[str]] = mapped_column("producttype", String(255), nullable=True)
    batch_id: Mapped[Optional[str]] = mapped_column("batchid", String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Product(product_id='{self.product_id}', product_type='{self.product_type}')>"
