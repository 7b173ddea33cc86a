"""
models/product.py
-----------------
Domain model for products stored in the `products` table.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Product:
    """
    Represents a single product.

    Attributes:
        id: Database primary key (None until the product is saved).
        name: Product name.
        producer: Who makes the product.
        price: Fixed-point price, stored as DECIMAL(19,4).
        expiration_date: Calendar date, no time-of-day.
        creation_time: Assigned by the database on insert; never set by callers.
    """
    name: str
    producer: str
    price: Decimal
    expiration_date: date
    id: Optional[int] = None
    creation_time: Optional[datetime] = None

    def is_persisted(self) -> bool:
        """Returns True once the product has a database id."""
        return self.id is not None

    def __str__(self) -> str:
        return f"#{self.id} {self.name} ({self.producer}) | {self.price} | exp. {self.expiration_date}"
