import enum
from datetime import datetime

from sqlalchemy import Column, String, Float, Boolean, DateTime, Enum, JSON

from app.database import Base
from app.utils.ids import new_object_id


class Category(str, enum.Enum):
    ELECTRONICS = "Electronics"
    MOBILES = "Mobiles"
    CLOTHES = "Clothes"
    BOOKS = "Books"
    HOME = "Home"
    GROCERY = "Grocery"
    HEALTH = "Health"

    @classmethod
    def parse(cls, value):
        """Return the matching member, or None when value is outside the set."""
        try:
            return cls(value)
        except ValueError:
            return None


class Product(Base):
    __tablename__ = "products"
    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=False)
    price = Column(Float, nullable=False)
    images = Column(JSON, nullable=False, default=list)  # Ordered list of stored file names
    category = Column(
        Enum(Category, name="product_category", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    show = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
