import json
import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class CartEntry(BaseModel):
    """Snapshot of a product at the time it was added, plus a quantity."""

    id: str
    name: str
    description: str = ""
    price: float
    category: Optional[str] = None
    img_urls: List[str] = []
    quantity: int = Field(default=1, ge=1)

    model_config = ConfigDict(extra="ignore")


class CartService:
    """Locally persisted shopping cart.

    One instance per client session. Every mutation writes the whole cart to
    the injected storage before returning. Prices are never re-checked
    against the server.
    """

    STORAGE_KEY = "cart"

    def __init__(self, storage):
        self._storage = storage
        self._cart: List[CartEntry] = self._load()

    def _load(self) -> List[CartEntry]:
        raw = self._storage.get_item(self.STORAGE_KEY)
        if not raw:
            return []
        try:
            return [CartEntry.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError):
            logger.warning("Discarding unreadable stored cart")
            return []

    def _save(self) -> None:
        self._storage.set_item(
            self.STORAGE_KEY,
            json.dumps([entry.model_dump(mode="json") for entry in self._cart]),
        )

    def _find(self, product_id: str) -> Optional[CartEntry]:
        return next((e for e in self._cart if e.id == product_id), None)

    def add_to_cart(self, product) -> CartEntry:
        """Add one unit of ``product`` (a mapping or a pydantic model)."""
        data = product.model_dump(mode="json") if isinstance(product, BaseModel) else dict(product)
        entry = self._find(str(data.get("id")))
        if entry:
            entry.quantity += 1
        else:
            data["quantity"] = 1
            entry = CartEntry.model_validate(data)
            self._cart.append(entry)
        self._save()
        return entry

    def get_cart(self) -> List[CartEntry]:
        return list(self._cart)

    def get_cart_item_count(self) -> int:
        return sum(e.quantity for e in self._cart)

    def increment_product(self, product_id: str) -> None:
        entry = self._find(product_id)
        if entry:
            entry.quantity += 1
            self._save()

    def decrement_product(self, product_id: str) -> None:
        entry = self._find(product_id)
        if entry:
            entry.quantity -= 1
            if entry.quantity <= 0:
                self._cart.remove(entry)
            self._save()

    def delete_product(self, product_id: str) -> None:
        before = len(self._cart)
        self._cart = [e for e in self._cart if e.id != product_id]
        if len(self._cart) != before:
            self._save()

    def clear(self) -> None:
        self._cart = []
        self._save()

    def get_total(self) -> float:
        return sum(e.price * e.quantity for e in self._cart)
