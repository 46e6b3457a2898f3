import requests
from typing import Any, Dict, List, Optional, Tuple


class ProductsClient:
    """Thin wrapper over the product API.

    Every request carries ``Accept-Language`` from the language service.
    HTTP errors are raised to the caller via ``raise_for_status``.
    """

    def __init__(self, base_url: str = "http://localhost:3000/api/prod", language=None, session=None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Accept-Language": self.language.current_language if self.language else "en"}
        if token:
            headers["x-auth-token"] = token
        return headers

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None):
        r = self.session.get(f"{self.base_url}{path}", params=params, headers=self._headers(), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_products(self) -> List[Dict[str, Any]]:
        return self._get("/")

    def get_product_by_id(self, product_id: str) -> Dict[str, Any]:
        return self._get(f"/{product_id}")

    def get_categories(self) -> List[Dict[str, Any]]:
        return self._get("/categories")

    def get_by_category(self, category: str) -> List[Dict[str, Any]]:
        return self._get(f"/category/{category}")

    def search(self, search: str = "", sort_by: str = "", category: str = "") -> List[Dict[str, Any]]:
        params = {"search": search}
        if sort_by:
            params["sort_by"] = sort_by
        if category:
            params["category"] = category
        return self._get("/searchsort", params=params)

    def get_feedbacks(self, product_id: str) -> List[Dict[str, Any]]:
        # A product without feedback answers 404, which surfaces as HTTPError here
        return self._get(f"/feedbacks/{product_id}")

    def submit_feedback(self, token: str, product_id: str, feedback: str, rate: int) -> str:
        r = self.session.post(
            f"{self.base_url}/feedback",
            json={"productId": product_id, "feedback": feedback, "rate": rate},
            headers=self._headers(token),
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.text

    def add_product(self, fields: Dict[str, Any], images: List[Tuple[str, bytes, str]]) -> str:
        """Upload a product. ``images`` holds ``(filename, content, content_type)`` tuples."""
        data = {}
        for key in ("name", "description", "price", "category"):
            if fields.get(key) is not None:
                data[key] = str(fields[key])
        data["show"] = "true" if fields.get("show", True) else "false"
        files = [("prodimg", image) for image in images]
        r = self.session.post(
            f"{self.base_url}/",
            data=data,
            files=files,
            headers=self._headers(),
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.text
