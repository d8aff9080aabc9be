# sdk/octa_client.py
import requests
import httpx
from typing import Any, Dict, List, Optional


class OctaClient:
    def __init__(self, base_url: str = "http://localhost:8080", token: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        self.token = None
        if token:
            self.set_token(token)

    def set_token(self, token: Optional[str]):
        self.token = token
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})
        else:
            self.session.headers.pop("Authorization", None)

    def _request(self, method: str, path: str, **kwargs):
        r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        r.raise_for_status()
        return r.json()

    # Auth
    def register(self, username: str, password: str):
        return self._request("POST", "/auth/register", json={"username": username, "password": password})

    def login(self, username: str, password: str) -> str:
        token = self._request("POST", "/auth/login", json={"username": username, "password": password})["token"]
        self.set_token(token)
        return token

    def logout(self):
        resp = self._request("POST", "/auth/logout")
        self.set_token(None)
        return resp

    def session_info(self):
        return self._request("GET", "/auth/session")

    # Products
    def list_products(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/products")

    def add_product(self, name: str, description: Optional[str] = None, price: Optional[float] = None):
        payload: Dict[str, Any] = {"name": name}
        if description is not None:
            payload["description"] = description
        if price is not None:
            payload["price"] = price
        return self._request("POST", "/products", json=payload)

    def get_product(self, product_id: str):
        return self._request("GET", f"/products/{product_id}")

    def update_product(self, product_id: str, **fields):
        return self._request("PUT", f"/products/{product_id}", json=fields)

    def delete_product(self, product_id: str):
        return self._request("DELETE", f"/products/{product_id}")

    def bulk_upload(self, products: List[Dict[str, Any]]):
        return self._request("POST", "/products/bulk-upload", json=products)

    # Categories
    def list_categories(self):
        return self._request("GET", "/categories")

    def add_category(self, cname: str, parent_category_id: Optional[str] = None):
        payload = {"cname": cname}
        if parent_category_id:
            payload["parentCategoryID"] = parent_category_id
        return self._request("POST", "/categories", json=payload)

    def update_category(self, category_id: str, **fields):
        return self._request("PUT", f"/categories/{category_id}", json=fields)

    def delete_category(self, category_id: str):
        return self._request("DELETE", f"/categories/{category_id}")

    def list_parent_categories(self):
        return self._request("GET", "/categories/parent")

    def add_parent_category(self, name: str):
        return self._request("POST", "/categories/parent", json={"name": name})

    def update_parent_category(self, category_id: str, name: str):
        return self._request("PUT", f"/categories/parent/{category_id}", json={"name": name})

    def delete_parent_category(self, category_id: str):
        return self._request("DELETE", f"/categories/parent/{category_id}")

    # Commissions
    def list_commissions(self, commission_id: Optional[str] = None, category: Optional[str] = None):
        params = {}
        if commission_id:
            params["id"] = commission_id
        if category:
            params["category"] = category
        return self._request("GET", "/commissions/products", params=params)

    def add_commission(self, product_id: str, percentage: float, parent_category_id: Optional[str] = None):
        payload: Dict[str, Any] = {"productID": product_id, "commissionPercentage": percentage}
        if parent_category_id:
            payload["parentCategoryID"] = parent_category_id
        return self._request("POST", "/commissions/products", json=payload)

    def get_commission(self, commission_id: str):
        return self._request("GET", f"/commissions/products/{commission_id}")

    def update_commission(self, commission_id: str, **fields):
        return self._request("PUT", f"/commissions/products/{commission_id}", json=fields)

    def delete_commission(self, commission_id: str):
        return self._request("DELETE", f"/commissions/products/{commission_id}")

    def toggle_commission(self, commission_id: str):
        return self._request("PATCH", f"/commissions/products/{commission_id}/status")

    def commission_history(self, commission_id: str):
        return self._request("GET", f"/commissions/products/{commission_id}/history")

    # Reviews
    def list_reviews(self):
        return self._request("GET", "/reviews")

    def add_review(self, product_id: str, rating: float, comment: Optional[str] = None):
        payload: Dict[str, Any] = {"productId": product_id, "rating": rating}
        if comment is not None:
            payload["comment"] = comment
        return self._request("POST", "/reviews", json=payload)

    def respond_to_review(self, review_id: str, response: str):
        return self._request("POST", "/reviews/respond", json={"reviewId": review_id, "response": response})

    # Async toggle (example)
    async def toggle_commission_async(self, commission_id: str):
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.patch(f"{self.base_url}/commissions/products/{commission_id}/status", headers=headers)
            return r


if __name__ == "__main__":
    import argparse
    import os

    parser = argparse.ArgumentParser(description="octa-api client")
    parser.add_argument("--base-url", default=os.getenv("OCTA_URL", "http://127.0.0.1:8080"))
    parser.add_argument("--token", default=os.getenv("OCTA_TOKEN"), help="Bearer token from login")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lg = subparsers.add_parser("login", help="Log in and print a token")
    lg.add_argument("--username", required=True)
    lg.add_argument("--password", required=True)

    rg = subparsers.add_parser("register", help="Create a user")
    rg.add_argument("--username", required=True)
    rg.add_argument("--password", required=True)

    subparsers.add_parser("session", help="Show who the token belongs to")
    subparsers.add_parser("list-products", help="List all products")

    ap = subparsers.add_parser("add-product", help="Create a product")
    ap.add_argument("--name", required=True)
    ap.add_argument("--description")
    ap.add_argument("--price", type=float)

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--product-id", required=True)

    subparsers.add_parser("list-categories", help="List all categories")

    ac = subparsers.add_parser("add-category", help="Create a category")
    ac.add_argument("--cname", required=True)
    ac.add_argument("--parent-id")

    lc = subparsers.add_parser("list-commissions", help="List commissions")
    lc.add_argument("--id")
    lc.add_argument("--category")

    tc = subparsers.add_parser("toggle-commission", help="Flip a commission's active flag")
    tc.add_argument("--commission-id", required=True)

    subparsers.add_parser("list-reviews", help="List all reviews")

    args = parser.parse_args()
    c = OctaClient(base_url=args.base_url, token=args.token)

    if args.command == "login":
        print(c.login(args.username, args.password))
    elif args.command == "register":
        print(c.register(args.username, args.password))
    elif args.command == "session":
        print(c.session_info())
    elif args.command == "list-products":
        print(c.list_products())
    elif args.command == "add-product":
        print(c.add_product(args.name, args.description, args.price))
    elif args.command == "delete-product":
        print(c.delete_product(args.product_id))
    elif args.command == "list-categories":
        print(c.list_categories())
    elif args.command == "add-category":
        print(c.add_category(args.cname, args.parent_id))
    elif args.command == "list-commissions":
        print(c.list_commissions(args.id, args.category))
    elif args.command == "toggle-commission":
        print(c.toggle_commission(args.commission_id))
    elif args.command == "list-reviews":
        print(c.list_reviews())
