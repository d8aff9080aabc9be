#!/usr/bin/env python
import os
import uuid
from sdk.octa_client import OctaClient

def main():
    c = OctaClient(base_url=os.getenv("OCTA_URL", "http://127.0.0.1:8080"))

    # -----------------------------
    # Register and log in
    # -----------------------------
    username = f"demo-{uuid.uuid4().hex[:8]}"
    print(f"Registering {username}...")
    print(c.register(username, "demo-password"))
    c.login(username, "demo-password")
    print("Session:", c.session_info())

    # -----------------------------
    # Products
    # -----------------------------
    print("\nAdding products...")
    laptop = c.add_product("Laptop", "14 inch, 16GB RAM", 1500)
    print(laptop)
    print(c.bulk_upload([
        {"name": "Mouse", "description": "Wireless", "price": 25},
        {"name": "Keyboard", "description": "Mechanical", "price": 80},
    ]))
    print(c.update_product(laptop["_id"], price=1399))

    # -----------------------------
    # Categories
    # -----------------------------
    print("\nAdding categories...")
    electronics = c.add_parent_category("Electronics")
    computers = c.add_category("Computers", electronics["_id"])
    print(c.list_categories())
    print("Top-level:", c.list_parent_categories())

    # -----------------------------
    # Commissions
    # -----------------------------
    print("\nSetting a commission...")
    commission = c.add_commission(laptop["_id"], 5.0, computers["_id"])
    print(commission)
    print(c.toggle_commission(commission["_id"]))
    print("By category:", c.list_commissions(category=computers["_id"]))

    # -----------------------------
    # Reviews
    # -----------------------------
    print("\nReviewing...")
    review = c.add_review(laptop["_id"], 4, "Fast, a bit loud")
    print(c.respond_to_review(review["_id"], "Thanks! A quieter fan profile ships next month."))

    # -----------------------------
    # Clean up
    # -----------------------------
    print("\nCleaning up...")
    print(c.delete_commission(commission["_id"]))
    print(c.delete_product(laptop["_id"]))
    print(c.logout())

if __name__ == "__main__":
    main()
